from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from playlist_stories.domain.models import TranscriptLine, Video


@dataclass(frozen=True)
class GeneratorCall:
    system_prompt: str
    user_prompt: str
    model: str
    max_tokens: int | None
    temperature: float | None


Responder = Callable[[str, str], str]


class ScriptedGenerator:
    """Generator that answers by prompt kind and records every call."""

    def __init__(self, responder: Responder | None = None) -> None:
        self.calls: list[GeneratorCall] = []
        self._responder = responder or default_responder

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        self.calls.append(
            GeneratorCall(system_prompt, user_prompt, model, max_tokens, temperature)
        )
        return self._responder(system_prompt, user_prompt)

    def calls_of(self, kind: str) -> list[GeneratorCall]:
        return [call for call in self.calls if prompt_kind(call.system_prompt) == kind]


def prompt_kind(system_prompt: str) -> str:
    if system_prompt.startswith("Find the best natural sentence"):
        return "boundary"
    if "well-punctuated" in system_prompt:
        return "punctuation"
    if "numbered list" in system_prompt:
        return "outline"
    if "storyteller" in system_prompt:
        return "story"
    if system_prompt.startswith("Summarize"):
        return "compaction"
    return "unknown"


def default_responder(system_prompt: str, user_prompt: str) -> str:
    kind = prompt_kind(system_prompt)
    if kind == "boundary":
        return "not a number"
    if kind == "punctuation":
        return user_prompt.rsplit("\n\n", 1)[-1].upper()
    if kind == "outline":
        return "1. An outline item."
    if kind == "story":
        return "Once upon a time."
    return "compacted"


@dataclass
class RecordingReporter:
    events: list[tuple[str, str]] = field(default_factory=list)

    def start(self, message: str) -> None:
        self.events.append(("start", message))

    def succeed(self, message: str) -> None:
        self.events.append(("succeed", message))

    def fail(self, message: str) -> None:
        self.events.append(("fail", message))

    def info(self, message: str) -> None:
        self.events.append(("info", message))

    def messages(self, kind: str) -> list[str]:
        return [message for event, message in self.events if event == kind]


class FakeTranscripts:
    def __init__(self, texts: dict[str, str], failures: dict[str, Exception] | None = None):
        self._texts = texts
        self._failures = failures or {}
        self.requests: list[str] = []

    def fetch_transcript(self, video_id: str) -> list[TranscriptLine]:
        self.requests.append(video_id)
        if video_id in self._failures:
            raise self._failures[video_id]
        return [TranscriptLine(text=word) for word in self._texts[video_id].split(" ")]


class FakePlaylist:
    def __init__(self, videos: list[Video]) -> None:
        self._videos = videos
        self.requests: list[tuple[str, int | None]] = []

    def list_videos(self, playlist_id: str, *, max_items: int | None = None) -> list[Video]:
        self.requests.append((playlist_id, max_items))
        return list(self._videos)


def one_token_per_word(word: str) -> int:
    return 1


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def video() -> Video:
    return Video(video_id="vid-1", title="Ada Lovelace: First Programmer", ordinal_index=0)
