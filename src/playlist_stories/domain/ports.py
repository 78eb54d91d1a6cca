"""Ports for the remote services, durable storage and progress reporting."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from playlist_stories.domain.models import Stage, TranscriptLine, Video


class PlaylistSource(Protocol):
    """Lists the videos of a playlist in playlist order."""

    def list_videos(self, playlist_id: str, *, max_items: int | None = None) -> list[Video]:
        ...


class TranscriptSource(Protocol):
    """Fetches caption lines for one video."""

    def fetch_transcript(self, video_id: str) -> list[TranscriptLine]:
        ...


class TextGenerator(Protocol):
    """Single-turn chat completion."""

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        ...


class ArtifactStore(Protocol):
    """File-backed artifacts keyed by video, stage and optional chunk number."""

    def path_for(self, video: Video, stage: Stage) -> Path:
        ...

    def read(self, video: Video, stage: Stage) -> str | None:
        ...

    def write(self, video: Video, stage: Stage, content: str) -> Path:
        ...

    def begin_partial(self, video: Video, stage: Stage) -> None:
        ...

    def append_partial(self, video: Video, stage: Stage, content: str) -> None:
        ...

    def discard_partial(self, video: Video, stage: Stage) -> None:
        ...

    def read_chunk(self, video: Video, stage: Stage, sequence_number: int) -> str | None:
        ...

    def write_chunk(
        self, video: Video, stage: Stage, sequence_number: int, payload: str
    ) -> Path:
        ...

    def write_debug(self, video: Video, sequence_number: int, payload: str) -> Path:
        ...


class ProgressReporter(Protocol):
    """Observer notified around pipeline work; never affects control flow."""

    def start(self, message: str) -> None:
        ...

    def succeed(self, message: str) -> None:
        ...

    def fail(self, message: str) -> None:
        ...

    def info(self, message: str) -> None:
        ...
