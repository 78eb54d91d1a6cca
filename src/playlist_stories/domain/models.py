"""Core playlist-to-story domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

Stage = Literal["raw-transcript", "structured-transcript", "summary", "story"]
ResumeGranularity = Literal["whole-stage", "per-chunk"]
BatchFailureMode = Literal["halt", "continue"]

STAGE_ORDER: Final[tuple[Stage, ...]] = (
    "raw-transcript",
    "structured-transcript",
    "summary",
    "story",
)
STAGE_SUBDIRS: Final[dict[Stage, str]] = {
    "raw-transcript": "transcripts/raw",
    "structured-transcript": "transcripts/structured",
    "summary": "summaries",
    "story": "stories",
}
STAGE_EXTENSIONS: Final[dict[Stage, str]] = {
    "raw-transcript": "txt",
    "structured-transcript": "md",
    "summary": "md",
    "story": "md",
}
DEBUG_SUBDIR: Final[str] = "debug"


@dataclass(frozen=True)
class Video:
    """One playlist entry; the identity of every derived artifact."""

    video_id: str
    title: str
    ordinal_index: int

    @property
    def ordinal(self) -> int:
        """One-based position used in artifact filenames."""
        return self.ordinal_index + 1


@dataclass(frozen=True)
class TranscriptLine:
    text: str


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of a stage's input text."""

    sequence_number: int
    start_offset: int
    text: str

    @property
    def end_offset(self) -> int:
        return self.start_offset + len(self.text)


@dataclass(frozen=True)
class ResumabilityPolicy:
    """Whether a stage may reuse persisted artifacts, and at what granularity."""

    enabled: bool = True
    granularity: ResumeGranularity = "whole-stage"

    @property
    def per_chunk(self) -> bool:
        return self.enabled and self.granularity == "per-chunk"


def default_resumability() -> dict[Stage, ResumabilityPolicy]:
    """Reference policies: every stage memoized except the story stage."""
    return {
        "raw-transcript": ResumabilityPolicy(),
        "structured-transcript": ResumabilityPolicy(),
        "summary": ResumabilityPolicy(),
        "story": ResumabilityPolicy(enabled=False),
    }
