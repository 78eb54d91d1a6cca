"""Typed result objects returned by the playlist workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

VideoStatus = Literal["succeeded", "failed", "cancelled"]


@dataclass(frozen=True)
class VideoRunResult:
    """Outcome of the stage pipeline for one video."""

    video_id: str
    title: str
    ordinal: int
    status: VideoStatus
    failed_stage: str | None = None
    error: str | None = None
    response_body: object | None = None
    artifact_paths: dict[str, str] = field(default_factory=dict)
    timing_seconds: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchRunResult:
    """Outcome of one playlist run; written as ``run_summary.json``."""

    playlist_id: str
    started_at_utc: str
    finished_at_utc: str
    total_videos: int
    succeeded_videos: int
    failed_videos: int
    cancelled: bool
    halted: bool
    elapsed_seconds: float
    videos: list[VideoRunResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed_videos == 0
