"""Stage checkpoints: artifact reuse decisions on top of an ``ArtifactStore``."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from playlist_stories.domain.models import ResumabilityPolicy, Stage, Video
from playlist_stories.domain.ports import ArtifactStore

logger = logging.getLogger(__name__)


class ChunkRecord(BaseModel):
    """Persisted result of one chunk, enough to resume past it."""

    model_config = ConfigDict(extra="forbid")

    sequence_number: int = Field(ge=1)
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    source_text: str
    output: str
    context_after: str | None = None


class StageCheckpoint:
    """Resume bookkeeping for one ``(video, stage)`` pair."""

    def __init__(
        self,
        store: ArtifactStore,
        video: Video,
        stage: Stage,
        policy: ResumabilityPolicy,
    ) -> None:
        self._store = store
        self._video = video
        self._stage = stage
        self._policy = policy
        self._has_partial = False

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def policy(self) -> ResumabilityPolicy:
        return self._policy

    def load_completed(self) -> str | None:
        """Whole-stage memo: the final artifact when reuse is enabled."""
        if not self._policy.enabled:
            return None
        return self._store.read(self._video, self._stage)

    def load_chunk(
        self, sequence_number: int, start_offset: int, source_text: str
    ) -> ChunkRecord | None:
        """Per-chunk memo, honoured only for the exact same source text at the cursor."""
        record = self._read_chunk(sequence_number)
        if record is None:
            return None
        if record.start_offset != start_offset or record.source_text != source_text:
            return None
        return record

    def load_chunk_within(
        self, sequence_number: int, cursor: int, text: str
    ) -> ChunkRecord | None:
        """Per-chunk memo for character chunking, where the end offset is not yet known."""
        record = self._read_chunk(sequence_number)
        if record is None or record.start_offset != cursor:
            return None
        if not cursor < record.end_offset <= len(text):
            return None
        if text[cursor : record.end_offset] != record.source_text:
            return None
        return record

    def _read_chunk(self, sequence_number: int) -> ChunkRecord | None:
        if not self._policy.per_chunk:
            return None
        payload = self._store.read_chunk(self._video, self._stage, sequence_number)
        if payload is None:
            return None
        try:
            return ChunkRecord.model_validate_json(payload)
        except ValidationError:
            logger.warning(
                "checkpoint.invalid_chunk stage=%s video_id=%s sequence=%s",
                self._stage,
                self._video.video_id,
                sequence_number,
            )
            return None

    def record_chunk(self, record: ChunkRecord, *, separator: str, reused: bool = False) -> None:
        """Append the chunk output to in-progress output and, per chunk, persist it."""
        if not self._has_partial:
            self._store.begin_partial(self._video, self._stage)
            self._store.append_partial(self._video, self._stage, record.output)
            self._has_partial = True
        else:
            self._store.append_partial(self._video, self._stage, separator + record.output)
        if self._policy.per_chunk and not reused:
            self._store.write_chunk(
                self._video,
                self._stage,
                record.sequence_number,
                record.model_dump_json(indent=2),
            )

    def complete(self, content: str) -> Path:
        path = self._store.write(self._video, self._stage, content)
        self._store.discard_partial(self._video, self._stage)
        return path
