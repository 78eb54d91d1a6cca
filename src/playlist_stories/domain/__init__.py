"""Domain models and ports for playlist story generation."""

from playlist_stories.domain.errors import PipelineCancelled, UpstreamCallError
from playlist_stories.domain.models import (
    STAGE_ORDER,
    Chunk,
    ResumabilityPolicy,
    Stage,
    TranscriptLine,
    Video,
    default_resumability,
)
from playlist_stories.domain.ports import (
    ArtifactStore,
    PlaylistSource,
    ProgressReporter,
    TextGenerator,
    TranscriptSource,
)

__all__ = [
    "STAGE_ORDER",
    "ArtifactStore",
    "Chunk",
    "PipelineCancelled",
    "PlaylistSource",
    "ProgressReporter",
    "ResumabilityPolicy",
    "Stage",
    "TextGenerator",
    "TranscriptLine",
    "TranscriptSource",
    "UpstreamCallError",
    "Video",
    "default_resumability",
]
