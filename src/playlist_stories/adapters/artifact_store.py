"""File-system artifact store; file existence is the only resume signal."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Final

from playlist_stories.domain.models import (
    DEBUG_SUBDIR,
    STAGE_EXTENSIONS,
    STAGE_SUBDIRS,
    Stage,
    Video,
)

_WHITESPACE = re.compile(r"\s+")
_ILLEGAL = re.compile(r'[/\?<>\\:\*\|"]')
_CONTROL = re.compile(r"[\x00-\x1f\x80-\x9f]")
_RESERVED = re.compile(r"^\.+$")
_WINDOWS_RESERVED = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_TRAILING = re.compile(r"[\. ]+$")
_MAX_TITLE_BYTES: Final[int] = 200
PARTIAL_SUFFIX: Final[str] = ".partial"


def sanitize_title(title: str) -> str:
    """Lowercase, underscore-separated, filesystem-safe form of a video title."""
    formatted = _WHITESPACE.sub("_", title).lower()
    cleaned = _CONTROL.sub("", _ILLEGAL.sub("", formatted))
    cleaned = _RESERVED.sub("", cleaned)
    cleaned = _WINDOWS_RESERVED.sub("", cleaned)
    cleaned = _WINDOWS_TRAILING.sub("", cleaned)
    encoded = cleaned.encode("utf-8")[:_MAX_TITLE_BYTES]
    cleaned = encoded.decode("utf-8", errors="ignore")
    return cleaned or "untitled"


def artifact_filename(video: Video, extension: str, *, chunk: int | None = None) -> str:
    stem = f"{video.ordinal}_{sanitize_title(video.title)}"
    if chunk is not None:
        stem = f"{stem}.chunk-{chunk:04d}"
    return f"{stem}.{extension}"


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temporary = path.with_name(f"{path.name}.tmp")
    temporary.write_text(content, encoding="utf-8")
    os.replace(temporary, path)


class FileArtifactStore:
    """Artifacts under ``<output_dir>/<sub_dir>/<index+1>_<title>.<ext>``."""

    def __init__(self, output_dir: Path | str) -> None:
        self._output_dir = Path(output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, video: Video, stage: Stage) -> Path:
        return self._output_dir / STAGE_SUBDIRS[stage] / artifact_filename(
            video, STAGE_EXTENSIONS[stage]
        )

    def partial_path_for(self, video: Video, stage: Stage) -> Path:
        path = self.path_for(video, stage)
        return path.with_name(f"{path.name}{PARTIAL_SUFFIX}")

    def chunk_path_for(self, video: Video, stage: Stage, sequence_number: int) -> Path:
        return self._output_dir / STAGE_SUBDIRS[stage] / artifact_filename(
            video, "json", chunk=sequence_number
        )

    def debug_path_for(self, video: Video, sequence_number: int) -> Path:
        return self._output_dir / DEBUG_SUBDIR / artifact_filename(
            video, "json", chunk=sequence_number
        )

    def exists(self, video: Video, stage: Stage) -> bool:
        return self.path_for(video, stage).is_file()

    def read(self, video: Video, stage: Stage) -> str | None:
        path = self.path_for(video, stage)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, video: Video, stage: Stage, content: str) -> Path:
        path = self.path_for(video, stage)
        _atomic_write(path, content)
        return path

    def begin_partial(self, video: Video, stage: Stage) -> None:
        path = self.partial_path_for(video, stage)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")

    def append_partial(self, video: Video, stage: Stage, content: str) -> None:
        path = self.partial_path_for(video, stage)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(content)

    def discard_partial(self, video: Video, stage: Stage) -> None:
        self.partial_path_for(video, stage).unlink(missing_ok=True)

    def read_chunk(self, video: Video, stage: Stage, sequence_number: int) -> str | None:
        path = self.chunk_path_for(video, stage, sequence_number)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write_chunk(
        self, video: Video, stage: Stage, sequence_number: int, payload: str
    ) -> Path:
        path = self.chunk_path_for(video, stage, sequence_number)
        _atomic_write(path, payload)
        return path

    def write_debug(self, video: Video, sequence_number: int, payload: str) -> Path:
        path = self.debug_path_for(video, sequence_number)
        _atomic_write(path, payload)
        return path
