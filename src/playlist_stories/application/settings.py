"""Environment-sourced settings for a playlist run."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import get_args

from dotenv import load_dotenv

from playlist_stories.adapters.openai_chat import DEFAULT_BASE_URL as DEFAULT_OPENAI_BASE_URL
from playlist_stories.core.stages import StageSettings
from playlist_stories.domain.models import (
    STAGE_ORDER,
    BatchFailureMode,
    ResumabilityPolicy,
    ResumeGranularity,
    Stage,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class SettingsError(ValueError):
    """Raised for missing credentials or malformed settings values."""


def _text_env(environ: Mapping[str, str], name: str, default: str = "") -> str:
    return environ.get(name, "").strip() or default


def _int_env(environ: Mapping[str, str], name: str, default: int, *, minimum: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be an integer, got {raw!r}.") from exc
    if value < minimum:
        raise SettingsError(f"{name} must be >= {minimum}, got {value}.")
    return value


def _float_env(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be a number, got {raw!r}.") from exc
    if value < 0:
        raise SettingsError(f"{name} must not be negative, got {value}.")
    return value


def _flag_env(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise SettingsError(f"{name} must be a boolean flag, got {raw!r}.")


def _choice_env(
    environ: Mapping[str, str], name: str, default: str, choices: tuple[str, ...]
) -> str:
    raw = environ.get(name, "").strip().lower() or default
    if raw not in choices:
        raise SettingsError(f"{name} must be one of {', '.join(choices)}; got {raw!r}.")
    return raw


@dataclass(frozen=True)
class PipelineSettings:
    """Everything a playlist run needs, resolved once at startup."""

    youtube_api_key: str = ""
    openai_api_key: str = ""
    playlist_id: str = ""
    output_dir: Path = Path("output")
    max_videos: int = 1
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    pacing_seconds: float = 2.0
    max_chunk_chars: int = 1000
    lookahead_chars: int = 200
    token_budget: int = 4096
    summary_threshold: int = 4000
    on_error: BatchFailureMode = "halt"
    resume_story: bool = False
    resume_granularity: ResumeGranularity = "whole-stage"
    debug_artifacts: bool = True
    source_notes: str = ""
    transcript_languages: tuple[str, ...] = field(default=("en",))
    http_timeout_seconds: float = 120.0

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        dotenv_path: Path | None = None,
    ) -> PipelineSettings:
        """Read settings from ``environ``, loading ``.env`` first when none is given."""
        if environ is None:
            load_dotenv(dotenv_path=dotenv_path, override=False)
            environ = os.environ
        languages = tuple(
            part.strip()
            for part in _text_env(environ, "PLAYLIST_STORIES_TRANSCRIPT_LANGUAGES", "en").split(",")
            if part.strip()
        )
        return cls(
            youtube_api_key=_text_env(environ, "YOUTUBE_API_KEY"),
            openai_api_key=_text_env(environ, "OPENAI_API_KEY"),
            playlist_id=_text_env(environ, "YOUTUBE_PLAYLIST_ID"),
            output_dir=Path(_text_env(environ, "OUTPUT_DIR", "output")),
            max_videos=_int_env(environ, "MAX_VIDEOS", 1, minimum=1),
            openai_base_url=_text_env(
                environ, "PLAYLIST_STORIES_OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL
            ),
            pacing_seconds=_float_env(environ, "PLAYLIST_STORIES_PACING_SECONDS", 2.0),
            max_chunk_chars=_int_env(environ, "PLAYLIST_STORIES_CHUNK_CHARS", 1000, minimum=1),
            lookahead_chars=_int_env(environ, "PLAYLIST_STORIES_LOOKAHEAD_CHARS", 200, minimum=0),
            token_budget=_int_env(environ, "PLAYLIST_STORIES_TOKEN_BUDGET", 4096, minimum=1),
            summary_threshold=_int_env(
                environ, "PLAYLIST_STORIES_SUMMARY_THRESHOLD", 4000, minimum=1
            ),
            on_error=_choice_env(  # type: ignore[arg-type]
                environ, "PLAYLIST_STORIES_ON_ERROR", "halt", get_args(BatchFailureMode)
            ),
            resume_story=_flag_env(environ, "PLAYLIST_STORIES_RESUME_STORY", False),
            resume_granularity=_choice_env(  # type: ignore[arg-type]
                environ,
                "PLAYLIST_STORIES_RESUME_GRANULARITY",
                "whole-stage",
                get_args(ResumeGranularity),
            ),
            debug_artifacts=_flag_env(environ, "PLAYLIST_STORIES_DEBUG_ARTIFACTS", True),
            source_notes=_text_env(environ, "PLAYLIST_STORIES_SOURCE_NOTES"),
            transcript_languages=languages or ("en",),
            http_timeout_seconds=_float_env(environ, "PLAYLIST_STORIES_HTTP_TIMEOUT", 120.0),
        )

    def validate(self) -> PipelineSettings:
        missing = [
            name
            for name, value in (
                ("YOUTUBE_API_KEY", self.youtube_api_key),
                ("OPENAI_API_KEY", self.openai_api_key),
                ("YOUTUBE_PLAYLIST_ID", self.playlist_id),
            )
            if not value
        ]
        if missing:
            raise SettingsError(f"Missing required settings: {', '.join(missing)}.")
        if self.max_videos < 1:
            raise SettingsError(f"MAX_VIDEOS must be >= 1, got {self.max_videos}.")
        if self.on_error not in get_args(BatchFailureMode):
            raise SettingsError(f"Unsupported failure mode {self.on_error!r}.")
        if self.resume_granularity not in get_args(ResumeGranularity):
            raise SettingsError(f"Unsupported resume granularity {self.resume_granularity!r}.")
        return self

    def resumability_policies(self) -> dict[Stage, ResumabilityPolicy]:
        policies: dict[Stage, ResumabilityPolicy] = {}
        for stage in STAGE_ORDER:
            enabled = self.resume_story if stage == "story" else True
            policies[stage] = ResumabilityPolicy(
                enabled=enabled, granularity=self.resume_granularity
            )
        return policies

    def stage_settings(self) -> StageSettings:
        return StageSettings(
            max_chunk_chars=self.max_chunk_chars,
            lookahead_chars=self.lookahead_chars,
            token_budget=self.token_budget,
            summary_threshold=self.summary_threshold,
            write_debug=self.debug_artifacts,
        )
