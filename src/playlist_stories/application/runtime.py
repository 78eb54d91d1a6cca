"""Wires concrete adapters into the batch runner from resolved settings."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from playlist_stories.adapters.artifact_store import FileArtifactStore
from playlist_stories.adapters.openai_chat import OpenAIChatClient
from playlist_stories.adapters.progress import LoggingProgressReporter
from playlist_stories.adapters.tokenizer import build_token_counter
from playlist_stories.adapters.youtube_playlist import YouTubePlaylistClient
from playlist_stories.adapters.youtube_transcripts import YouTubeTranscriptClient
from playlist_stories.application.playlist_run import PlaylistRunner
from playlist_stories.application.settings import PipelineSettings
from playlist_stories.core.pacing import CancellationToken, PacingPolicy
from playlist_stories.core.prompts import PromptSet
from playlist_stories.core.stages import StagePipeline
from playlist_stories.domain.ports import ProgressReporter


@contextmanager
def open_runner(
    settings: PipelineSettings,
    *,
    cancellation: CancellationToken,
    reporter: ProgressReporter | None = None,
) -> Iterator[PlaylistRunner]:
    """Yield a ready ``PlaylistRunner``; HTTP clients are closed on exit."""
    reporter = reporter or LoggingProgressReporter()
    playlist = YouTubePlaylistClient(
        api_key=settings.youtube_api_key, timeout_seconds=settings.http_timeout_seconds
    )
    generator = OpenAIChatClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
    try:
        pipeline = StagePipeline(
            transcripts=YouTubeTranscriptClient(languages=settings.transcript_languages),
            generator=generator,
            store=FileArtifactStore(settings.output_dir),
            token_counter=build_token_counter(),
            reporter=reporter,
            pacing=PacingPolicy(delay_seconds=settings.pacing_seconds),
            cancellation=cancellation,
            settings=settings.stage_settings(),
            policies=settings.resumability_policies(),
            prompts=PromptSet(source_notes=settings.source_notes),
        )
        yield PlaylistRunner(
            playlist=playlist,
            pipeline=pipeline,
            reporter=reporter,
            cancellation=cancellation,
            on_error=settings.on_error,
        )
    finally:
        generator.close()
        playlist.close()
