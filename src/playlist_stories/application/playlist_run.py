"""Batch orchestration: run the stage pipeline over a playlist."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path

from playlist_stories.core.pacing import CancellationToken
from playlist_stories.core.stages import StagePipeline, VideoProcessingError
from playlist_stories.domain.errors import PipelineCancelled, UpstreamCallError
from playlist_stories.domain.models import BatchFailureMode, Video
from playlist_stories.domain.ports import PlaylistSource, ProgressReporter
from playlist_stories.pipelines.results import BatchRunResult, VideoRunResult

logger = logging.getLogger(__name__)

RUN_SUMMARY_FILENAME = "run_summary.json"


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, default=str) + "\n", encoding="utf-8"
    )


def _video_result(video: Video, **fields: object) -> VideoRunResult:
    return VideoRunResult(
        video_id=video.video_id,
        title=video.title,
        ordinal=video.ordinal,
        **fields,  # type: ignore[arg-type]
    )


class PlaylistRunner:
    """Fetches the playlist once, then runs every video through the stages."""

    def __init__(
        self,
        *,
        playlist: PlaylistSource,
        pipeline: StagePipeline,
        reporter: ProgressReporter,
        cancellation: CancellationToken | None = None,
        on_error: BatchFailureMode = "halt",
    ) -> None:
        self._playlist = playlist
        self._pipeline = pipeline
        self._reporter = reporter
        self._cancellation = cancellation or CancellationToken()
        self._on_error = on_error

    def list_videos(self, playlist_id: str, max_videos: int) -> list[Video]:
        self._reporter.start("Fetching playlist videos...")
        try:
            videos = self._playlist.list_videos(playlist_id, max_items=max_videos)
        except Exception as exc:
            self._reporter.fail(f"Failed to fetch playlist videos: {exc}")
            if isinstance(exc, UpstreamCallError) and exc.response_body is not None:
                self._reporter.info(f"Response body: {exc.response_body}")
            raise
        videos = videos[:max_videos]
        self._reporter.succeed(f"Fetched {len(videos)} videos.")
        return videos

    def run(
        self,
        playlist_id: str,
        *,
        max_videos: int,
        summary_path: Path | None = None,
    ) -> BatchRunResult:
        """Process up to ``max_videos`` videos and optionally write a run summary."""
        started = time.perf_counter()
        started_at = datetime.now(UTC).isoformat()
        videos = self.list_videos(playlist_id, max_videos)

        results: list[VideoRunResult] = []
        halted = False
        for video in videos:
            if self._cancellation.cancelled:
                break
            result = self._run_one(video)
            results.append(result)
            if result.status == "cancelled":
                break
            if result.status == "failed" and self._on_error == "halt":
                halted = True
                logger.warning("batch.halt video_id=%s", video.video_id)
                break

        batch = BatchRunResult(
            playlist_id=playlist_id,
            started_at_utc=started_at,
            finished_at_utc=datetime.now(UTC).isoformat(),
            total_videos=len(videos),
            succeeded_videos=sum(1 for result in results if result.status == "succeeded"),
            failed_videos=sum(1 for result in results if result.status == "failed"),
            cancelled=self._cancellation.cancelled,
            halted=halted,
            elapsed_seconds=round(time.perf_counter() - started, 2),
            videos=results,
        )
        logger.info(
            "batch.complete playlist_id=%s succeeded=%s failed=%s cancelled=%s",
            playlist_id,
            batch.succeeded_videos,
            batch.failed_videos,
            batch.cancelled,
        )
        if summary_path is not None:
            _write_json(summary_path, asdict(batch))
        return batch

    def _run_one(self, video: Video) -> VideoRunResult:
        self._reporter.start(f"Processing video {video.ordinal}: {video.title}")
        try:
            artifacts = self._pipeline.run_video(video)
        except PipelineCancelled as exc:
            self._reporter.info(f"Stopped before finishing '{video.title}' ({exc}).")
            return _video_result(video, status="cancelled", error=str(exc))
        except VideoProcessingError as exc:
            self._reporter.fail(f"Error processing video {video.title}: {exc.cause}")
            body = exc.response_body
            if body is not None:
                self._reporter.info(f"Response body: {body}")
            return _video_result(
                video,
                status="failed",
                failed_stage=exc.stage,
                error=str(exc.cause),
                response_body=body,
            )
        self._reporter.succeed(f"Finished video {video.ordinal}: {video.title}")
        return _video_result(
            video,
            status="succeeded",
            artifact_paths={stage: str(path) for stage, path in artifacts.paths.items()},
            timing_seconds=dict(artifacts.timing_seconds),
        )


def run_playlist(
    *,
    playlist_id: str,
    max_videos: int,
    playlist: PlaylistSource,
    pipeline: StagePipeline,
    reporter: ProgressReporter,
    cancellation: CancellationToken | None = None,
    on_error: BatchFailureMode = "halt",
    output_dir: Path | None = None,
) -> BatchRunResult:
    runner = PlaylistRunner(
        playlist=playlist,
        pipeline=pipeline,
        reporter=reporter,
        cancellation=cancellation,
        on_error=on_error,
    )
    summary_path = output_dir / RUN_SUMMARY_FILENAME if output_dir is not None else None
    return runner.run(playlist_id, max_videos=max_videos, summary_path=summary_path)
