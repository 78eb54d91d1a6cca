"""CLI for turning a YouTube playlist into children's stories."""

from __future__ import annotations

import argparse
import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import get_args

from playlist_stories.adapters.observability import configure_runtime_logging
from playlist_stories.adapters.progress import LoggingProgressReporter
from playlist_stories.application.playlist_run import RUN_SUMMARY_FILENAME
from playlist_stories.application.runtime import open_runner
from playlist_stories.application.settings import PipelineSettings, SettingsError
from playlist_stories.core.pacing import CancellationToken
from playlist_stories.domain.errors import UpstreamCallError
from playlist_stories.domain.models import BatchFailureMode, ResumeGranularity

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch playlist transcripts, outline them and write children's stories.",
    )
    parser.add_argument("--playlist-id", default="")
    parser.add_argument("--output-dir", default="")
    parser.add_argument("--max-videos", type=int, default=0)
    parser.add_argument("--pacing-seconds", type=float, default=None)
    parser.add_argument("--on-error", choices=list(get_args(BatchFailureMode)), default=None)
    parser.add_argument("--resume-story", action="store_true")
    parser.add_argument(
        "--resume-granularity", choices=list(get_args(ResumeGranularity)), default=None
    )
    parser.add_argument("--no-debug-artifacts", action="store_true")
    return parser


def _args_from_namespace(
    namespace: argparse.Namespace, base: PipelineSettings
) -> PipelineSettings:
    """Overlay explicitly passed flags on top of environment settings."""
    overrides: dict[str, object] = {}
    if str(namespace.playlist_id).strip():
        overrides["playlist_id"] = str(namespace.playlist_id).strip()
    if str(namespace.output_dir).strip():
        overrides["output_dir"] = Path(str(namespace.output_dir).strip())
    if int(namespace.max_videos) < 0:
        raise SettingsError("--max-videos must not be negative.")
    if int(namespace.max_videos) > 0:
        overrides["max_videos"] = int(namespace.max_videos)
    if namespace.pacing_seconds is not None:
        if namespace.pacing_seconds < 0:
            raise SettingsError("--pacing-seconds must not be negative.")
        overrides["pacing_seconds"] = float(namespace.pacing_seconds)
    if namespace.on_error is not None:
        overrides["on_error"] = namespace.on_error
    if namespace.resume_story:
        overrides["resume_story"] = True
    if namespace.resume_granularity is not None:
        overrides["resume_granularity"] = namespace.resume_granularity
    if namespace.no_debug_artifacts:
        overrides["debug_artifacts"] = False
    return replace(base, **overrides)  # type: ignore[arg-type]


@contextmanager
def _shutdown_signals(
    cancellation: CancellationToken, reporter: LoggingProgressReporter
) -> Iterator[None]:
    def _handle_signal(signum: int, _frame: object) -> None:
        name = signal.Signals(signum).name
        reporter.info(f"Gracefully shutting down ({name})...")
        cancellation.cancel(f"received {name}")

    previous = {signal.SIGINT: signal.getsignal(signal.SIGINT)}
    signal.signal(signal.SIGINT, _handle_signal)
    if hasattr(signal, "SIGTERM"):
        previous[signal.SIGTERM] = signal.getsignal(signal.SIGTERM)
        signal.signal(signal.SIGTERM, _handle_signal)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def run(settings: PipelineSettings, *, cancellation: CancellationToken | None = None) -> int:
    """Run the batch for validated ``settings`` and map the outcome to an exit code."""
    cancellation = cancellation or CancellationToken()
    reporter = LoggingProgressReporter()
    with _shutdown_signals(cancellation, reporter):
        with open_runner(settings, cancellation=cancellation, reporter=reporter) as runner:
            try:
                result = runner.run(
                    settings.playlist_id,
                    max_videos=settings.max_videos,
                    summary_path=settings.output_dir / RUN_SUMMARY_FILENAME,
                )
            except UpstreamCallError as exc:
                logger.error(
                    "playlist.failed service=%s status=%s error=%s body=%s",
                    exc.service,
                    exc.status_code,
                    exc,
                    exc.response_body,
                )
                return EXIT_FAILURE
    if result.cancelled:
        reporter.info("Run cancelled; completed artifacts are kept for the next run.")
    return EXIT_OK if result.ok else EXIT_FAILURE


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    configure_runtime_logging()
    try:
        settings = _args_from_namespace(parsed, PipelineSettings.from_env()).validate()
    except SettingsError as exc:
        logger.error("settings.invalid error=%s", exc)
        parser.print_usage()
        print(f"error: {exc}")
        return EXIT_CONFIG_ERROR
    return run(settings)


if __name__ == "__main__":
    raise SystemExit(main())
