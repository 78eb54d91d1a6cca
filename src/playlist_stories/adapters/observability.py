"""Process-wide logging for playlist runs.

Everything the pipeline logs goes through the root logger as
``event key=value`` lines, for example ``stage.start``, ``stage.reused``,
``boundary.malformed``, ``checkpoint.invalid_chunk``, ``batch.halt`` and
``playlist.failed``. Progress messages from ``LoggingProgressReporter`` land
in the same stream under ``playlist_stories.progress``. Output goes to the
console and to a size-rotated file, so long playlist runs leave a bounded
trail on disk.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

_CONFIGURED = False
DEFAULT_LOG_PATH = "output/logs/playlist_stories.log"
# Per-request chatter from the YouTube and chat completion clients.
_HTTP_LOGGERS = ("httpx", "httpcore")


def _int_env(name: str, default: int, *, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _level_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip().upper()
    level = logging.getLevelName(raw) if raw else default
    return level if isinstance(level, int) else default


def configure_runtime_logging(*, force: bool = False) -> None:
    """Install console and rotating file handlers once per process.

    ``PLAYLIST_STORIES_LOG_LEVEL``, ``PLAYLIST_STORIES_LOG_PATH``,
    ``PLAYLIST_STORIES_LOG_MAX_BYTES`` and ``PLAYLIST_STORIES_LOG_BACKUP_COUNT``
    shape the handlers; out-of-range sizes are clamped rather than rejected.
    ``PLAYLIST_STORIES_HTTP_LOG_LEVEL`` quiets the HTTP client loggers.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    log_path = Path(
        os.environ.get("PLAYLIST_STORIES_LOG_PATH", DEFAULT_LOG_PATH).strip() or DEFAULT_LOG_PATH
    )
    max_bytes = _int_env(
        "PLAYLIST_STORIES_LOG_MAX_BYTES",
        5 * 1024 * 1024,
        minimum=64 * 1024,
        maximum=100 * 1024 * 1024,
    )
    backup_count = _int_env("PLAYLIST_STORIES_LOG_BACKUP_COUNT", 10, minimum=1, maximum=120)

    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    run_log = RotatingFileHandler(
        filename=log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    run_log.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(_level_env("PLAYLIST_STORIES_LOG_LEVEL", logging.INFO))
    root.handlers.clear()
    root.addHandler(console)
    root.addHandler(run_log)

    http_level = _level_env("PLAYLIST_STORIES_HTTP_LOG_LEVEL", logging.WARNING)
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    _CONFIGURED = True
    logging.getLogger(__name__).debug(
        "logging.configured path=%s max_bytes=%s backups=%s", log_path, max_bytes, backup_count
    )
