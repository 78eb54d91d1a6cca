"""Progress reporting through the logging system."""

from __future__ import annotations

import logging


class LoggingProgressReporter:
    """``ProgressReporter`` that writes each notification as one log line."""

    def __init__(self, logger_name: str = "playlist_stories.progress") -> None:
        self._logger = logging.getLogger(logger_name)

    def start(self, message: str) -> None:
        self._logger.info("[start] %s", message)

    def succeed(self, message: str) -> None:
        self._logger.info("[ok] %s", message)

    def fail(self, message: str) -> None:
        self._logger.error("[fail] %s", message)

    def info(self, message: str) -> None:
        self._logger.info("[info] %s", message)
