"""Cooperative cancellation and request pacing."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from playlist_stories.domain.errors import PipelineCancelled


class CancellationToken:
    """Set from a signal handler; checked at every unit-of-work boundary."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelled(self._reason or "cancelled")

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns early (True) once cancelled."""
        return self._event.wait(timeout=max(0.0, seconds))


@dataclass(frozen=True)
class PacingPolicy:
    """Fixed courtesy delay after every chunk-producing upstream call."""

    delay_seconds: float = 2.0

    @property
    def enabled(self) -> bool:
        return self.delay_seconds > 0

    def pause(self, token: CancellationToken) -> None:
        if self.enabled:
            token.wait(self.delay_seconds)
