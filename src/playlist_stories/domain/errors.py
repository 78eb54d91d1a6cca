"""Error types shared by the pipeline and its collaborators."""

from __future__ import annotations


class UpstreamCallError(RuntimeError):
    """Raised when a remote service (generation, playlist, transcript) fails."""

    def __init__(
        self,
        message: str,
        *,
        service: str,
        status_code: int | None = None,
        response_body: object | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code
        self.response_body = response_body


class PipelineCancelled(RuntimeError):
    """Raised at a unit-of-work boundary once shutdown has been requested."""
