"""Pick sentence-friendly split points inside a small lookahead window."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from playlist_stories.core.prompts import PromptSet
from playlist_stories.domain.ports import TextGenerator

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class BoundaryWindow:
    """Slice of the source text straddling a naive cut."""

    start: int
    text: str


def lookahead_window(text: str, naive_end: int, lookahead: int) -> BoundaryWindow:
    half = lookahead // 2
    start = max(0, naive_end - half)
    end = min(len(text), naive_end + half)
    return BoundaryWindow(start=start, text=text[start:end])


def parse_boundary_offset(raw: str, window_length: int) -> int | None:
    """Parse a model reply into an in-window offset, or ``None`` when unusable."""
    match = _LEADING_INT.match(raw)
    if match is None:
        return None
    value = int(match.group(1))
    if value < 0 or value > window_length:
        return None
    return value


def resolve_cut(*, cursor: int, naive_end: int, window: BoundaryWindow, offset: int | None) -> int:
    """Map a boundary suggestion to an absolute cut, falling back to ``naive_end``."""
    if offset is None:
        return naive_end
    candidate = window.start + offset
    if candidate <= cursor:
        return naive_end
    return candidate


class BoundaryFinder:
    """Asks the generation service where a window should be split."""

    def __init__(
        self,
        generator: TextGenerator,
        *,
        model: str = "gpt-4",
        prompts: PromptSet | None = None,
    ) -> None:
        self._generator = generator
        self._model = model
        self._prompts = prompts or PromptSet()

    def find_boundary(self, window: str) -> int | None:
        reply = self._generator.complete(
            self._prompts.boundary_prompt(window),
            "",
            model=self._model,
            max_tokens=10,
        )
        offset = parse_boundary_offset(reply, len(window))
        if offset is None:
            logger.warning(
                "boundary.malformed reply=%r window_chars=%s fallback=naive",
                reply[:40],
                len(window),
            )
        return offset
