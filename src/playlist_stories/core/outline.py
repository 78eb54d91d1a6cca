"""Numbered-outline generation with numbering carried across chunks."""

from __future__ import annotations

import re

from playlist_stories.core.prompts import PromptSet
from playlist_stories.domain.ports import TextGenerator

_NUMBERED_ITEM = re.compile(r"^(\d+)\.\s")


def last_numbered_item(markdown: str) -> int:
    """Return the number of the last ``N. `` list item, or 0 when there is none."""
    for line in reversed(markdown.split("\n")):
        match = _NUMBERED_ITEM.match(line)
        if match:
            return int(match.group(1))
    return 0


class OutlineWriter:
    """Turns one chunk of prose into the next stretch of a numbered outline."""

    def __init__(
        self,
        generator: TextGenerator,
        *,
        model: str = "gpt-4-turbo",
        prompts: PromptSet | None = None,
    ) -> None:
        self._generator = generator
        self._model = model
        self._prompts = prompts or PromptSet()

    def write_section(self, chunk: str, last_number: int) -> str:
        return self._generator.complete(
            self._prompts.outline_system,
            self._prompts.outline_prompt(chunk, last_number),
            model=self._model,
        )

    @staticmethod
    def next_number(section: str, previous: int) -> int:
        """Numbering seed for the following chunk.

        A section without list items keeps the previous seed so the sequence
        never restarts.
        """
        return last_numbered_item(section) or previous
