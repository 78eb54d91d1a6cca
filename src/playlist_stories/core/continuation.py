"""Rolling-summary state machine for chunked story generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Literal

from playlist_stories.core.prompts import PromptSet
from playlist_stories.domain.ports import TextGenerator

logger = logging.getLogger(__name__)

ContinuationPhase = Literal["accumulating", "flushing", "compacting", "done"]
DEFAULT_SUMMARY_THRESHOLD = 4000


@dataclass(frozen=True)
class ContinuationState:
    """Immutable snapshot of story progress between chunks."""

    phase: ContinuationPhase = "accumulating"
    rolling_summary: str = ""
    passages: tuple[str, ...] = ()
    compactions: int = 0

    @property
    def story(self) -> str:
        return "\n\n".join(self.passages)


@dataclass(frozen=True)
class FlushRecord:
    """What one flush sent and received; persisted as a debug artifact."""

    content: str
    new_text: str
    summary: str


class StoryContinuation:
    """Generates story passages chunk by chunk, compacting carried context."""

    def __init__(
        self,
        generator: TextGenerator,
        *,
        story_model: str = "gpt-4",
        compaction_model: str = "gpt-4-turbo",
        threshold: int = DEFAULT_SUMMARY_THRESHOLD,
        prompts: PromptSet | None = None,
    ) -> None:
        self._generator = generator
        self._story_model = story_model
        self._compaction_model = compaction_model
        self._threshold = threshold
        self._prompts = prompts or PromptSet()

    @property
    def threshold(self) -> int:
        return self._threshold

    def flush(
        self, state: ContinuationState, chunk_text: str, *, final: bool
    ) -> tuple[ContinuationState, FlushRecord]:
        """Generate the passage for one chunk and advance the state machine.

        The trailing chunk is written without carried context and moves the
        machine to ``done``; earlier chunks extend the rolling summary and may
        trigger a compaction.
        """
        if state.phase == "done":
            raise RuntimeError("story continuation already finished")
        state = replace(state, phase="flushing")
        context = "" if final else state.rolling_summary
        new_text = self._generator.complete(
            self._prompts.story_system,
            self._prompts.story_prompt(chunk_text, context),
            model=self._story_model,
            max_tokens=1000,
            temperature=0.7,
        )
        record = FlushRecord(content=chunk_text, new_text=new_text, summary=context)
        state = replace(state, passages=(*state.passages, new_text))
        if final:
            return replace(state, phase="done"), record

        state = replace(state, rolling_summary=f"{state.rolling_summary}\n\n{new_text}")
        if len(state.rolling_summary) > self._threshold:
            state = self.compact(replace(state, phase="compacting"))
        return replace(state, phase="accumulating"), record

    def compact(self, state: ContinuationState) -> ContinuationState:
        """Replace the rolling summary with a re-summarization of itself."""
        before = len(state.rolling_summary)
        compacted = self._generator.complete(
            self._prompts.compaction_system,
            state.rolling_summary,
            model=self._compaction_model,
            max_tokens=500,
            temperature=0.5,
        )
        logger.info("story.compact chars_before=%s chars_after=%s", before, len(compacted))
        return replace(state, rolling_summary=compacted, compactions=state.compactions + 1)
