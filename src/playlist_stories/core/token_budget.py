"""Token-budgeted word accumulation for the outline and story stages.

Text is split on single spaces, so the emitted chunks joined back with single
spaces reproduce the source exactly. Accumulation is a fold: each word maps an
immutable :class:`TokenAccumulator` to the next one, optionally releasing the
previous accumulator as a finished chunk.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from playlist_stories.domain.models import Chunk

TokenCounter = Callable[[str], int]
DEFAULT_TOKEN_BUDGET = 4096


@dataclass(frozen=True)
class TokenAccumulator:
    """Words gathered for the chunk currently being built."""

    words: tuple[str, ...] = ()
    token_count: int = 0
    start_offset: int = 0
    sequence_number: int = 1

    @property
    def is_empty(self) -> bool:
        return not self.words

    def to_chunk(self) -> Chunk:
        return Chunk(
            sequence_number=self.sequence_number,
            start_offset=self.start_offset,
            text=" ".join(self.words),
        )


@dataclass(frozen=True)
class FoldStep:
    """Result of feeding one word to the accountant."""

    state: TokenAccumulator
    flushed: Chunk | None = None


class TokenBudgetAccountant:
    """Measures per-word token cost and decides where token chunks end."""

    def __init__(self, counter: TokenCounter, *, budget: int = DEFAULT_TOKEN_BUDGET) -> None:
        if budget <= 0:
            raise ValueError("budget must be > 0")
        self._counter = counter
        self._budget = budget

    @property
    def budget(self) -> int:
        return self._budget

    def token_count(self, word: str) -> int:
        return self._counter(word)

    def step(self, state: TokenAccumulator, word: str, word_offset: int) -> FoldStep:
        cost = self.token_count(word)
        flushed: Chunk | None = None
        if state.token_count + cost > self._budget and not state.is_empty:
            flushed = state.to_chunk()
            state = TokenAccumulator(
                start_offset=word_offset,
                sequence_number=state.sequence_number + 1,
            )
        if state.is_empty:
            state = TokenAccumulator(
                start_offset=word_offset,
                sequence_number=state.sequence_number,
            )
        # The word always lands in the current accumulator, even when it alone
        # exceeds the budget.
        next_state = TokenAccumulator(
            words=(*state.words, word),
            token_count=state.token_count + cost,
            start_offset=state.start_offset,
            sequence_number=state.sequence_number,
        )
        return FoldStep(state=next_state, flushed=flushed)

    def chunks(self, text: str) -> Iterator[Chunk]:
        """Yield budgeted chunks; the trailing partial chunk is always emitted."""
        if not text:
            return
        state = TokenAccumulator()
        offset = 0
        for word in text.split(" "):
            result = self.step(state, word, offset)
            if result.flushed is not None:
                yield result.flushed
            state = result.state
            offset += len(word) + 1
        if not state.is_empty:
            yield state.to_chunk()
