from __future__ import annotations

import pytest

from playlist_stories.core.token_budget import TokenAccumulator, TokenBudgetAccountant


def _costs(table: dict[str, int]):
    return lambda word: table[word]


def test_flush_happens_right_before_the_word_that_overflows() -> None:
    accountant = TokenBudgetAccountant(
        _costs({"one": 10, "two": 10, "three": 10, "huge": 4080}), budget=4096
    )
    chunks = list(accountant.chunks("one two three huge"))
    assert [chunk.text for chunk in chunks] == ["one two three", "huge"]
    assert [chunk.sequence_number for chunk in chunks] == [1, 2]
    assert chunks[1].start_offset == len("one two three ")


def test_trailing_partial_chunk_is_always_emitted() -> None:
    accountant = TokenBudgetAccountant(lambda _word: 1, budget=2)
    chunks = list(accountant.chunks("a b c d e"))
    assert [chunk.text for chunk in chunks] == ["a b", "c d", "e"]


def test_oversize_word_becomes_its_own_chunk() -> None:
    accountant = TokenBudgetAccountant(_costs({"tiny": 1, "giant": 50}), budget=10)
    chunks = list(accountant.chunks("tiny giant tiny"))
    assert [chunk.text for chunk in chunks] == ["tiny", "giant", "tiny"]


def test_step_never_flushes_an_empty_accumulator() -> None:
    accountant = TokenBudgetAccountant(lambda _word: 99, budget=10)
    step = accountant.step(TokenAccumulator(), "giant", 0)
    assert step.flushed is None
    assert step.state.words == ("giant",)
    assert step.state.token_count == 99


def test_chunks_rejoin_to_source_text() -> None:
    text = "The quick brown fox jumps over the lazy dog again and again"
    accountant = TokenBudgetAccountant(len, budget=12)
    chunks = list(accountant.chunks(text))
    assert " ".join(chunk.text for chunk in chunks) == text
    for chunk in chunks:
        assert text[chunk.start_offset : chunk.end_offset] == chunk.text


def test_empty_text_yields_nothing() -> None:
    accountant = TokenBudgetAccountant(len)
    assert list(accountant.chunks("")) == []


def test_non_positive_budget_is_rejected() -> None:
    with pytest.raises(ValueError):
        TokenBudgetAccountant(len, budget=0)
