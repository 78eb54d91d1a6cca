from __future__ import annotations

import pytest

from playlist_stories.core.character_chunker import (
    iter_character_chunks,
    next_cut,
    split_and_process,
)
from playlist_stories.domain.models import Chunk


def _assert_exact_cover(text: str, chunks: list[Chunk]) -> None:
    assert "".join(chunk.text for chunk in chunks) == text
    cursor = 0
    for number, chunk in enumerate(chunks, start=1):
        assert chunk.sequence_number == number
        assert chunk.start_offset == cursor
        assert chunk.text
        cursor = chunk.end_offset
    assert cursor == len(text)


def test_2500_characters_make_three_chunks_with_naive_cuts() -> None:
    text = "a" * 2500
    chunks = list(
        iter_character_chunks(text, max_len=1000, lookahead=200, find_boundary=lambda _w: None)
    )
    assert [len(chunk.text) for chunk in chunks] == [1000, 1000, 500]
    _assert_exact_cover(text, chunks)


def test_boundary_suggestions_move_the_cut() -> None:
    text = "b" * 2500
    chunks = list(
        iter_character_chunks(text, max_len=1000, lookahead=200, find_boundary=lambda _w: 50)
    )
    # Window starts 100 before each naive cut, so offset 50 cuts 50 chars early.
    assert [chunk.end_offset for chunk in chunks] == [950, 1900, 2500]
    _assert_exact_cover(text, chunks)


def test_out_of_window_suggestion_keeps_naive_cut() -> None:
    text = "c" * 1500
    cut = next_cut(text, 0, max_len=1000, lookahead=200, find_boundary=lambda _w: None)
    assert cut == 1000


def test_text_shorter_than_max_len_skips_boundary_lookup() -> None:
    seen: list[str] = []

    def find(window: str) -> int | None:
        seen.append(window)
        return 0

    chunks = list(iter_character_chunks("short", max_len=1000, lookahead=200, find_boundary=find))
    assert [chunk.text for chunk in chunks] == ["short"]
    assert seen == []


def test_empty_text_yields_no_chunks() -> None:
    assert list(iter_character_chunks("", max_len=10, lookahead=2)) == []


def test_recorded_end_replaces_boundary_lookup() -> None:
    text = "d" * 30
    lookups: list[str] = []

    def find(window: str) -> int | None:
        lookups.append(window)
        return None

    chunks = list(
        iter_character_chunks(
            text,
            max_len=10,
            lookahead=4,
            find_boundary=find,
            recorded_end=lambda sequence, _cursor: 7 if sequence == 1 else None,
        )
    )
    assert chunks[0].end_offset == 7
    assert len(lookups) == 2
    _assert_exact_cover(text, chunks)


@pytest.mark.parametrize(("max_len", "lookahead"), [(0, 10), (-5, 10), (10, -1)])
def test_invalid_parameters_are_rejected(max_len: int, lookahead: int) -> None:
    with pytest.raises(ValueError):
        list(iter_character_chunks("abc", max_len=max_len, lookahead=lookahead))


def test_split_and_process_joins_results_with_newlines() -> None:
    result = split_and_process("abcdefgh", 3, 0, lambda chunk: chunk.text.upper())
    assert result == "ABC\nDEF\nGH"
