"""Character-length chunking with boundary-aware cut points."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from playlist_stories.core.boundary import lookahead_window, resolve_cut
from playlist_stories.domain.models import Chunk

BoundaryLookup = Callable[[str], int | None]
RecordedEnd = Callable[[int, int], int | None]


def _validate(max_len: int, lookahead: int) -> None:
    if max_len <= 0:
        raise ValueError("max_len must be > 0")
    if lookahead < 0:
        raise ValueError("lookahead must be >= 0")


def next_cut(
    text: str,
    cursor: int,
    *,
    max_len: int,
    lookahead: int,
    find_boundary: BoundaryLookup | None,
) -> int:
    """Return the end offset of the chunk starting at ``cursor``."""
    naive_end = min(cursor + max_len, len(text))
    if naive_end >= len(text) or find_boundary is None or lookahead == 0:
        return naive_end
    window = lookahead_window(text, naive_end, lookahead)
    if not window.text:
        return naive_end
    offset = find_boundary(window.text)
    return resolve_cut(cursor=cursor, naive_end=naive_end, window=window, offset=offset)


def iter_character_chunks(
    text: str,
    *,
    max_len: int,
    lookahead: int,
    find_boundary: BoundaryLookup | None = None,
    recorded_end: RecordedEnd | None = None,
) -> Iterator[Chunk]:
    """Yield contiguous, non-empty chunks that cover ``text`` exactly.

    ``recorded_end(sequence_number, cursor)`` may return the end offset of a
    chunk that was already processed in an earlier run; the boundary lookup is
    skipped for it.
    """
    _validate(max_len, lookahead)
    cursor = 0
    sequence = 1
    while cursor < len(text):
        end = recorded_end(sequence, cursor) if recorded_end is not None else None
        if end is None or not cursor < end <= len(text):
            end = next_cut(
                text,
                cursor,
                max_len=max_len,
                lookahead=lookahead,
                find_boundary=find_boundary,
            )
        yield Chunk(sequence_number=sequence, start_offset=cursor, text=text[cursor:end])
        cursor = end
        sequence += 1


def split_and_process(
    text: str,
    max_len: int,
    lookahead: int,
    per_chunk: Callable[[Chunk], str],
    find_boundary: BoundaryLookup | None = None,
    *,
    recorded_end: RecordedEnd | None = None,
) -> str:
    """Run ``per_chunk`` over every chunk and join the results with newlines."""
    results = [
        per_chunk(chunk)
        for chunk in iter_character_chunks(
            text,
            max_len=max_len,
            lookahead=lookahead,
            find_boundary=find_boundary,
            recorded_end=recorded_end,
        )
    ]
    return "\n".join(results)
