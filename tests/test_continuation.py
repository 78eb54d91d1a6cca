from __future__ import annotations

import pytest
from conftest import ScriptedGenerator, prompt_kind

from playlist_stories.core.continuation import ContinuationState, StoryContinuation


def _passage_generator(passage: str) -> ScriptedGenerator:
    def respond(system: str, _user: str) -> str:
        return "short recap" if prompt_kind(system) == "compaction" else passage

    return ScriptedGenerator(respond)


def test_non_final_flush_extends_rolling_summary() -> None:
    generator = _passage_generator("Chapter one.")
    continuation = StoryContinuation(generator, threshold=1000)

    state, record = continuation.flush(ContinuationState(), "outline part", final=False)

    assert state.phase == "accumulating"
    assert state.rolling_summary == "\n\nChapter one."
    assert state.passages == ("Chapter one.",)
    assert record.content == "outline part"
    assert record.new_text == "Chapter one."
    assert record.summary == ""
    call = generator.calls[0]
    assert call.max_tokens == 1000
    assert call.temperature == 0.7


def test_compaction_triggers_only_when_threshold_is_exceeded() -> None:
    passage = "x" * 8
    generator = _passage_generator(passage)
    # "\n\n" + 8 chars = 10 chars, exactly at the threshold: no compaction yet.
    continuation = StoryContinuation(generator, threshold=10)

    state, _ = continuation.flush(ContinuationState(), "part one", final=False)
    assert state.compactions == 0
    assert generator.calls_of("compaction") == []

    state, _ = continuation.flush(state, "part two", final=False)
    assert state.compactions == 1
    assert state.rolling_summary == "short recap"
    compaction = generator.calls_of("compaction")[0]
    assert compaction.user_prompt == f"\n\n{passage}\n\n{passage}"
    assert compaction.max_tokens == 500
    assert compaction.temperature == 0.5


def test_final_chunk_is_generated_with_empty_summary() -> None:
    generator = _passage_generator("The end.")
    continuation = StoryContinuation(generator, threshold=1000)
    state = ContinuationState(rolling_summary="earlier events", passages=("Start.",))

    state, record = continuation.flush(state, "last part", final=True)

    assert state.phase == "done"
    assert record.summary == ""
    assert "previous part of the story:\n\n\n\n" in generator.calls[0].user_prompt
    assert state.rolling_summary == "earlier events"
    assert state.story == "Start.\n\nThe end."
    assert generator.calls_of("compaction") == []


def test_flush_after_done_is_rejected() -> None:
    continuation = StoryContinuation(_passage_generator("x"))
    with pytest.raises(RuntimeError):
        continuation.flush(ContinuationState(phase="done"), "more", final=False)
