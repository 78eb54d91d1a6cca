from __future__ import annotations

from pathlib import Path

from playlist_stories.adapters.artifact_store import FileArtifactStore
from playlist_stories.core.checkpoints import ChunkRecord, StageCheckpoint
from playlist_stories.domain.models import ResumabilityPolicy, Video

VIDEO = Video(video_id="abc", title="Hello World", ordinal_index=0)
PER_CHUNK = ResumabilityPolicy(enabled=True, granularity="per-chunk")


def _record(sequence_number: int, start: int, text: str, output: str) -> ChunkRecord:
    return ChunkRecord(
        sequence_number=sequence_number,
        start_offset=start,
        end_offset=start + len(text),
        source_text=text,
        output=output,
    )


def test_disabled_policy_ignores_existing_artifact(tmp_path: Path) -> None:
    store = FileArtifactStore(tmp_path)
    store.write(VIDEO, "story", "old story")
    checkpoint = StageCheckpoint(store, VIDEO, "story", ResumabilityPolicy(enabled=False))
    assert checkpoint.load_completed() is None


def test_whole_stage_policy_never_reads_chunk_records(tmp_path: Path) -> None:
    store = FileArtifactStore(tmp_path)
    store.write_chunk(VIDEO, "summary", 1, _record(1, 0, "abc", "1. A").model_dump_json())
    checkpoint = StageCheckpoint(store, VIDEO, "summary", ResumabilityPolicy())
    assert checkpoint.load_chunk(1, 0, "abc") is None


def test_chunk_record_round_trips_when_offsets_match(tmp_path: Path) -> None:
    store = FileArtifactStore(tmp_path)
    checkpoint = StageCheckpoint(store, VIDEO, "summary", PER_CHUNK)
    checkpoint.record_chunk(_record(1, 0, "abc", "1. A"), separator="\n\n")

    loaded = StageCheckpoint(store, VIDEO, "summary", PER_CHUNK).load_chunk(1, 0, "abc")
    assert loaded is not None
    assert loaded.output == "1. A"
    assert StageCheckpoint(store, VIDEO, "summary", PER_CHUNK).load_chunk(1, 5, "abc") is None


def test_corrupt_chunk_record_is_ignored(tmp_path: Path) -> None:
    store = FileArtifactStore(tmp_path)
    store.write_chunk(VIDEO, "summary", 1, '{"sequence_number": "x"')
    checkpoint = StageCheckpoint(store, VIDEO, "summary", PER_CHUNK)
    assert checkpoint.load_chunk(1, 0, "abc") is None


def test_reused_chunks_are_not_rewritten_but_still_join_partial(tmp_path: Path) -> None:
    store = FileArtifactStore(tmp_path)
    checkpoint = StageCheckpoint(store, VIDEO, "summary", PER_CHUNK)

    checkpoint.record_chunk(_record(1, 0, "abc", "1. A"), separator="\n\n", reused=True)
    checkpoint.record_chunk(_record(2, 4, "def", "2. B"), separator="\n\n")

    assert store.read_chunk(VIDEO, "summary", 1) is None
    assert store.read_chunk(VIDEO, "summary", 2) is not None
    partial = store.partial_path_for(VIDEO, "summary")
    assert partial.read_text(encoding="utf-8") == "1. A\n\n2. B"

    path = checkpoint.complete("1. A\n\n2. B")
    assert path.read_text(encoding="utf-8") == "1. A\n\n2. B"
    assert not partial.exists()


def test_chunk_record_with_different_source_text_is_not_reused(tmp_path: Path) -> None:
    store = FileArtifactStore(tmp_path)
    StageCheckpoint(store, VIDEO, "summary", PER_CHUNK).record_chunk(
        _record(1, 0, "w1 w2 w3", "1. Short"), separator="\n\n"
    )

    checkpoint = StageCheckpoint(store, VIDEO, "summary", PER_CHUNK)
    assert checkpoint.load_chunk(1, 0, "w1 w2 w3 w4 w5") is None
    assert checkpoint.load_chunk(1, 0, "w1 w2 w3") is not None


def test_character_chunk_record_must_match_text_at_cursor(tmp_path: Path) -> None:
    store = FileArtifactStore(tmp_path)
    StageCheckpoint(store, VIDEO, "structured-transcript", PER_CHUNK).record_chunk(
        _record(1, 0, "hello ", "Hello."), separator="\n"
    )

    checkpoint = StageCheckpoint(store, VIDEO, "structured-transcript", PER_CHUNK)
    loaded = checkpoint.load_chunk_within(1, 0, "hello world")
    assert loaded is not None
    assert loaded.end_offset == 6
    assert checkpoint.load_chunk_within(1, 0, "howdy world") is None
    assert checkpoint.load_chunk_within(1, 0, "hel") is None
