"""Per-video stage pipeline: transcript, structuring, outline, story."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from pathlib import Path

from playlist_stories.core.boundary import BoundaryFinder
from playlist_stories.core.character_chunker import split_and_process
from playlist_stories.core.checkpoints import ChunkRecord, StageCheckpoint
from playlist_stories.core.continuation import ContinuationState, StoryContinuation
from playlist_stories.core.outline import OutlineWriter
from playlist_stories.core.pacing import CancellationToken, PacingPolicy
from playlist_stories.core.prompts import PromptSet
from playlist_stories.core.token_budget import (
    DEFAULT_TOKEN_BUDGET,
    TokenBudgetAccountant,
    TokenCounter,
)
from playlist_stories.domain.errors import PipelineCancelled
from playlist_stories.domain.models import (
    Chunk,
    ResumabilityPolicy,
    Stage,
    Video,
    default_resumability,
)
from playlist_stories.domain.ports import (
    ArtifactStore,
    ProgressReporter,
    TextGenerator,
    TranscriptSource,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageSettings:
    """Chunk sizes, model identifiers and debug switches for the stages."""

    max_chunk_chars: int = 1000
    lookahead_chars: int = 200
    token_budget: int = DEFAULT_TOKEN_BUDGET
    summary_threshold: int = 4000
    boundary_model: str = "gpt-4"
    punctuation_model: str = "gpt-4"
    outline_model: str = "gpt-4-turbo"
    story_model: str = "gpt-4"
    compaction_model: str = "gpt-4-turbo"
    write_debug: bool = True


@dataclass(frozen=True)
class VideoArtifacts:
    """Final text of every stage plus where each one was written."""

    video: Video
    transcript: str
    structured_transcript: str
    outline: str
    story: str
    paths: dict[Stage, Path] = field(default_factory=dict)
    timing_seconds: dict[Stage, float] = field(default_factory=dict)


class VideoProcessingError(RuntimeError):
    """A stage failed; carries the video and stage for reporting."""

    def __init__(self, *, video: Video, stage: Stage, cause: BaseException) -> None:
        super().__init__(f"{stage} failed for '{video.title}': {cause}")
        self.video = video
        self.stage = stage
        self.cause = cause

    @property
    def response_body(self) -> object | None:
        return getattr(self.cause, "response_body", None)


class StagePipeline:
    """Runs the four stages for one video, each resumable from its artifacts."""

    def __init__(
        self,
        *,
        transcripts: TranscriptSource,
        generator: TextGenerator,
        store: ArtifactStore,
        token_counter: TokenCounter,
        reporter: ProgressReporter,
        pacing: PacingPolicy | None = None,
        cancellation: CancellationToken | None = None,
        settings: StageSettings | None = None,
        policies: Mapping[Stage, ResumabilityPolicy] | None = None,
        prompts: PromptSet | None = None,
    ) -> None:
        self._transcripts = transcripts
        self._generator = generator
        self._store = store
        self._reporter = reporter
        self._pacing = pacing or PacingPolicy()
        self._cancellation = cancellation or CancellationToken()
        self._settings = settings or StageSettings()
        self._policies = {**default_resumability(), **(policies or {})}
        self._prompts = prompts or PromptSet()
        self._accountant = TokenBudgetAccountant(
            token_counter, budget=self._settings.token_budget
        )
        self._boundary = BoundaryFinder(
            generator, model=self._settings.boundary_model, prompts=self._prompts
        )
        self._outline = OutlineWriter(
            generator, model=self._settings.outline_model, prompts=self._prompts
        )
        self._continuation = StoryContinuation(
            generator,
            story_model=self._settings.story_model,
            compaction_model=self._settings.compaction_model,
            threshold=self._settings.summary_threshold,
            prompts=self._prompts,
        )

    def run_video(self, video: Video) -> VideoArtifacts:
        """Run every stage in order; the first failure aborts the video."""
        timings: dict[Stage, float] = {}

        def timed(stage: Stage, run: Callable[[], str]) -> str:
            started = time.perf_counter()
            result = run()
            timings[stage] = round(time.perf_counter() - started, 3)
            return result

        transcript = timed("raw-transcript", lambda: self.fetch_transcript(video))
        structured = timed(
            "structured-transcript", lambda: self.structure_transcript(video, transcript)
        )
        outline = timed("summary", lambda: self.summarize(video, structured))
        story = timed("story", lambda: self.write_story(video, outline))
        return VideoArtifacts(
            video=video,
            transcript=transcript,
            structured_transcript=structured,
            outline=outline,
            story=story,
            paths={stage: self._store.path_for(video, stage) for stage in timings},
            timing_seconds=timings,
        )

    def fetch_transcript(self, video: Video) -> str:
        def compute(_checkpoint: StageCheckpoint) -> str:
            lines = self._transcripts.fetch_transcript(video.video_id)
            return " ".join(line.text for line in lines)

        return self._run_stage(
            video, "raw-transcript", f"Fetching transcript for video {video.video_id}", compute
        )

    def structure_transcript(self, video: Video, transcript: str) -> str:
        return self._run_stage(
            video,
            "structured-transcript",
            "Structuring transcript into proper sentences",
            lambda checkpoint: self._structure(transcript, checkpoint),
        )

    def summarize(self, video: Video, structured: str) -> str:
        return self._run_stage(
            video,
            "summary",
            "Summarizing transcript",
            lambda checkpoint: self._summarize(structured, checkpoint),
        )

    def write_story(self, video: Video, outline: str) -> str:
        return self._run_stage(
            video,
            "story",
            "Generating children's story",
            lambda checkpoint: self._write_story(video, outline, checkpoint),
        )

    def _run_stage(
        self,
        video: Video,
        stage: Stage,
        label: str,
        compute: Callable[[StageCheckpoint], str],
    ) -> str:
        self._cancellation.raise_if_cancelled()
        checkpoint = StageCheckpoint(self._store, video, stage, self._policies[stage])
        self._reporter.start(f"{label}...")
        existing = checkpoint.load_completed()
        if existing is not None:
            logger.info("stage.reused stage=%s video_id=%s", stage, video.video_id)
            self._reporter.info(f"Loaded {stage} from file for '{video.title}'.")
            return existing
        logger.info("stage.start stage=%s video_id=%s", stage, video.video_id)
        try:
            content = compute(checkpoint)
            checkpoint.complete(content)
        except PipelineCancelled:
            raise
        except Exception as exc:  # noqa: BLE001
            self._reporter.fail(f"{label} failed: {exc}")
            raise VideoProcessingError(video=video, stage=stage, cause=exc) from exc
        logger.info(
            "stage.complete stage=%s video_id=%s chars=%s", stage, video.video_id, len(content)
        )
        self._reporter.succeed(f"{label} done.")
        return content

    def _pause(self) -> None:
        if self._pacing.enabled:
            self._reporter.info(f"Pausing for {self._pacing.delay_seconds:g} seconds...")
        self._pacing.pause(self._cancellation)

    def _find_boundary(self, window: str) -> int | None:
        self._cancellation.raise_if_cancelled()
        return self._boundary.find_boundary(window)

    def _punctuate(self, text: str) -> str:
        reply = self._generator.complete(
            self._prompts.punctuation_system_prompt(),
            self._prompts.punctuation_prompt(text),
            model=self._settings.punctuation_model,
            max_tokens=len(text) + 50,
        )
        return reply.strip()

    def _structure(self, transcript: str, checkpoint: StageCheckpoint) -> str:
        reused: dict[int, ChunkRecord] = {}

        def recorded_end(sequence_number: int, cursor: int) -> int | None:
            record = checkpoint.load_chunk_within(sequence_number, cursor, transcript)
            if record is None:
                return None
            reused[sequence_number] = record
            return record.end_offset

        def per_chunk(chunk: Chunk) -> str:
            self._cancellation.raise_if_cancelled()
            record = reused.pop(chunk.sequence_number, None)
            if record is not None:
                checkpoint.record_chunk(record, separator="\n", reused=True)
                return record.output
            percent = round(chunk.start_offset / len(transcript) * 100)
            self._reporter.start(f"Processing transcript... {percent}%")
            output = self._punctuate(chunk.text)
            checkpoint.record_chunk(
                ChunkRecord(
                    sequence_number=chunk.sequence_number,
                    start_offset=chunk.start_offset,
                    end_offset=chunk.end_offset,
                    source_text=chunk.text,
                    output=output,
                ),
                separator="\n",
            )
            self._pause()
            return output

        return split_and_process(
            transcript,
            self._settings.max_chunk_chars,
            self._settings.lookahead_chars,
            per_chunk,
            self._find_boundary,
            recorded_end=recorded_end,
        )

    def _summarize(self, structured: str, checkpoint: StageCheckpoint) -> str:
        sections: list[str] = []
        last_number = 0
        for chunk in self._accountant.chunks(structured):
            self._cancellation.raise_if_cancelled()
            record = checkpoint.load_chunk(
                chunk.sequence_number, chunk.start_offset, chunk.text
            )
            if record is not None:
                checkpoint.record_chunk(record, separator="\n\n", reused=True)
            else:
                self._reporter.start(f"Summarizing transcript chunk #{chunk.sequence_number}.")
                section = self._outline.write_section(chunk.text, last_number)
                record = ChunkRecord(
                    sequence_number=chunk.sequence_number,
                    start_offset=chunk.start_offset,
                    end_offset=chunk.end_offset,
                    source_text=chunk.text,
                    output=section,
                )
                checkpoint.record_chunk(record, separator="\n\n")
                self._reporter.succeed(
                    f"Summarized transcript chunk #{chunk.sequence_number} OK."
                )
                self._pause()
            sections.append(record.output)
            last_number = OutlineWriter.next_number(record.output, last_number)
        return "\n\n".join(sections).strip()

    def _write_story(self, video: Video, outline: str, checkpoint: StageCheckpoint) -> str:
        chunks = list(self._accountant.chunks(outline))
        state = ContinuationState()
        for position, chunk in enumerate(chunks):
            self._cancellation.raise_if_cancelled()
            final = position == len(chunks) - 1
            record = checkpoint.load_chunk(
                chunk.sequence_number, chunk.start_offset, chunk.text
            )
            if record is not None:
                state = ContinuationState(
                    phase="done" if final else "accumulating",
                    rolling_summary=record.context_after or "",
                    passages=(*state.passages, record.output),
                    compactions=state.compactions,
                )
                checkpoint.record_chunk(record, separator="\n\n", reused=True)
                continue
            self._reporter.start(f"Writing story chunk #{chunk.sequence_number}...")
            state, flush = self._continuation.flush(state, chunk.text, final=final)
            checkpoint.record_chunk(
                ChunkRecord(
                    sequence_number=chunk.sequence_number,
                    start_offset=chunk.start_offset,
                    end_offset=chunk.end_offset,
                    source_text=chunk.text,
                    output=flush.new_text,
                    context_after=state.rolling_summary,
                ),
                separator="\n\n",
            )
            if self._settings.write_debug:
                self._store.write_debug(
                    video,
                    chunk.sequence_number,
                    json.dumps(asdict(flush), ensure_ascii=False, indent=2) + "\n",
                )
            self._reporter.info(f"Wrote story chunk #{chunk.sequence_number} OK.")
            self._pause()
        return state.story
