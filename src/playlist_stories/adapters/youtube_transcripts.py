"""Caption retrieval through ``youtube-transcript-api``."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from playlist_stories.domain.errors import UpstreamCallError
from playlist_stories.domain.models import TranscriptLine

logger = logging.getLogger(__name__)


class YouTubeTranscriptClient:
    """``TranscriptSource`` preferring the configured caption languages in order."""

    def __init__(
        self,
        *,
        languages: Sequence[str] = ("en",),
        api: YouTubeTranscriptApi | None = None,
    ) -> None:
        self._languages = [language for language in languages if language] or ["en"]
        self._api = api or YouTubeTranscriptApi()

    def fetch_transcript(self, video_id: str) -> list[TranscriptLine]:
        logger.info("transcript.fetch video_id=%s languages=%s", video_id, self._languages)
        try:
            fetched = self._api.fetch(video_id, languages=self._languages)
        except CouldNotRetrieveTranscript as exc:
            logger.warning("transcript.unavailable video_id=%s error=%s", video_id, exc)
            raise UpstreamCallError(
                f"transcript unavailable for video {video_id}",
                service="youtube-transcript",
            ) from exc
        lines = [TranscriptLine(text=snippet.text) for snippet in fetched]
        logger.info("transcript.fetched video_id=%s lines=%s", video_id, len(lines))
        return lines
