"""Playlist listing through the YouTube Data API v3."""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from playlist_stories.domain.errors import UpstreamCallError
from playlist_stories.domain.models import Video

logger = logging.getLogger(__name__)

PLAYLIST_ITEMS_URL = "https://www.googleapis.com/youtube/v3/playlistItems"
_MAX_PAGE_SIZE = 50


class _ResourceId(BaseModel):
    model_config = ConfigDict(extra="ignore")

    video_id: str = Field(alias="videoId")


class _Snippet(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    resource_id: _ResourceId = Field(alias="resourceId")


class _PlaylistItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    snippet: _Snippet


class PlaylistItemsPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[_PlaylistItem] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class YouTubePlaylistClient:
    """``PlaylistSource`` that follows ``nextPageToken`` until enough items arrive."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float = 30.0,
        http_client: httpx.Client | None = None,
        page_size: int = 10,
    ) -> None:
        self._api_key = api_key
        self._client = http_client or httpx.Client(timeout=timeout_seconds)
        self._page_size = max(1, min(_MAX_PAGE_SIZE, page_size))

    def close(self) -> None:
        self._client.close()

    def _fetch_page(
        self, playlist_id: str, page_size: int, page_token: str | None
    ) -> PlaylistItemsPage:
        params: dict[str, str | int] = {
            "part": "snippet",
            "maxResults": page_size,
            "playlistId": playlist_id,
            "key": self._api_key,
        }
        if page_token:
            params["pageToken"] = page_token
        try:
            response = self._client.get(PLAYLIST_ITEMS_URL, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamCallError(f"playlist request failed: {exc}", service="youtube") from exc
        if response.is_error:
            try:
                body: object = response.json()
            except ValueError:
                body = response.text
            raise UpstreamCallError(
                f"playlist request returned HTTP {response.status_code}",
                service="youtube",
                status_code=response.status_code,
                response_body=body,
            )
        try:
            return PlaylistItemsPage.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamCallError(
                "playlist response was not understood",
                service="youtube",
                status_code=response.status_code,
                response_body=response.text,
            ) from exc

    def list_videos(self, playlist_id: str, *, max_items: int | None = None) -> list[Video]:
        videos: list[Video] = []
        page_token: str | None = None
        while True:
            remaining = None if max_items is None else max_items - len(videos)
            if remaining is not None and remaining <= 0:
                break
            page_size = self._page_size if remaining is None else min(self._page_size, remaining)
            page = self._fetch_page(playlist_id, page_size, page_token)
            for item in page.items:
                if max_items is not None and len(videos) >= max_items:
                    break
                videos.append(
                    Video(
                        video_id=item.snippet.resource_id.video_id,
                        title=item.snippet.title,
                        ordinal_index=len(videos),
                    )
                )
            logger.info(
                "playlist.page playlist_id=%s items=%s total=%s",
                playlist_id,
                len(page.items),
                len(videos),
            )
            page_token = page.next_page_token
            if not page_token or not page.items:
                break
        return videos
