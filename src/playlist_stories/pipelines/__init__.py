"""Reusable result contracts for the playlist workflow."""

from playlist_stories.pipelines.results import BatchRunResult, VideoRunResult

__all__ = ["BatchRunResult", "VideoRunResult"]
