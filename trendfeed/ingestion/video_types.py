"""Shared ingestion data types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class VideoResult:
    """Normalized search hit from the video platform.

    Only the snippet fields the article builder reads are lifted out; the
    untouched API item is kept in ``raw`` for provenance.
    """

    video_id: str
    title: str
    description: str = ""
    thumbnail_url: Optional[str] = None
    channel_title: Optional[str] = None
    raw: Optional[Dict[str, Any]] = None

    @property
    def watch_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


@dataclass(frozen=True)
class VideoComment:
    """Top-level comment on a video."""

    author: str
    text: str
    like_count: int = 0
    raw: Optional[Dict[str, Any]] = None
