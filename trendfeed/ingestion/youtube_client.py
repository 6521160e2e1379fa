"""YouTube Data API v3 client used by the ingestion worker.

Two read-only queries:
- search videos by keyword (ordered by view count)
- list top-level comment threads for a video (ordered by relevance)

Both fail soft: any transport or API error is logged and an empty list is
returned so one bad keyword or video never aborts an ingestion cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from trendfeed.ingestion.video_types import VideoComment, VideoResult

logger = logging.getLogger(__name__)


def _pick_thumbnail(thumbnails: Any) -> Optional[str]:
    if not isinstance(thumbnails, dict):
        return None
    for size in ("high", "medium", "default"):
        thumb = thumbnails.get(size)
        if isinstance(thumb, dict) and thumb.get("url"):
            return str(thumb["url"])
    return None


@dataclass(frozen=True)
class YouTubeClient:
    api_key: str
    endpoint: str = "https://www.googleapis.com/youtube/v3"
    timeout: float = 30

    def _get(self, resource: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """GET a resource; returns the decoded payload or None on any failure."""
        query = dict(params)
        query["key"] = self.api_key
        try:
            resp = requests.get(
                f"{self.endpoint}/{resource}",
                params=query,
                headers={"User-Agent": "trendfeed/1.0"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"YouTube {resource} request failed: {e}")
            return None
        try:
            data = resp.json() or {}
        except ValueError:
            logger.error(f"YouTube {resource} returned non-JSON (HTTP {resp.status_code})")
            return None
        err = data.get("error") if isinstance(data, dict) else None
        if err:
            message = err.get("message") if isinstance(err, dict) else err
            logger.warning(f"YouTube API error on {resource}: {message}")
            return None
        if not resp.ok:
            logger.warning(f"YouTube {resource} failed with HTTP {resp.status_code}")
            return None
        return data if isinstance(data, dict) else None

    def search_videos(self, keyword: str, max_results: int = 5) -> List[VideoResult]:
        data = self._get(
            "search",
            {
                "part": "snippet",
                "q": keyword,
                "type": "video",
                "order": "viewCount",
                "maxResults": max(1, min(int(max_results), 50)),
            },
        )
        if data is None:
            return []
        out: List[VideoResult] = []
        for item in data.get("items") or []:
            if not isinstance(item, dict):
                continue
            ident = item.get("id")
            video_id = ident.get("videoId") if isinstance(ident, dict) else None
            snippet = item.get("snippet") or {}
            if not video_id or not snippet.get("title"):
                continue
            out.append(
                VideoResult(
                    video_id=str(video_id),
                    title=str(snippet["title"]),
                    description=str(snippet.get("description") or ""),
                    thumbnail_url=_pick_thumbnail(snippet.get("thumbnails")),
                    channel_title=snippet.get("channelTitle") or None,
                    raw=item,
                )
            )
        return out

    def list_comments(self, video_id: str, max_results: int = 20) -> List[VideoComment]:
        data = self._get(
            "commentThreads",
            {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": max(1, min(int(max_results), 100)),
                "order": "relevance",
            },
        )
        if data is None:
            return []
        out: List[VideoComment] = []
        for item in data.get("items") or []:
            try:
                top = item["snippet"]["topLevelComment"]["snippet"]
            except (KeyError, TypeError):
                continue
            try:
                like_count = int(top.get("likeCount") or 0)
            except (TypeError, ValueError):
                like_count = 0
            out.append(
                VideoComment(
                    author=str(top.get("authorDisplayName") or ""),
                    text=str(top.get("textDisplay") or ""),
                    like_count=like_count,
                    raw=item,
                )
            )
        return out
