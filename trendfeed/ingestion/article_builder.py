"""Turn a video search hit and its comments into an article record."""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from trendfeed.ingestion.video_types import VideoComment, VideoResult


TITLE_PREFIX = "【話題】"
DESCRIPTION_CHARS = 200
EXCERPT_CHARS = 150
MAX_RENDERED_COMMENTS = 10
FIRE_COMMENT_THRESHOLD = 50
EXCERPT_FALLBACK = "話題の動画をチェック!"
NO_COMMENTS_TEXT = "視聴者のコメントはまだありません。"

# Placeholder engagement metrics; the platform does not expose these per search hit.
REACTION_COUNT_RANGE = (500, 1499)
VIEW_COUNT_RANGE = (1000, 10999)


def render_comments(comments: Sequence[VideoComment]) -> str:
    if not comments:
        return f"\n\n{NO_COMMENTS_TEXT}"
    parts = ["\n\n## 視聴者の反応\n\n"]
    for c in comments[:MAX_RENDERED_COMMENTS]:
        parts.append(f"**{c.author}**: {c.text}\n\n")
    return "".join(parts)


def build_article(
    video: VideoResult,
    comments: Sequence[VideoComment],
    category: str,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    description = video.description or ""

    content = (
        f"YouTubeで話題の動画「{video.title}」が注目を集めています。\n\n"
        f"{description[:DESCRIPTION_CHARS]}...\n"
        f"{render_comments(comments)}\n\n"
        f"動画リンク: {video.watch_url}"
    )

    return {
        "title": f"{TITLE_PREFIX}{video.title}",
        "content": content,
        "excerpt": description[:EXCERPT_CHARS] or EXCERPT_FALLBACK,
        "category": category,
        "source_url": video.watch_url,
        "image_url": video.thumbnail_url,
        "is_trending": True,
        "is_fire": len(comments) > FIRE_COMMENT_THRESHOLD,
        "reaction_count": rng.randint(*REACTION_COUNT_RANGE),
        "comment_count": len(comments),
        "view_count": rng.randint(*VIEW_COUNT_RANGE),
        "published_at": now.isoformat(),
    }
