#!/usr/bin/env python3
"""YouTube trending ingestion worker.

Runs one ingestion cycle (or scheduled) that:
- searches the video platform for each (keyword, category) pair
- pulls the top comments of every hit
- synthesizes an article and inserts it into Supabase

Strictly sequential with a fixed pause between videos; failures are logged
per video and skipped, nothing is retried.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, List, Optional, Sequence, Tuple

import schedule
from dotenv import load_dotenv

from trendfeed.ingestion.article_builder import build_article
from trendfeed.ingestion.youtube_client import YouTubeClient
from trendfeed.storage.store_schema import ensure_store_schema
from trendfeed.storage.supabase_store import SupabaseStore

logger = logging.getLogger(__name__)

SEARCH_TERMS: List[Tuple[str, str]] = [
    ("アニメ 話題", "anime"),
    ("ゲーム 実況", "game"),
    ("ボカロ 新曲", "music"),
]
VIDEOS_PER_KEYWORD = 3
COMMENTS_PER_VIDEO = 20
DELAY_SECONDS = 1.0


def ingest(
    client: YouTubeClient,
    store: SupabaseStore,
    *,
    search_terms: Sequence[Tuple[str, str]] = SEARCH_TERMS,
    delay: float = DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run every search term through fetch -> build -> insert; returns articles created."""
    created = 0
    for keyword, category in search_terms:
        logger.info(f"Searching: {keyword} ({category})")
        videos = client.search_videos(keyword, max_results=VIDEOS_PER_KEYWORD)
        logger.info(f"Found {len(videos)} videos")

        for video in videos:
            logger.info(f"Processing: {video.title}")
            comments = client.list_comments(video.video_id, max_results=COMMENTS_PER_VIDEO)
            logger.info(f"  comments: {len(comments)}")
            try:
                article = build_article(video, comments, category)
                saved = store.insert_article(article)
            except Exception as e:
                logger.error(f"Error saving article for video {video.video_id}: {e}", exc_info=True)
                saved = None
            if saved is not None:
                created += 1
                logger.info(f"Article created ({created} so far): {article['title']}")
            sleep(delay)
    return created


def _store_from_env() -> SupabaseStore:
    url = os.environ.get("SUPABASE_URL", "").strip()
    key = (os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or os.environ.get("SUPABASE_ANON_KEY") or "").strip()
    if not url or not key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) must be set")
    return SupabaseStore.from_credentials(url, key)


def run_once() -> int:
    load_dotenv()
    api_key = os.environ.get("YOUTUBE_API_KEY", "").strip()
    if not api_key:
        raise RuntimeError("YOUTUBE_API_KEY must be set")
    store = _store_from_env()

    pg_dsn: Optional[str] = os.environ.get("PG_DSN", "").strip() or None
    if pg_dsn:
        ensure_store_schema(pg_dsn)

    created = ingest(YouTubeClient(api_key=api_key), store)
    print(f"[ingest] created={created}")
    return created


def run_scheduled() -> None:
    minutes = int(os.environ.get("INGEST_INTERVAL_MINUTES", "60"))
    schedule.every(minutes).minutes.do(run_once)
    run_once()
    while True:
        schedule.run_pending()
        time.sleep(5)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    load_dotenv()
    mode = (os.environ.get("INGEST_MODE") or "once").lower().strip()
    if mode in ("scheduled", "daemon"):
        run_scheduled()
    else:
        run_once()
