"""In-memory stand-in for SupabaseStore used by the API and worker tests."""

from __future__ import annotations

import copy
import itertools
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from trendfeed.storage.supabase_store import COUNTER_COLUMNS, StoreError


class InMemoryStore:
    def __init__(self):
        self.articles: Dict[str, Dict[str, Any]] = {}
        self.comments: List[Dict[str, Any]] = []
        self.reactions: List[Dict[str, Any]] = []
        self.tags: List[Dict[str, Any]] = []
        self.products: List[Dict[str, Any]] = []
        self.user_preferences: Dict[str, Dict[str, Any]] = {}
        self.fail_with: Optional[str] = None
        self._ids = itertools.count(1)

    def _check(self):
        if self.fail_with:
            raise StoreError(self.fail_with)

    def add_article(self, article_id: str, **fields) -> Dict[str, Any]:
        record = {
            "id": article_id,
            "title": f"article {article_id}",
            "category": "anime",
            "is_trending": True,
            "reaction_count": 0,
            "comment_count": 0,
            "view_count": 0,
            "published_at": "2026-01-01T00:00:00+00:00",
        }
        record.update(fields)
        self.articles[article_id] = record
        return record

    # Articles

    def list_articles(self, *, category=None, limit=20, offset=0):
        self._check()
        rows = list(self.articles.values())
        if category and category != "all":
            rows = [r for r in rows if r.get("category") == category]
        rows.sort(key=lambda r: r.get("published_at") or "", reverse=True)
        return copy.deepcopy(rows[offset:offset + limit])

    def list_trending_articles(self, *, limit=10):
        self._check()
        rows = [r for r in self.articles.values() if r.get("is_trending")]
        rows.sort(key=lambda r: r.get("reaction_count") or 0, reverse=True)
        return copy.deepcopy(rows[:limit])

    def list_articles_in_categories(self, categories: Optional[Iterable[str]], *, limit=10):
        self._check()
        cats = list(categories or [])
        rows = list(self.articles.values())
        if cats:
            rows = [r for r in rows if r.get("category") in cats]
        rows.sort(key=lambda r: r.get("published_at") or "", reverse=True)
        return copy.deepcopy(rows[:limit])

    def get_article(self, article_id):
        self._check()
        row = self.articles.get(str(article_id))
        return copy.deepcopy(row) if row else None

    def list_article_categories(self):
        self._check()
        return sorted((r.get("category") for r in self.articles.values()), key=lambda c: c or "")

    def insert_article(self, record):
        self._check()
        article_id = str(next(self._ids))
        self.articles[article_id] = dict(record, id=article_id)
        return copy.deepcopy(self.articles[article_id])

    def increment_article_counter(self, article_id, column, amount=1):
        self._check()
        if column not in COUNTER_COLUMNS:
            raise ValueError(column)
        row = self.articles.get(str(article_id))
        if row is None:
            return None
        row[column] = (row.get(column) or 0) + amount
        return row[column]

    # Comments / reactions

    def list_comments(self, article_id):
        self._check()
        return [dict(c) for c in self.comments if c["article_id"] == article_id]

    def list_reactions(self, article_id):
        self._check()
        return [dict(r) for r in self.reactions if r["article_id"] == article_id]

    def insert_comment(self, record):
        self._check()
        row = dict(record, id=next(self._ids), created_at=datetime.now(timezone.utc).isoformat())
        self.comments.append(row)
        return dict(row)

    # Tags / products

    def list_trending_tags(self, *, limit=10):
        self._check()
        rows = sorted((t for t in self.tags if t.get("is_trending")), key=lambda t: t["count"], reverse=True)
        return [dict(t) for t in rows[:limit]]

    def list_products(self, categories, *, limit=5):
        self._check()
        cats = list(categories or [])
        rows = [p for p in self.products if not cats or p.get("category") in cats]
        return [dict(p) for p in rows[:limit]]

    # User preferences

    def get_user_preferences(self, user_id):
        self._check()
        row = self.user_preferences.get(user_id)
        return copy.deepcopy(row) if row else None

    def upsert_user_preferences(self, record):
        self._check()
        self.user_preferences[record["user_id"]] = copy.deepcopy(record)
        return copy.deepcopy(record)
