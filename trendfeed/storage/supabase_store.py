"""Supabase-backed gateway for every collection the app reads or writes.

Both entry points talk to the hosted store through this class. It only shapes
queries (equality filters, ordering, offset/limit, set membership); filtering
and persistence happen in Postgres behind PostgREST.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = ("view_count", "comment_count")


class StoreError(Exception):
    """Raised when the hosted store rejects or fails a query."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


def _all_category(category: Optional[str]) -> bool:
    return category is None or str(category).strip().lower() in ("", "all")


@dataclass
class SupabaseStore:
    client: Client

    @classmethod
    def from_credentials(cls, url: str, key: str) -> "SupabaseStore":
        return cls(create_client(url, key))

    def _execute(self, query) -> Any:
        try:
            resp = query.execute()
        except APIError as e:
            raise StoreError(e.message or str(e), code=e.code) from e
        return resp.data

    def _first(self, query) -> Optional[Dict[str, Any]]:
        rows = self._execute(query) or []
        return rows[0] if rows else None

    # Articles

    def list_articles(self, *, category: Optional[str] = None, limit: int = 20, offset: int = 0) -> List[Dict[str, Any]]:
        query = (
            self.client.table("articles")
            .select("*")
            .order("published_at", desc=True)
            .range(offset, offset + limit - 1)
        )
        if not _all_category(category):
            query = query.eq("category", category)
        return self._execute(query) or []

    def list_trending_articles(self, *, limit: int = 10) -> List[Dict[str, Any]]:
        query = (
            self.client.table("articles")
            .select("*")
            .eq("is_trending", True)
            .order("reaction_count", desc=True)
            .limit(limit)
        )
        return self._execute(query) or []

    def list_articles_in_categories(self, categories: Optional[Iterable[str]], *, limit: int = 10) -> List[Dict[str, Any]]:
        query = self.client.table("articles").select("*").order("published_at", desc=True).limit(limit)
        cats = list(categories or [])
        if cats:
            query = query.in_("category", cats)
        return self._execute(query) or []

    def get_article(self, article_id: Any) -> Optional[Dict[str, Any]]:
        return self._first(self.client.table("articles").select("*").eq("id", article_id).limit(1))

    def list_article_categories(self) -> List[Optional[str]]:
        rows = self._execute(self.client.table("articles").select("category").order("category")) or []
        return [r.get("category") for r in rows]

    def insert_article(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._first(self.client.table("articles").insert(record))

    def increment_article_counter(self, article_id: Any, column: str, amount: int = 1) -> Optional[int]:
        """Atomically add ``amount`` to a counter column; returns the new value.

        Runs as one UPDATE inside the ``increment_article_counter`` SQL
        function (see ``store_schema``), so concurrent callers never lose
        an increment.
        """
        if column not in COUNTER_COLUMNS:
            raise ValueError(f"not a counter column: {column}")
        result = self._execute(
            self.client.rpc(
                "increment_article_counter",
                {"p_article_id": article_id, "p_column": column, "p_amount": int(amount)},
            )
        )
        if isinstance(result, list):
            result = result[0] if result else None
        if isinstance(result, dict):
            result = next(iter(result.values()), None)
        return int(result) if result is not None else None

    # Comments / reactions

    def list_comments(self, article_id: Any) -> List[Dict[str, Any]]:
        query = self.client.table("comments").select("*").eq("article_id", article_id).order("created_at", desc=True)
        return self._execute(query) or []

    def list_reactions(self, article_id: Any) -> List[Dict[str, Any]]:
        query = self.client.table("reactions").select("*").eq("article_id", article_id).order("created_at", desc=True)
        return self._execute(query) or []

    def insert_comment(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._first(self.client.table("comments").insert(record))

    # Tags / products

    def list_trending_tags(self, *, limit: int = 10) -> List[Dict[str, Any]]:
        query = self.client.table("tags").select("*").eq("is_trending", True).order("count", desc=True).limit(limit)
        return self._execute(query) or []

    def list_products(self, categories: Optional[Iterable[str]], *, limit: int = 5) -> List[Dict[str, Any]]:
        query = self.client.table("products").select("*").limit(limit)
        cats = list(categories or [])
        if cats:
            query = query.in_("category", cats)
        return self._execute(query) or []

    # User preferences

    def get_user_preferences(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._first(self.client.table("user_preferences").select("*").eq("user_id", user_id).limit(1))

    def upsert_user_preferences(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._first(self.client.table("user_preferences").upsert(record, on_conflict="user_id"))
