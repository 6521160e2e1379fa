"""Postgres schema bootstrap for the Supabase project behind trendfeed.

The hosted store owns the schema; this is the idempotent DDL
(CREATE IF NOT EXISTS / CREATE OR REPLACE) used to provision a fresh project
through its direct Postgres connection.
"""

from __future__ import annotations

from typing import Iterable, Optional

import psycopg


SCHEMA_STATEMENTS: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS articles (
      id BIGSERIAL PRIMARY KEY,
      title TEXT NOT NULL,
      content TEXT,
      excerpt TEXT,
      category TEXT,
      source_url TEXT,
      image_url TEXT,
      is_trending BOOLEAN NOT NULL DEFAULT FALSE,
      is_fire BOOLEAN NOT NULL DEFAULT FALSE,
      reaction_count INTEGER NOT NULL DEFAULT 0,
      comment_count INTEGER NOT NULL DEFAULT 0,
      view_count INTEGER NOT NULL DEFAULT 0,
      published_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_articles_published_at ON articles (published_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_articles_category ON articles (category);",
    "CREATE INDEX IF NOT EXISTS idx_articles_trending ON articles (reaction_count DESC) WHERE is_trending;",
    """
    CREATE TABLE IF NOT EXISTS comments (
      id BIGSERIAL PRIMARY KEY,
      article_id BIGINT REFERENCES articles(id) ON DELETE CASCADE,
      user_name TEXT NOT NULL DEFAULT '匿名',
      user_avatar TEXT NOT NULL DEFAULT '😊',
      text TEXT NOT NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_comments_article_created ON comments (article_id, created_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS reactions (
      id BIGSERIAL PRIMARY KEY,
      article_id BIGINT REFERENCES articles(id) ON DELETE CASCADE,
      type TEXT NOT NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_reactions_article_created ON reactions (article_id, created_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS tags (
      id BIGSERIAL PRIMARY KEY,
      name TEXT NOT NULL UNIQUE,
      count INTEGER NOT NULL DEFAULT 0,
      is_trending BOOLEAN NOT NULL DEFAULT FALSE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS products (
      id BIGSERIAL PRIMARY KEY,
      name TEXT,
      category TEXT,
      price INTEGER,
      image_url TEXT,
      affiliate_url TEXT,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_products_category ON products (category);",
    """
    CREATE TABLE IF NOT EXISTS user_preferences (
      id BIGSERIAL PRIMARY KEY,
      user_id TEXT NOT NULL UNIQUE,
      favorite_categories TEXT[] NOT NULL DEFAULT '{}',
      viewed_articles TEXT[] NOT NULL DEFAULT '{}',
      last_visit TIMESTAMPTZ NOT NULL DEFAULT now(),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    # Single-statement counter bump, exposed to PostgREST as an RPC.
    """
    CREATE OR REPLACE FUNCTION increment_article_counter(
      p_article_id BIGINT,
      p_column TEXT,
      p_amount INTEGER DEFAULT 1
    ) RETURNS INTEGER
    LANGUAGE plpgsql
    AS $$
    DECLARE
      new_value INTEGER;
    BEGIN
      IF p_column NOT IN ('view_count', 'comment_count') THEN
        RAISE EXCEPTION 'unsupported counter column: %', p_column;
      END IF;
      EXECUTE format(
        'UPDATE articles SET %1$I = %1$I + $1 WHERE id = $2 RETURNING %1$I',
        p_column
      ) INTO new_value USING p_amount, p_article_id;
      RETURN new_value;
    END;
    $$;
    """,
]


def ensure_store_schema(pg_dsn: str, *, statements: Optional[Iterable[str]] = None) -> None:
    """Ensure the store schema exists."""
    stmts = list(statements) if statements is not None else SCHEMA_STATEMENTS
    with psycopg.connect(pg_dsn, autocommit=True) as conn:
        with conn.cursor() as cur:
            for s in stmts:
                cur.execute(s)
