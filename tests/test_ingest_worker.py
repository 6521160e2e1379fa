import unittest

from fake_store import InMemoryStore
from news_ingest_worker import SEARCH_TERMS, ingest
from trendfeed.ingestion.video_types import VideoComment, VideoResult
from trendfeed.storage.supabase_store import StoreError


class FakeYouTube:
    def __init__(self, videos_by_keyword):
        self.videos_by_keyword = videos_by_keyword
        self.searches = []
        self.comment_requests = []

    def search_videos(self, keyword, max_results=5):
        self.searches.append((keyword, max_results))
        return self.videos_by_keyword.get(keyword, [])[:max_results]

    def list_comments(self, video_id, max_results=20):
        self.comment_requests.append((video_id, max_results))
        return [VideoComment(author="fan", text=f"nice {video_id}")]


class FlakyStore(InMemoryStore):
    def __init__(self, fail_titles):
        super().__init__()
        self.fail_titles = fail_titles

    def insert_article(self, record):
        if any(t in record["title"] for t in self.fail_titles):
            raise StoreError("insert rejected")
        return super().insert_article(record)


def _videos(prefix, n):
    return [VideoResult(video_id=f"{prefix}{i}", title=f"{prefix} video {i}") for i in range(n)]


class TestIngest(unittest.TestCase):
    def test_default_search_terms(self):
        self.assertEqual([c for _, c in SEARCH_TERMS], ["anime", "game", "music"])

    def test_ingest_creates_article_per_video_and_sleeps(self):
        yt = FakeYouTube({"k1": _videos("a", 5), "k2": _videos("g", 2)})
        store = InMemoryStore()
        sleeps = []

        created = ingest(yt, store, search_terms=[("k1", "anime"), ("k2", "game")], sleep=sleeps.append)

        self.assertEqual(created, 5)
        self.assertEqual(len(store.articles), 5)
        self.assertEqual(sleeps, [1.0] * 5)
        self.assertEqual(yt.searches, [("k1", 3), ("k2", 3)])
        self.assertTrue(all(n == 20 for _, n in yt.comment_requests))
        categories = sorted(a["category"] for a in store.articles.values())
        self.assertEqual(categories, ["anime", "anime", "anime", "game", "game"])

    def test_failed_save_is_skipped(self):
        yt = FakeYouTube({"k1": _videos("a", 3)})
        store = FlakyStore(fail_titles=["a video 1"])
        sleeps = []

        created = ingest(yt, store, search_terms=[("k1", "anime")], sleep=sleeps.append)

        self.assertEqual(created, 2)
        self.assertEqual(len(sleeps), 3)

    def test_empty_search_creates_nothing(self):
        created = ingest(FakeYouTube({}), InMemoryStore(), search_terms=[("k1", "anime")], sleep=lambda s: None)
        self.assertEqual(created, 0)


if __name__ == "__main__":
    unittest.main()
