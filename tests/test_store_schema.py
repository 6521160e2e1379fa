import unittest
from unittest import mock

from trendfeed.storage.store_schema import SCHEMA_STATEMENTS, ensure_store_schema


class TestStoreSchema(unittest.TestCase):
    def test_declares_every_collection_and_counter_function(self):
        ddl = "\n".join(SCHEMA_STATEMENTS)
        for table in ("articles", "comments", "reactions", "tags", "products", "user_preferences"):
            self.assertIn(f"CREATE TABLE IF NOT EXISTS {table}", ddl)
        self.assertIn("user_id TEXT NOT NULL UNIQUE", ddl)
        self.assertIn("FUNCTION increment_article_counter", ddl)

    @mock.patch("trendfeed.storage.store_schema.psycopg.connect")
    def test_ensure_runs_each_statement(self, connect):
        cur = connect.return_value.__enter__.return_value.cursor.return_value.__enter__.return_value
        ensure_store_schema("dbname=test", statements=["SELECT 1", "SELECT 2"])
        connect.assert_called_once_with("dbname=test", autocommit=True)
        self.assertEqual([c.args[0] for c in cur.execute.call_args_list], ["SELECT 1", "SELECT 2"])


if __name__ == "__main__":
    unittest.main()
