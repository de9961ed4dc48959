import dataclasses
import os
import tempfile
import threading
import unittest
from unittest.mock import patch

from shop_backend.db import FIRST_ID, DocumentRecord, InMemoryDbClient, SqlDbClient


class DocumentStoreContract:
    """Behaviour shared by every DbClient implementation."""

    def make_db(self):
        raise NotImplementedError

    def setUp(self):
        self.db = self.make_db()

    def test_insert_assigns_sequential_ids(self):
        first = self.db.insert_document("users", {"firstName": "Ann"})
        second = self.db.insert_document("users", {"firstName": "Bob", "id": 7})
        self.assertEqual(first["id"], FIRST_ID)
        self.assertEqual(second["id"], FIRST_ID + 1)
        self.assertEqual(second["firstName"], "Bob")

    def test_ids_are_per_collection(self):
        self.db.insert_document("users", {"firstName": "Ann"})
        product = self.db.insert_document("products", {"title": "Lamp"})
        self.assertEqual(product["id"], FIRST_ID)

    def test_ids_are_not_reused_after_delete_of_older_document(self):
        self.db.insert_documents("tasks", [{"title": "a"}, {"title": "b"}])
        self.db.delete_document("tasks", FIRST_ID)
        created = self.db.insert_document("tasks", {"title": "c"})
        self.assertEqual(created["id"], FIRST_ID + 2)

    def test_get_document(self):
        self.db.insert_document("users", {"firstName": "Ann", "age": 30})
        self.assertEqual(
            self.db.get_document("users", FIRST_ID),
            {"id": FIRST_ID, "firstName": "Ann", "age": 30},
        )
        self.assertIsNone(self.db.get_document("users", 1))

    def test_update_merges_changes(self):
        self.db.insert_document("users", {"firstName": "Ann", "age": 30})
        updated = self.db.update_document("users", FIRST_ID, {"age": 31, "id": 99})
        self.assertEqual(updated, {"id": FIRST_ID, "firstName": "Ann", "age": 31})
        self.assertEqual(self.db.get_document("users", FIRST_ID)["age"], 31)
        self.assertIsNone(self.db.update_document("users", 1, {"age": 1}))

    def test_delete_document(self):
        self.db.insert_document("users", {"firstName": "Ann"})
        deleted = self.db.delete_document("users", FIRST_ID)
        self.assertEqual(deleted["firstName"], "Ann")
        self.assertIsNone(self.db.get_document("users", FIRST_ID))
        self.assertIsNone(self.db.delete_document("users", FIRST_ID))

    def test_list_sort_and_page(self):
        self.db.insert_documents(
            "products",
            [{"price": 5.0}, {"price": 1.0}, {"title": "no price"}, {"price": 3.0}],
        )
        by_price = self.db.list_documents("products", sort="price")
        self.assertEqual(
            [doc.get("price") for doc in by_price], [1.0, 3.0, 5.0, None]
        )
        by_price_desc = self.db.list_documents(
            "products", sort="price", descending=True, offset=1, limit=2
        )
        self.assertEqual([doc["price"] for doc in by_price_desc], [3.0, 1.0])
        by_id_desc = self.db.list_documents("products", descending=True, limit=2)
        self.assertEqual([doc["id"] for doc in by_id_desc], [FIRST_ID + 3, FIRST_ID + 2])
        self.assertEqual(self.db.count_documents("products"), 4)

    def test_nested_documents(self):
        items = [{"productId": 1000, "quantity": 2}]
        self.db.insert_document("baskets", {"userId": 1, "items": items})
        items.append({"productId": 1001, "quantity": 1})
        self.assertEqual(len(self.db.get_document("baskets", FIRST_ID)["items"]), 1)

    def test_concurrent_inserts_get_unique_ids(self):
        errors = []

        def worker(n):
            try:
                for i in range(25):
                    created = self.db.insert_document("tasks", {"title": f"{n}-{i}"})
                    self.db.get_document("tasks", created["id"])
                    self.db.list_documents("tasks", sort="title")
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        ids = [doc["id"] for doc in self.db.list_documents("tasks")]
        self.assertEqual(len(ids), 150)
        self.assertEqual(sorted(ids), list(range(FIRST_ID, FIRST_ID + 150)))
        self.assertEqual(self.db.count_documents("tasks"), 150)

    def test_drop_collection_and_drop_all(self):
        self.db.insert_documents("users", [{"firstName": "a"}, {"firstName": "b"}])
        self.db.insert_document("tasks", {"title": "t"})
        self.assertEqual(self.db.drop_collection("users"), 2)
        self.assertEqual(self.db.count_documents("users"), 0)
        self.assertEqual(self.db.count_documents("tasks"), 1)
        self.db.drop_all()
        self.assertEqual(self.db.count_documents("tasks"), 0)
        self.assertEqual(self.db.insert_document("tasks", {})["id"], FIRST_ID)


class InMemoryDbClientTests(DocumentStoreContract, unittest.TestCase):
    def make_db(self):
        return InMemoryDbClient()

    def test_records_hold_only_id_and_data(self):
        fields = {field.name for field in dataclasses.fields(DocumentRecord)}
        self.assertEqual(fields, {"object_id", "collection", "id", "data"})
        self.db.insert_document("users", {"firstName": "Ann"})
        self.db.update_document("users", FIRST_ID, {"age": 30})
        self.assertEqual(
            self.db.get_document("users", FIRST_ID),
            {"id": FIRST_ID, "firstName": "Ann", "age": 30},
        )


class SqlDbClientTests(DocumentStoreContract, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL client logic.
    """

    def make_db(self):
        return SqlDbClient("sqlite+pysqlite:///:memory:")

    def test_concurrent_inserts_get_unique_ids(self):
        # In-memory SQLite gives every thread its own database.
        with tempfile.TemporaryDirectory() as tmp:
            self.db = SqlDbClient(f"sqlite+pysqlite:///{os.path.join(tmp, 'shop.db')}")
            try:
                super().test_concurrent_inserts_get_unique_ids()
            finally:
                self.db.engine.dispose()

    def test_retries_insert_after_id_clash(self):
        self.db.insert_document("users", {"firstName": "Ann"})
        with patch.object(
            SqlDbClient, "_next_id", side_effect=[FIRST_ID, FIRST_ID + 1]
        ) as next_id:
            created = self.db.insert_document("users", {"firstName": "Bob"})
        self.assertEqual(next_id.call_count, 2)
        self.assertEqual(created["id"], FIRST_ID + 1)
        self.assertEqual(self.db.count_documents("users"), 2)

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            SqlDbClient("")


if __name__ == "__main__":
    unittest.main()
