import re
import unittest

from shop_backend.db import FIRST_ID, InMemoryDbClient
from shop_backend.schemas import EMAIL_PATTERN, ProductCreate, UserCreate
from shop_backend.seed import (
    is_empty,
    reset_all,
    seed_baskets,
    seed_collection,
    seed_products,
    seed_tasks,
    seed_users,
)


class SeedTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()

    def test_seed_users_starts_at_first_id(self):
        users = seed_users(self.db, 3)
        self.assertEqual([user["id"] for user in users], [FIRST_ID, FIRST_ID + 1, FIRST_ID + 2])
        for user in users:
            UserCreate.model_validate(user)
            self.assertRegex(user["email"], EMAIL_PATTERN)

    def test_seeding_continues_existing_ids(self):
        seed_users(self.db, 2)
        more = seed_users(self.db, 1)
        self.assertEqual(more[0]["id"], FIRST_ID + 2)
        self.assertEqual(self.db.count_documents("users"), 3)

    def test_products_are_valid(self):
        for product in seed_products(self.db, 5):
            ProductCreate.model_validate(product)
            self.assertLessEqual(product["price"], product["basePrice"])

    def test_tasks_reference_existing_users(self):
        users = seed_users(self.db, 2)
        user_ids = {user["id"] for user in users}
        for task in seed_tasks(self.db, 5):
            self.assertIn(task["userId"], user_ids)

    def test_tasks_without_users(self):
        tasks = seed_tasks(self.db, 2)
        self.assertTrue(all(task["userId"] is None for task in tasks))

    def test_baskets_reference_existing_products(self):
        product_ids = {product["id"] for product in seed_products(self.db, 3)}
        for basket in seed_baskets(self.db, 4):
            self.assertTrue(basket["items"])
            for item in basket["items"]:
                self.assertIn(item["productId"], product_ids)
                self.assertGreaterEqual(item["quantity"], 1)

    def test_unknown_collection(self):
        with self.assertRaises(ValueError):
            seed_collection(self.db, "orders", 1)

    def test_negative_count(self):
        with self.assertRaises(ValueError):
            seed_collection(self.db, "users", -1)

    def test_reset_all(self):
        seed_users(self.db, 7)
        self.db.insert_document("stale", {"foo": "bar"})
        counts = {"users": 2, "products": 3, "tasks": 4, "baskets": 1}
        seeded = reset_all(self.db, counts)
        self.assertEqual(seeded, counts)
        for collection, count in counts.items():
            self.assertEqual(self.db.count_documents(collection), count)
        self.assertEqual(self.db.get_document("users", FIRST_ID)["id"], FIRST_ID)
        self.assertEqual(self.db.count_documents("stale"), 0)

    def test_is_empty(self):
        self.assertTrue(is_empty(self.db))
        seed_products(self.db, 1)
        self.assertFalse(is_empty(self.db))


if __name__ == "__main__":
    unittest.main()
