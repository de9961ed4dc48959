import unittest

from fastapi.testclient import TestClient

from shop_backend.app import create_app
from shop_backend.db import InMemoryDbClient
from shop_backend.dependencies import get_db_client
from shop_backend.repository import users_repository
from shop_backend.seed import seed_users


class UserRoutesTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(app)
        self.users = users_repository(self.db)

    def test_fetches_users(self):
        seed_users(self.db, 3)
        response = self.client.get("/api/users")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["total"], 3)
        self.assertEqual(len(payload["items"]), 3)

    def test_fetches_a_user(self):
        seed_users(self.db, 1)
        user = self.users.find(1000)

        response = self.client.get(f"/api/users/{user['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], user["id"])
        self.assertEqual(response.json()["firstName"], user["firstName"])

    def test_get_unknown_user_returns_404(self):
        seed_users(self.db, 1)
        response = self.client.get("/api/users/2")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(), {"code": "Not Found", "message": "User not found"}
        )

    def test_creates_a_user(self):
        user = {
            "firstName": "peter",
            "lastName": "cosemans",
            "age": 52,
            "email": "peter.cosemans@gmail.com",
            "role": "admin",
        }
        response = self.client.post("/api/users", json=user)
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertIn("id", payload)
        self.assertEqual(payload["firstName"], user["firstName"])
        self.assertEqual(payload["lastName"], user["lastName"])
        self.assertEqual(self.users.find(payload["id"])["email"], user["email"])

    def test_create_rejects_invalid_user(self):
        response = self.client.post(
            "/api/users", json={"firstName": "peter", "email": "not-an-email"}
        )
        self.assertEqual(response.status_code, 400)
        payload = response.json()
        self.assertEqual(payload["code"], "Bad Request")
        self.assertIn("lastName", payload["message"])
        self.assertIn("email", payload["message"])
        self.assertEqual(self.db.count_documents("users"), 0)

    def test_updates_a_user(self):
        seed_users(self.db, 1)
        old_user = self.users.find(1000)
        new_user = {
            "firstName": "Jonas",
            "lastName": "Van Eeckhout",
            "age": old_user["age"],
            "email": old_user["email"],
            "role": old_user["role"],
        }
        response = self.client.put(f"/api/users/{old_user['id']}", json=new_user)
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["id"], old_user["id"])
        self.assertEqual(payload["firstName"], "Jonas")
        self.assertEqual(payload["lastName"], "Van Eeckhout")

    def test_update_changes_only_supplied_fields(self):
        seed_users(self.db, 1)
        old_user = self.users.find(1000)

        response = self.client.put("/api/users/1000", json={"age": 33, "id": 5})
        self.assertEqual(response.status_code, 200)
        updated = self.users.find(1000)
        self.assertEqual(updated["age"], 33)
        self.assertEqual(updated["id"], 1000)
        self.assertEqual(updated["firstName"], old_user["firstName"])
        self.assertEqual(updated["email"], old_user["email"])

    def test_update_unknown_user_returns_404(self):
        seed_users(self.db, 1)
        response = self.client.put("/api/users/2", json={"firstName": "Jonas"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "Not Found")
        self.assertEqual(response.json()["message"], "User not found")

    def test_deletes_a_user(self):
        seed_users(self.db, 1)
        user = self.users.find(1000)

        response = self.client.delete(f"/api/users/{user['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], user["id"])
        self.assertIsNone(self.users.find(1000))

        follow_up = self.client.get("/api/users/1000")
        self.assertEqual(follow_up.status_code, 404)

    def test_delete_unknown_user_returns_204(self):
        seed_users(self.db, 1)
        response = self.client.delete("/api/users/2")
        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.content, b"")
        self.assertEqual(self.db.count_documents("users"), 1)

    def test_list_pages_and_sorts(self):
        for age in (40, 20, 30):
            self.users.create({"firstName": "a", "lastName": "b", "age": age})

        response = self.client.get("/api/users", params={"sort": "-age", "pageSize": 2})
        payload = response.json()
        self.assertEqual(payload["total"], 3)
        self.assertEqual([user["age"] for user in payload["items"]], [40, 30])

        response = self.client.get(
            "/api/users", params={"sort": "-age", "pageSize": 2, "page": 2}
        )
        self.assertEqual([user["age"] for user in response.json()["items"]], [20])

    def test_non_numeric_id_is_a_bad_request(self):
        response = self.client.get("/api/users/abc")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "Bad Request")


if __name__ == "__main__":
    unittest.main()
