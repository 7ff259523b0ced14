"""API tests: FastAPI TestClient over an in-memory SQLite database."""

import unittest
import uuid
from unittest.mock import patch

from fastapi.testclient import TestClient
from support import make_session_factory, override_get_db

from geocats.core.database import get_db
from geocats.core.security import hash_password
from geocats.main import app
from geocats.schemas.auth import Role
from geocats.services.repository import UserRepository

PREFIX = "/api/v1"
PASSWORD = "s3cret-password"


def _cat_body(name: str = "Mittens", lon: float = 0.0, lat: float = 0.0, **extra: object) -> dict:
    body = {
        "cat_name": name,
        "weight": 4.5,
        "filename": f"{name.lower()}.jpg",
        "birthdate": "2020-05-17T00:00:00Z",
        "location": {"type": "Point", "coordinates": [lon, lat]},
    }
    body.update(extra)
    return body


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.rounds = patch("geocats.core.security.BCRYPT_ROUNDS", 4)
        self.rounds.start()
        self.factory = make_session_factory()
        app.dependency_overrides[get_db] = override_get_db(self.factory)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.rounds.stop()

    def register(self, name: str) -> dict:
        response = self.client.post(
            f"{PREFIX}/users",
            json={"user_name": name, "email": f"{name}@example.com", "password": PASSWORD},
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["data"]

    def create_admin(self, name: str = "root") -> None:
        db = self.factory()
        try:
            UserRepository(db).create(name, f"{name}@example.com", hash_password(PASSWORD), role=Role.ADMIN)
        finally:
            db.close()

    def login(self, name: str) -> dict[str, str]:
        response = self.client.post(f"{PREFIX}/auth/login", json={"username": name, "password": PASSWORD})
        self.assertEqual(response.status_code, 200, response.text)
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def create_cat(self, headers: dict[str, str], **kwargs: object) -> dict:
        response = self.client.post(f"{PREFIX}/cats", json=_cat_body(**kwargs), headers=headers)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["data"]


class TestUsersApi(ApiTestCase):
    def test_register_forces_standard_role_and_hides_password(self) -> None:
        response = self.client.post(
            f"{PREFIX}/users",
            json={"user_name": "eve", "email": "eve@example.com", "password": PASSWORD, "role": "admin"},
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(set(data), {"id", "user_name", "email"})
        token = self.client.get(f"{PREFIX}/users/token", headers=self.login("eve")).json()
        self.assertEqual(token["role"], "user")
        self.assertEqual(token["subject"], data["id"])

    def test_duplicate_registration_conflicts(self) -> None:
        self.register("alice")
        response = self.client.post(
            f"{PREFIX}/users",
            json={"user_name": "alice", "email": "alice2@example.com", "password": PASSWORD},
        )
        self.assertEqual(response.status_code, 409)

    def test_login_by_email_and_bad_password(self) -> None:
        self.register("alice")
        ok = self.client.post(f"{PREFIX}/auth/login", json={"username": "alice@example.com", "password": PASSWORD})
        self.assertEqual(ok.status_code, 200)
        bad = self.client.post(f"{PREFIX}/auth/login", json={"username": "alice", "password": "wrong-password"})
        self.assertEqual(bad.status_code, 401)

    def test_public_reads(self) -> None:
        alice = self.register("alice")
        self.assertEqual([u["user_name"] for u in self.client.get(f"{PREFIX}/users").json()], ["alice"])
        self.assertEqual(self.client.get(f"{PREFIX}/users/{alice['id']}").json()["email"], "alice@example.com")
        self.assertEqual(self.client.get(f"{PREFIX}/users/not-a-uuid").status_code, 400)
        self.assertEqual(self.client.get(f"{PREFIX}/users/{uuid.uuid4()}").status_code, 404)

    def test_update_current_user_cannot_change_role(self) -> None:
        self.register("alice")
        headers = self.login("alice")
        response = self.client.put(f"{PREFIX}/users", json={"user_name": "alicia", "role": "admin"}, headers=headers)
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["data"]["user_name"], "alicia")
        fresh = self.client.post(f"{PREFIX}/auth/login", json={"username": "alicia", "password": PASSWORD})
        check = self.client.get(
            f"{PREFIX}/users/token",
            headers={"Authorization": f"Bearer {fresh.json()['access_token']}"},
        )
        self.assertEqual(check.json()["role"], "user")

    def test_delete_current_user_removes_their_cats(self) -> None:
        self.register("alice")
        headers = self.login("alice")
        self.create_cat(headers)
        response = self.client.delete(f"{PREFIX}/users", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "User deleted")
        self.assertEqual(self.client.get(f"{PREFIX}/cats").json(), [])
        # The token still verifies but its account is gone.
        self.assertEqual(self.client.delete(f"{PREFIX}/users", headers=headers).status_code, 404)


class TestAuthentication(ApiTestCase):
    def test_missing_token(self) -> None:
        response = self.client.post(f"{PREFIX}/cats", json=_cat_body())
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers.get("www-authenticate"), "Bearer")

    def test_malformed_token_never_reaches_authorization(self) -> None:
        self.register("alice")
        cat = self.create_cat(self.login("alice"))
        with patch("geocats.services.access.authorize") as policy:
            response = self.client.delete(
                f"{PREFIX}/cats/{cat['id']}",
                headers={"Authorization": "Bearer not.a.token"},
            )
        self.assertEqual(response.status_code, 401)
        policy.assert_not_called()


class TestCatsApi(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register("alice")
        self.register("bob")
        self.alice = self.login("alice")
        self.bob = self.login("bob")

    def test_create_forces_owner_to_caller(self) -> None:
        bob_id = self.client.get(f"{PREFIX}/users/token", headers=self.bob).json()["subject"]
        alice_id = self.client.get(f"{PREFIX}/users/token", headers=self.alice).json()["subject"]
        cat = self.create_cat(self.alice, owner=bob_id)
        self.assertEqual(cat["owner"], alice_id)
        self.assertEqual(cat["location"], {"type": "Point", "coordinates": [0.0, 0.0]})

    def test_reads_are_public(self) -> None:
        cat = self.create_cat(self.alice, name="Mittens")
        self.assertEqual(self.client.get(f"{PREFIX}/cats/{cat['id']}").json()["cat_name"], "Mittens")
        self.assertEqual(len(self.client.get(f"{PREFIX}/cats").json()), 1)
        self.assertEqual(self.client.get(f"{PREFIX}/cats/nope").status_code, 400)
        self.assertEqual(self.client.get(f"{PREFIX}/cats/{uuid.uuid4()}").status_code, 404)

    def test_list_own_cats(self) -> None:
        mine = self.create_cat(self.alice, name="Mine")
        self.create_cat(self.bob, name="Theirs")
        response = self.client.get(f"{PREFIX}/cats/user", headers=self.alice)
        self.assertEqual([c["id"] for c in response.json()], [mine["id"]])

    def test_owner_update_and_delete(self) -> None:
        cat = self.create_cat(self.alice)
        updated = self.client.put(
            f"{PREFIX}/cats/{cat['id']}",
            json={"cat_name": "Whiskers", "location": {"type": "Point", "coordinates": [5, 5]}},
            headers=self.alice,
        )
        self.assertEqual(updated.status_code, 200, updated.text)
        self.assertEqual(updated.json()["data"]["cat_name"], "Whiskers")
        self.assertEqual(updated.json()["data"]["location"]["coordinates"], [5.0, 5.0])
        deleted = self.client.delete(f"{PREFIX}/cats/{cat['id']}", headers=self.alice)
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(deleted.json()["message"], "Cat deleted")
        self.assertEqual(self.client.get(f"{PREFIX}/cats/{cat['id']}").status_code, 404)

    def test_owner_update_cannot_reassign_owner(self) -> None:
        cat = self.create_cat(self.alice)
        bob_id = self.client.get(f"{PREFIX}/users/token", headers=self.bob).json()["subject"]
        response = self.client.put(f"{PREFIX}/cats/{cat['id']}", json={"owner": bob_id}, headers=self.alice)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["owner"], cat["owner"])

    def test_non_owner_is_forbidden(self) -> None:
        cat = self.create_cat(self.alice)
        for method in ("put", "delete"):
            with self.subTest(method=method):
                kwargs = {"json": {"cat_name": "Stolen"}} if method == "put" else {}
                response = getattr(self.client, method)(f"{PREFIX}/cats/{cat['id']}", headers=self.bob, **kwargs)
                self.assertEqual(response.status_code, 403)
                self.assertEqual(response.json()["reason"], "not_owner")

    def test_mutating_missing_or_malformed_cat(self) -> None:
        missing = self.client.delete(f"{PREFIX}/cats/{uuid.uuid4()}", headers=self.bob)
        self.assertEqual(missing.status_code, 404)
        malformed = self.client.delete(f"{PREFIX}/cats/12345", headers=self.bob)
        self.assertEqual(malformed.status_code, 400)
        self.assertEqual(malformed.json()["reason"], "invalid_identifier")


class TestAdminCatsApi(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register("alice")
        self.register("bob")
        self.create_admin("root")
        self.alice = self.login("alice")
        self.bob = self.login("bob")
        self.root = self.login("root")
        self.cat = self.create_cat(self.alice)

    def test_standard_account_cannot_use_admin_routes(self) -> None:
        response = self.client.delete(f"{PREFIX}/cats/admin/{self.cat['id']}", headers=self.alice)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["reason"], "not_admin")

    def test_admin_reassigns_owner(self) -> None:
        bob_id = self.client.get(f"{PREFIX}/users/token", headers=self.bob).json()["subject"]
        response = self.client.put(
            f"{PREFIX}/cats/admin/{self.cat['id']}",
            json={"owner": bob_id, "weight": 5.5},
            headers=self.root,
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["data"]["owner"], bob_id)
        self.assertEqual(response.json()["data"]["weight"], 5.5)
        # Ownership moved: alice can no longer delete, bob can.
        self.assertEqual(self.client.delete(f"{PREFIX}/cats/{self.cat['id']}", headers=self.alice).status_code, 403)
        self.assertEqual(self.client.delete(f"{PREFIX}/cats/{self.cat['id']}", headers=self.bob).status_code, 200)

    def test_admin_reassign_to_unknown_or_malformed_owner(self) -> None:
        unknown = self.client.put(
            f"{PREFIX}/cats/admin/{self.cat['id']}", json={"owner": str(uuid.uuid4())}, headers=self.root
        )
        self.assertEqual(unknown.status_code, 404)
        malformed = self.client.put(
            f"{PREFIX}/cats/admin/{self.cat['id']}", json={"owner": "bob"}, headers=self.root
        )
        self.assertEqual(malformed.status_code, 400)

    def test_admin_deletes_any_cat(self) -> None:
        response = self.client.delete(f"{PREFIX}/cats/admin/{self.cat['id']}", headers=self.root)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(f"{PREFIX}/cats").json(), [])

    def test_admin_route_on_missing_cat_is_not_found(self) -> None:
        response = self.client.delete(f"{PREFIX}/cats/admin/{uuid.uuid4()}", headers=self.alice)
        self.assertEqual(response.status_code, 404)

    def test_demoted_admin_token_is_rejected(self) -> None:
        db = self.factory()
        try:
            root = UserRepository(db).find_by_credential_identity("root")
            root.role = Role.USER.value
            db.commit()
        finally:
            db.close()
        response = self.client.delete(f"{PREFIX}/cats/admin/{self.cat['id']}", headers=self.root)
        self.assertEqual(response.status_code, 403)


class TestRegionQueriesApi(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register("alice")
        headers = self.login("alice")
        self.inside = self.create_cat(headers, name="Inside", lon=5, lat=5)
        self.outside = self.create_cat(headers, name="Outside", lon=15, lat=5)

    def test_box_query(self) -> None:
        response = self.client.get(f"{PREFIX}/cats/area", params={"bottomLeft": "0,0", "topRight": "10,10"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([c["id"] for c in response.json()], [self.inside["id"]])

    def test_box_query_without_matches_is_empty(self) -> None:
        response = self.client.get(f"{PREFIX}/cats/area", params={"bottomLeft": "50,50", "topRight": "60,60"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

    def test_malformed_box_query(self) -> None:
        for params in [
            {"bottomLeft": "a,b", "topRight": "10,10"},
            {"bottomLeft": "20,20", "topRight": "10,10"},
            {"bottomLeft": "0", "topRight": "10,10"},
        ]:
            with self.subTest(params=params):
                response = self.client.get(f"{PREFIX}/cats/area", params=params)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["reason"], "invalid_region")

    def test_missing_query_parameters_are_invalid_region(self) -> None:
        cases = [
            ("area", {"bottomLeft": "0,0"}),
            ("area", {"topRight": "10,10"}),
            ("bounds", {"min_lat": 0, "min_lng": 0, "max_lat": 10}),
            ("bounds", {}),
        ]
        for path, params in cases:
            with self.subTest(path=path, params=params):
                response = self.client.get(f"{PREFIX}/cats/{path}", params=params)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["reason"], "invalid_region")

    def test_bounds_query(self) -> None:
        response = self.client.get(
            f"{PREFIX}/cats/bounds",
            params={"min_lat": 0, "min_lng": 10, "max_lat": 10, "max_lng": 20},
        )
        self.assertEqual([c["id"] for c in response.json()], [self.outside["id"]])
        bad = self.client.get(
            f"{PREFIX}/cats/bounds",
            params={"min_lat": 10, "min_lng": 10, "max_lat": 0, "max_lng": 20},
        )
        self.assertEqual(bad.status_code, 400)

    def test_polygon_query(self) -> None:
        ring = [[0, 0], [20, 0], [20, 10], [0, 10], [0, 0]]
        response = self.client.post(f"{PREFIX}/cats/within", json={"coordinates": ring})
        self.assertEqual([c["cat_name"] for c in response.json()], ["Inside", "Outside"])
        open_ring = self.client.post(f"{PREFIX}/cats/within", json={"coordinates": ring[:-1]})
        self.assertEqual(open_ring.status_code, 400)


class TestHealthApi(ApiTestCase):
    def test_health_reports_database(self) -> None:
        response = self.client.get(f"{PREFIX}/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["database"], "connected")


if __name__ == "__main__":
    unittest.main()
