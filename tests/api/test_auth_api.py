"""
HTTP tests for the admin, family and personal login flows.

Covers cookies, guards, rate limiting and the gallery behind the
personal-area cookie.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.clock import FixedClock
from src.api.auth_utils import ADMIN_COOKIE, FAMILY_COOKIE, PERSONAL_COOKIE
from tests.conftest import ADMIN_PASSWORD, ADMIN_TOKEN


def _register(admin_client: TestClient, username: str = "asha", password: str = "family-pass"):
    return admin_client.post(
        "/api/family/register",
        json={"username": username, "password": password, "role": "user"},
    )


class TestAdminAuth:
    def test_login_sets_cookie(self, client: TestClient):
        response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Login successful"}
        assert response.cookies.get(ADMIN_COOKIE) == ADMIN_TOKEN
        assert client.get("/api/admin/check-auth").status_code == 200

    def test_wrong_password(self, client: TestClient):
        response = client.post("/api/admin/login", json={"password": "nope"})

        assert response.status_code == 401
        assert response.json()["detail"][0]["code"] == "invalid_credentials"

    def test_missing_password(self, client: TestClient):
        response = client.post("/api/admin/login", json={})
        assert response.status_code == 400
        assert response.json()["detail"][0]["field"] == "password"

    def test_check_auth_requires_cookie(self, client: TestClient):
        assert client.get("/api/admin/check-auth").status_code == 401

    def test_login_rate_limited(self, client: TestClient):
        for _ in range(10):
            client.post("/api/admin/login", json={"password": "nope"})

        response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 429

    def test_rate_limit_window_expires(self, client: TestClient, clock: FixedClock):
        for _ in range(10):
            client.post("/api/admin/login", json={"password": "nope"})
        clock.advance(seconds=301)

        response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 200

    def test_change_password(self, admin_client: TestClient, client: TestClient):
        response = admin_client.post(
            "/api/admin/password",
            json={"currentPassword": ADMIN_PASSWORD, "newPassword": "a-longer-secret"},
        )
        assert response.status_code == 200

        assert client.post("/api/admin/login", json={"password": ADMIN_PASSWORD}).status_code == 401
        assert (
            client.post("/api/admin/login", json={"password": "a-longer-secret"}).status_code
            == 200
        )

    def test_change_password_wrong_current(self, admin_client: TestClient):
        response = admin_client.post(
            "/api/admin/password",
            json={"currentPassword": "wrong", "newPassword": "a-longer-secret"},
        )
        assert response.status_code == 401

    def test_change_password_too_short(self, admin_client: TestClient):
        response = admin_client.post(
            "/api/admin/password",
            json={"currentPassword": ADMIN_PASSWORD, "newPassword": "short"},
        )
        assert response.status_code == 400
        assert response.json()["detail"][0]["code"] == "password_too_short"

    def test_logout_clears_cookie(self, client: TestClient):
        client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
        client.post("/api/admin/logout")

        assert client.get("/api/admin/check-auth").status_code == 401


class TestFamily:
    def test_register_requires_admin(self, client: TestClient):
        response = client.post(
            "/api/family/register", json={"username": "asha", "password": "family-pass"}
        )
        assert response.status_code == 401

    def test_register_and_list(self, admin_client: TestClient):
        response = _register(admin_client)

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["username"] == "asha"
        assert user["role"] == "user"
        assert "hashedPassword" not in user

        members = admin_client.get("/api/family/members").json()
        assert [m["username"] for m in members] == ["asha"]

    def test_register_duplicate(self, admin_client: TestClient):
        _register(admin_client)
        response = _register(admin_client)

        assert response.status_code == 400
        assert response.json()["detail"][0]["code"] == "duplicate"

    def test_register_invalid_role(self, admin_client: TestClient):
        response = admin_client.post(
            "/api/family/register",
            json={"username": "asha", "password": "family-pass", "role": "owner"},
        )
        assert response.status_code == 400

    def test_login_and_check(self, admin_client: TestClient, client: TestClient):
        _register(admin_client)

        response = client.post(
            "/api/family/login", json={"username": "asha", "password": "family-pass"}
        )
        assert response.status_code == 200
        assert response.json()["user"] == {"username": "asha", "role": "user"}
        assert response.cookies.get(FAMILY_COOKIE)

        check = client.get("/api/family/check-auth")
        assert check.status_code == 200
        assert check.json()["user"]["username"] == "asha"

    def test_login_wrong_password(self, admin_client: TestClient, client: TestClient):
        _register(admin_client)
        response = client.post("/api/family/login", json={"username": "asha", "password": "x"})
        assert response.status_code == 401

    def test_session_expires(
        self, admin_client: TestClient, client: TestClient, clock: FixedClock
    ):
        _register(admin_client)
        client.post("/api/family/login", json={"username": "asha", "password": "family-pass"})

        clock.advance(seconds=604801)
        assert client.get("/api/family/check-auth").status_code == 401

    def test_logout_ends_session(
        self, app: FastAPI, admin_client: TestClient, client: TestClient
    ):
        _register(admin_client)
        client.post("/api/family/login", json={"username": "asha", "password": "family-pass"})
        token = client.cookies.get(FAMILY_COOKIE)

        client.post("/api/family/logout")

        other = TestClient(app)
        other.cookies.set(FAMILY_COOKIE, token)
        assert other.get("/api/family/check-auth").status_code == 401

    def test_change_password(
        self, app: FastAPI, admin_client: TestClient, client: TestClient
    ):
        _register(admin_client)
        client.post("/api/family/login", json={"username": "asha", "password": "family-pass"})

        response = client.post(
            "/api/family/password",
            json={"currentPassword": "family-pass", "newPassword": "new-family-pass"},
        )
        assert response.status_code == 200

        fresh = TestClient(app)
        login = fresh.post(
            "/api/family/login", json={"username": "asha", "password": "new-family-pass"}
        )
        assert login.status_code == 200

    def test_delete_member(self, admin_client: TestClient):
        _register(admin_client)

        assert admin_client.delete("/api/family/members/asha").status_code == 200
        assert admin_client.delete("/api/family/members/asha").status_code == 404


class TestPersonal:
    @pytest.fixture
    def personal_client(self, admin_client: TestClient, client: TestClient) -> TestClient:
        _register(admin_client)
        response = client.post(
            "/api/personal/login", json={"username": "asha", "password": "family-pass"}
        )
        assert response.status_code == 200
        return client

    def test_login(self, personal_client: TestClient):
        assert personal_client.cookies.get(PERSONAL_COOKIE)

        check = personal_client.get("/api/personal/check-auth")
        assert check.status_code == 200
        assert check.json() == {
            "authenticated": True,
            "user": {"username": "asha", "role": "user"},
        }

    def test_token_expires_after_an_hour(self, personal_client: TestClient, clock: FixedClock):
        clock.advance(seconds=61 * 60)
        assert personal_client.get("/api/personal/check-auth").status_code == 401

    def test_forged_token_rejected(self, client: TestClient):
        client.cookies.set(PERSONAL_COOKIE, "not-a-token")
        assert client.get("/api/personal/check-auth").status_code == 401

    def test_gallery_requires_login(self, client: TestClient):
        assert client.get("/api/personal/gallery/folders").status_code == 401

    def test_gallery_folders(self, personal_client: TestClient):
        created = personal_client.post("/api/personal/gallery/folders", json={"name": "Trips"})
        assert created.status_code == 201
        folder = created.json()
        assert folder["itemCount"] == 0

        media = personal_client.post(
            "/api/personal/gallery/media",
            json={
                "url": "https://cdn.example.com/a.jpg",
                "name": "a.jpg",
                "type": "image",
                "folderId": folder["id"],
            },
        )
        assert media.status_code == 201

        listing = personal_client.get("/api/personal/gallery/folders").json()
        assert [f["id"] for f in listing] == ["all-photos", folder["id"]]
        assert [f["itemCount"] for f in listing] == [1, 1]

        in_folder = personal_client.get(
            "/api/personal/gallery/media", params={"folderId": folder["id"]}
        ).json()
        assert [m["name"] for m in in_folder] == ["a.jpg"]

    def test_all_photos_folder_locked(self, personal_client: TestClient):
        response = personal_client.put(
            "/api/personal/gallery/folders/all-photos", json={"name": "Renamed"}
        )
        assert response.status_code == 403
        assert personal_client.delete("/api/personal/gallery/folders/all-photos").status_code == 403

    def test_media_validation(self, personal_client: TestClient):
        response = personal_client.post("/api/personal/gallery/media", json={"name": "a.jpg"})
        assert response.status_code == 400
        assert {e["field"] for e in response.json()["detail"]} == {"url", "type"}

    def test_media_missing(self, personal_client: TestClient):
        assert personal_client.get("/api/personal/gallery/media/nope").status_code == 404
        assert personal_client.delete("/api/personal/gallery/media/nope").status_code == 404
