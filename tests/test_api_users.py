"""
tests/test_api_users.py -- Integration tests for the protected /users routes.

Coverage:
  - Bearer access token required: 401 without, 403 with a bad token, and the
    refresh token is not accepted in its place
  - POST /users: 201 acknowledgement, 400 bad email / missing reminder, 409 duplicate
  - GET /users: list without password hashes
  - PATCH /users: update, 404 unknown id, 409 duplicate username
  - DELETE /users: blocked by food records, 404 unknown, 200 deleted
"""

from __future__ import annotations

from auth.tokens import SessionClaim
from foods.models import Food

NEW_USER = {
    "username": "ben",
    "email": "ben@mail.com",
    "password": "Another1!",
    "name": "Ben Tan",
    "reminder": "08:00",
}


class TestUsersAuth:
    def test_missing_token_returns_401(self, api) -> None:
        resp = api.client.get("/users")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "missing_token"

    def test_invalid_token_returns_403(self, api) -> None:
        resp = api.client.get("/users", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "invalid_token"

    def test_refresh_token_is_not_an_access_token(self, api) -> None:
        api.make_user("ana")
        refresh_token = api.keyring.issue_session(SessionClaim(username="ana"))
        resp = api.client.get("/users", headers={"Authorization": f"Bearer {refresh_token}"})
        assert resp.status_code == 403


class TestCreateUser:
    def test_create_user(self, api) -> None:
        api.make_user("ana")
        headers = api.bearer_for("ana")

        resp = api.client.post("/users", json=NEW_USER, headers=headers)

        assert resp.status_code == 201, resp.text
        assert resp.json() == {"message": "User ben added"}
        # No session is started for the new account.
        assert not [h for h in resp.headers.get_list("set-cookie") if h.startswith("jwt=")]
        assert api.user_store.get_by_username("ben").reminder == "08:00"

    def test_invalid_email_returns_400(self, api) -> None:
        api.make_user("ana")
        resp = api.client.post("/users", json={**NEW_USER, "email": "nope"}, headers=api.bearer_for())
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Invalid email address"

    def test_missing_reminder_returns_400(self, api) -> None:
        api.make_user("ana")
        body = {k: v for k, v in NEW_USER.items() if k != "reminder"}
        resp = api.client.post("/users", json=body, headers=api.bearer_for())
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Reminder is required"

    def test_password_over_bcrypt_limit_returns_400(self, api) -> None:
        api.make_user("ana")
        resp = api.client.post("/users", json={**NEW_USER, "password": "a" * 100}, headers=api.bearer_for())
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "password_too_long"
        assert api.user_store.get_by_username("ben") is None

    def test_duplicate_username_returns_409(self, api) -> None:
        api.make_user("ana")
        resp = api.client.post("/users", json={**NEW_USER, "username": "ana"}, headers=api.bearer_for())
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "Duplicate username"


class TestListAndUpdate:
    def test_list_users_hides_password_hash(self, api) -> None:
        api.make_user("ana")
        resp = api.client.get("/users", headers=api.bearer_for())

        assert resp.status_code == 200
        users = resp.json()
        assert [u["username"] for u in users] == ["ana"]
        assert "hashed_password" not in users[0]
        assert users[0]["createdAt"]

    def test_update_user(self, api) -> None:
        ana = api.make_user("ana")
        body = {"id": ana.id, "username": "ana", "email": "ana.lim@mail.com", "name": "Ana L.", "reminder": "07:00"}

        resp = api.client.patch("/users", json=body, headers=api.bearer_for())

        assert resp.status_code == 200, resp.text
        assert resp.json()["email"] == "ana.lim@mail.com"
        assert resp.json()["reminder"] == "07:00"

    def test_update_unknown_user_returns_404(self, api) -> None:
        api.make_user("ana")
        body = {"id": 999, "username": "ghost", "email": "ghost@mail.com", "name": "G", "reminder": "07:00"}
        resp = api.client.patch("/users", json=body, headers=api.bearer_for())
        assert resp.status_code == 404

    def test_update_to_taken_username_returns_409(self, api) -> None:
        api.make_user("ana")
        ben = api.make_user("ben")
        body = {"id": ben.id, "username": "ana", "email": "ben@mail.com", "name": "Ben", "reminder": "07:00"}
        resp = api.client.patch("/users", json=body, headers=api.bearer_for())
        assert resp.status_code == 409


class TestDeleteUser:
    def test_delete_blocked_while_food_exists(self, api) -> None:
        api.make_user("ana")
        ben = api.make_user("ben")
        api.food_store.add_food(
            Food(user_id=ben.id, name="Milk", date_expiry="2026-11-01", category="dairy", place="fridge")
        )

        resp = api.client.request("DELETE", "/users", json={"id": ben.id}, headers=api.bearer_for())

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "has_dependents"
        assert api.user_store.get_by_id(ben.id) is not None

    def test_delete_user(self, api) -> None:
        api.make_user("ana")
        ben = api.make_user("ben")

        resp = api.client.request("DELETE", "/users", json={"id": ben.id}, headers=api.bearer_for())

        assert resp.status_code == 200
        assert resp.json() == {"message": f"Username ben with ID {ben.id} deleted"}
        assert api.user_store.get_by_id(ben.id) is None

    def test_delete_requires_id(self, api) -> None:
        api.make_user("ana")
        resp = api.client.request("DELETE", "/users", json={}, headers=api.bearer_for())
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "User ID Required"

    def test_delete_unknown_user_returns_404(self, api) -> None:
        api.make_user("ana")
        resp = api.client.request("DELETE", "/users", json={"id": 999}, headers=api.bearer_for())
        assert resp.status_code == 404
