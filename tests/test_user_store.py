"""
tests/test_user_store.py -- Unit tests for auth/store.py and foods/store.py.

Covers:
  - create/get by username, email and id
  - UNIQUE violations surface as ConflictError naming the column
  - update and delete return the affected record (or None)
  - FoodStore.exists_for_user() reflects ownership
"""

from __future__ import annotations

import pytest

from auth.errors import ConflictError
from auth.models import Credential
from auth.store import UserStore
from foods.models import Food
from foods.store import FoodStore


def _cred(username: str, email: str) -> Credential:
    return Credential(username=username, email=email, name="Someone", hashed_password="$2b$04$hash")


class TestUserStore:
    def test_create_assigns_id_and_timestamp(self, user_store: UserStore) -> None:
        created = user_store.create_user(_cred("ana", "ana@mail.com"))
        assert created.id is not None
        assert created.created_at

    def test_lookups(self, user_store: UserStore) -> None:
        created = user_store.create_user(_cred("ana", "ana@mail.com"))
        assert user_store.get_by_username("ana") == created
        assert user_store.get_by_email("ana@mail.com") == created
        assert user_store.get_by_id(created.id) == created
        assert user_store.get_by_username("ANA") is None
        assert user_store.get_by_email("nobody@mail.com") is None
        assert user_store.get_by_id(999) is None

    def test_duplicate_username_raises_conflict(self, user_store: UserStore) -> None:
        user_store.create_user(_cred("ana", "ana@mail.com"))
        with pytest.raises(ConflictError) as exc_info:
            user_store.create_user(_cred("ana", "other@mail.com"))
        assert exc_info.value.field == "username"
        assert len(user_store.list_users()) == 1

    def test_duplicate_email_raises_conflict(self, user_store: UserStore) -> None:
        user_store.create_user(_cred("ana", "ana@mail.com"))
        with pytest.raises(ConflictError) as exc_info:
            user_store.create_user(_cred("ben", "ana@mail.com"))
        assert exc_info.value.field == "email"

    def test_update_returns_updated_record(self, user_store: UserStore) -> None:
        created = user_store.create_user(_cred("ana", "ana@mail.com"))
        updated = user_store.update_user(created.id, name="Ana Lim", reminder="08:00")
        assert updated is not None
        assert updated.name == "Ana Lim"
        assert updated.reminder == "08:00"

    def test_update_unknown_id_returns_none(self, user_store: UserStore) -> None:
        assert user_store.update_user(404, name="Ghost") is None

    def test_update_rejects_unknown_fields(self, user_store: UserStore) -> None:
        created = user_store.create_user(_cred("ana", "ana@mail.com"))
        with pytest.raises(ValueError):
            user_store.update_user(created.id, id=5)

    def test_update_to_taken_username_raises_conflict(self, user_store: UserStore) -> None:
        user_store.create_user(_cred("ana", "ana@mail.com"))
        ben = user_store.create_user(_cred("ben", "ben@mail.com"))
        with pytest.raises(ConflictError):
            user_store.update_user(ben.id, username="ana")

    def test_delete_returns_deleted_record(self, user_store: UserStore) -> None:
        created = user_store.create_user(_cred("ana", "ana@mail.com"))
        assert user_store.delete_user(created.id) == created
        assert user_store.get_by_id(created.id) is None
        assert user_store.delete_user(created.id) is None

    def test_list_users_ordered_by_username(self, user_store: UserStore) -> None:
        user_store.create_user(_cred("zoe", "zoe@mail.com"))
        user_store.create_user(_cred("ana", "ana@mail.com"))
        assert [u.username for u in user_store.list_users()] == ["ana", "zoe"]


class TestFoodStore:
    def test_exists_for_user(self, food_store: FoodStore) -> None:
        assert food_store.exists_for_user(1) is False
        food_store.add_food(Food(user_id=1, name="Milk", date_expiry="2026-11-01", category="dairy", place="fridge"))
        assert food_store.exists_for_user(1) is True
        assert food_store.exists_for_user(2) is False
