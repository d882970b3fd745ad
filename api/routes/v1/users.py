"""
api/routes/v1/users.py -- User management endpoints.

Routes (all require a Bearer access token):
  GET    /users   -- list accounts (no password hashes)
  POST   /users   -- create an account without logging it in
  PATCH  /users   -- replace profile fields of account `id`
  DELETE /users   -- delete account `id` unless it still owns food records

The food check lives here, not in the user store: the store does not know
about foods, and deleting a user out from under their records would orphan
them.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from api.models import MessageResponse, UserCreate, UserDelete, UserResponse, UserUpdate
from auth.accounts import AccountProvisioner
from auth.dependencies import require_access_claim
from auth.errors import NotFoundError, ValidationError
from auth.store import UserStore
from auth.tokens import AccessClaim
from foods.store import FoodStore

logger = logging.getLogger("simpan.api")

router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
def list_users(request: Request, claim: AccessClaim = Depends(require_access_claim)) -> list[UserResponse]:
    user_store: UserStore = request.app.state.user_store
    users = user_store.list_users()
    if not users:
        raise ValidationError("No users found", code="no_users")
    return [UserResponse.from_credential(u) for u in users]


@router.post("/users", response_model=MessageResponse, status_code=201)
def create_user(
    request: Request,
    body: UserCreate,
    claim: AccessClaim = Depends(require_access_claim),
) -> MessageResponse:
    """Create an account. Unlike signup this does not start a session."""
    accounts: AccountProvisioner = request.app.state.accounts
    created = accounts.create_user(body.username, body.email, body.password, body.name, body.reminder)
    return MessageResponse(message=f"User {created.username} added")


@router.patch("/users", response_model=UserResponse)
def update_user(
    request: Request,
    body: UserUpdate,
    claim: AccessClaim = Depends(require_access_claim),
) -> UserResponse:
    accounts: AccountProvisioner = request.app.state.accounts
    updated = accounts.update_user(body.id, body.username, body.email, body.name, body.reminder)
    return UserResponse.from_credential(updated)


@router.delete("/users", response_model=MessageResponse)
def delete_user(
    request: Request,
    body: UserDelete,
    claim: AccessClaim = Depends(require_access_claim),
) -> MessageResponse:
    """Delete an account. Blocked while the user still owns food records.

    Deleting an account also ends its sessions at the next refresh: renewal
    re-reads the account and fails once it is gone.
    """
    if body.id is None:
        raise ValidationError("User ID Required")

    foods: FoodStore = request.app.state.foods
    if foods.exists_for_user(body.id):
        raise ValidationError("User has assigned food items", code="has_dependents")

    user_store: UserStore = request.app.state.user_store
    deleted = user_store.delete_user(body.id)
    if deleted is None:
        raise NotFoundError("User not found")

    logger.info("User %s deleted by user_id=%s", deleted.id, claim.id)
    return MessageResponse(message=f"Username {deleted.username} with ID {deleted.id} deleted")
