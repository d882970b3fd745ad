"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services
do the work; these own the domain shape.

Layer rule: no imports from api/, foods/, or mail/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Credential:
    """A stored account: identity fields plus the salted password hash.

    username and email are each unique across all credentials (enforced by
    the store's UNIQUE constraints). hashed_password never leaves the auth
    core -- API response models do not carry it.

    reminder is the user's daily expiry-reminder preference as submitted by
    the client (free text, e.g. "08:00"). None for accounts created through
    signup, which does not ask for it.
    """

    username: str
    email: str
    name: str
    id: int | None = None
    hashed_password: str | None = None
    reminder: str | None = None
    created_at: str | None = None
