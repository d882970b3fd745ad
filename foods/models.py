"""
foods/models.py -- Domain dataclass for tracked food items.

Pure data container. Only the ownership link matters to the rest of the
service: a user who still owns food records cannot be deleted.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Food:
    """A food item a user is tracking until its expiry date.

    date_expiry is an ISO 8601 date (YYYY-MM-DD). id is None before the
    record is written to the database.
    """

    user_id: int
    name: str
    date_expiry: str
    category: str
    place: str  # "fridge" | "freezer" | "pantry" | free text
    quantity: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
