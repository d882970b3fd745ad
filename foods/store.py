"""
foods/store.py -- SQLAlchemy-backed persistence for food records.

Pattern: Repository. FoodStore exposes only what the rest of the service
needs: adding a record and asking whether a user still owns any. The user
deletion path consults exists_for_user() before removing an account.

Security: all queries use bound parameters. No f-strings in SQL.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine, event, select
from sqlalchemy.engine import Engine

from foods.models import Food

metadata = MetaData()

_foods = Table(
    "foods",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("date_expiry", String(10), nullable=False),  # YYYY-MM-DD
    Column("category", String(100), nullable=False),
    Column("place", String(100), nullable=False),
    Column("quantity", String(50)),
    Column("created_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FoodStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def add_food(self, food: Food) -> int:
        """Insert a food record and return its assigned ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _foods.insert().values(
                    user_id=food.user_id,
                    name=food.name,
                    date_expiry=food.date_expiry,
                    category=food.category,
                    place=food.place,
                    quantity=food.quantity,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def exists_for_user(self, user_id: int) -> bool:
        """Return True if the user owns at least one food record."""
        with self.engine.connect() as conn:
            row = conn.execute(select(_foods.c.id).where(_foods.c.user_id == user_id).limit(1)).fetchone()
        return row is not None

    def close(self) -> None:
        self.engine.dispose()
