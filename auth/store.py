"""
auth/store.py -- SQLAlchemy Core persistence layer for credentials.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_credential
is the mapper. Service and route code never touches SQL directly.

Uniqueness:
  username and email carry UNIQUE constraints. The services check both before
  writing, but that check-then-create is not atomic -- two concurrent signups
  for the same name can both pass it. The constraint is the real guarantee:
  an IntegrityError on insert/update is converted to ConflictError naming the
  column that collided, so callers see the same error either way.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/, foods/, or mail/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import ConflictError
from auth.models import Credential

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(320), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("name", String(255), nullable=False),
    Column("reminder", String(64)),
    Column("created_at", String(32), nullable=False),
)

_UPDATABLE_FIELDS = {"username", "email", "name", "reminder", "hashed_password"}


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _conflict_from(exc: IntegrityError) -> ConflictError:
    """Translate a UNIQUE violation into a ConflictError naming the column.

    SQLite reports "UNIQUE constraint failed: users.email"; PostgreSQL names
    the index (users_email_key). Both contain the column name.
    """
    message = str(exc.orig).lower()
    if "email" in message:
        return ConflictError("Email already exists", field="email")
    return ConflictError("Username already exists", field="username")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for Credential records.

    Usage:
        store = UserStore("sqlite:///:memory:")
        store.create_user(Credential(username="ana", email="ana@x.io", name="Ana", hashed_password=h))
        cred = store.get_by_username("ana")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> Credential | None:
        """Look up a credential by exact username (case-sensitive)."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_credential(row) if row is not None else None

    def get_by_email(self, email: str) -> Credential | None:
        """Look up a credential by exact email address."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_credential(row) if row is not None else None

    def get_by_id(self, user_id: int) -> Credential | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_credential(row) if row is not None else None

    def list_users(self) -> list[Credential]:
        """Return all credentials ordered by username."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.username)).fetchall()
        return [_row_to_credential(r) for r in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, credential: Credential) -> Credential:
        """Insert a new credential and return it with id and created_at filled in.

        Raises ConflictError if the username or email already exists.
        """
        created_at = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        username=credential.username,
                        email=credential.email,
                        hashed_password=credential.hashed_password,
                        name=credential.name,
                        reminder=credential.reminder,
                        created_at=created_at,
                    )
                )
                conn.commit()
                user_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise _conflict_from(exc) from exc
        return Credential(
            id=user_id,
            username=credential.username,
            email=credential.email,
            name=credential.name,
            hashed_password=credential.hashed_password,
            reminder=credential.reminder,
            created_at=created_at,
        )

    def update_user(self, user_id: int, **fields) -> Credential | None:
        """Update mutable fields on an existing credential.

        Accepted fields: username, email, name, reminder, hashed_password.
        Unknown keys raise ValueError. Returns the updated credential, or None
        if user_id was not found. Raises ConflictError on a duplicate
        username/email.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown credential fields: {unknown!r}")
        if fields:
            try:
                with self.engine.connect() as conn:
                    conn.execute(_users.update().where(_users.c.id == user_id).values(**fields))
                    conn.commit()
            except IntegrityError as exc:
                raise _conflict_from(exc) from exc
        return self.get_by_id(user_id)

    def delete_user(self, user_id: int) -> Credential | None:
        """Permanently delete a credential. Returns the deleted record, or None if not found.

        Callers must check for dependent food records first -- the store does
        not know about them.
        """
        existing = self.get_by_id(user_id)
        if existing is None:
            return None
        with self.engine.connect() as conn:
            conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return existing

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_credential(row) -> Credential:
    return Credential(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        name=row.name,
        reminder=row.reminder,
        created_at=row.created_at,
    )
