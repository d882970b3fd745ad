"""
auth/passwords.py -- One-way salted password hashing (bcrypt).

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection feeds bcrypt a password longer than 72 bytes, which bcrypt 4.x
rejects. The cost factor (rounds) is tunable through Settings.bcrypt_rounds;
10 is the floor the service runs with.

hash_password() failures propagate -- a password that cannot be hashed must
abort the calling operation. verify_password() never raises: a mismatch or a
malformed stored hash is simply False.
"""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. Login always calls verify_password(), even when
# the username does not exist, so response time does not reveal whether an
# account exists.
DUMMY_HASH: str = hash_password("simpan_timing_dummy")
