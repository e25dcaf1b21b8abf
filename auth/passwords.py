"""
auth/passwords.py -- Password hashing and verification (bcrypt).

CredentialStore is the only component that touches raw secret material.
Everything else in the codebase handles the opaque hash string.

Security design decisions:
  bcrypt directly, no passlib wrapper. Its adaptive cost factor (rounds) makes
  brute force expensive; the cost is configurable via BCRYPT_ROUNDS.

  bcrypt only reads the first 72 bytes of a password and current releases
  raise on longer input. _encode() truncates explicitly so a long password is
  never an error -- HashingError is reserved for genuine internal failures.

  verify() never raises on mismatch or on a corrupt stored hash; it returns
  False. bcrypt.checkpw compares in constant time.

  The dummy hash enables timing equalisation in authenticate(): unknown
  usernames still cost one bcrypt verification, so response time does not
  reveal whether a username exists.

Both hash() and verify() are CPU-bound. Async callers must push them off the
event loop (see hash_async / verify_async).

Layer rule: no imports from api/ or client/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import bcrypt
from starlette.concurrency import run_in_threadpool

from auth.errors import HashingError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("sessiongate.auth")

_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class CredentialStore:
    """Hashes and verifies passwords with a fixed bcrypt cost factor.

    Usage:
        credentials = CredentialStore(rounds=12)
        hashed = credentials.hash("correct horse")
        credentials.verify("correct horse", hashed)   # True
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        # Computed once so the first unknown-username login is not measurably
        # slower than later ones.
        self._dummy_hash = self.hash("sessiongate_timing_dummy")

    def hash(self, password: str) -> str:
        """Return a salted bcrypt hash of the plaintext password."""
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(_encode(password), salt).decode("utf-8")
        except Exception as exc:
            logger.error("bcrypt hashing failed: %s", type(exc).__name__)
            raise HashingError() from exc

    def verify(self, password: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the stored hash."""
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
        except ValueError:
            # Corrupt or non-bcrypt hash in the store -- treat as mismatch.
            return False

    async def hash_async(self, password: str) -> str:
        return await run_in_threadpool(self.hash, password)

    async def verify_async(self, password: str, hashed: str) -> bool:
        return await run_in_threadpool(self.verify, password, hashed)

    def authenticate(self, store: UserStore, username: str, password: str) -> User | None:
        """Look up a user and check the password with timing equalisation.

        Always runs bcrypt whether or not the user exists:
        - Unknown username: bcrypt runs against the dummy hash (same cost)
        - Wrong password: bcrypt runs against the real hash (same cost)

        Returns the User on success, None on any failure.
        """
        user = store.get_by_username(username)
        if user is None:
            self.verify(password, self._dummy_hash)
            return None
        if not self.verify(password, user.password_hash):
            return None
        return user

    async def authenticate_async(self, store: UserStore, username: str, password: str) -> User | None:
        return await run_in_threadpool(self.authenticate, store, username, password)
