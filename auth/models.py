"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work; these only own the shape.

Layer rule: no imports from api/, client/, or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account, as held by the user record store.

    password_hash is the bcrypt digest. It never leaves the server: the API
    layer maps User to a public view without it before serialising.

    created_at / last_login are ISO 8601 UTC strings. last_login is None until
    the first successful login.
    """

    username: str
    password_hash: str
    id: int | None = None
    created_at: str | None = None
    last_login: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """The verified contents of a session token.

    issued_at / expires_at are Unix timestamps (the iat / exp claims).
    """

    user_id: int
    username: str
    issued_at: int
    expires_at: int
