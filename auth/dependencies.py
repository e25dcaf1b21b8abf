"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Only one auth method exists: an 'Authorization: Bearer <token>' header
carrying a token minted by TokenService.

try_get_claims() is the soft variant (returns None on any failure).
require_claims() wraps it and raises AuthenticationError (401) if the
request is unauthenticated.
require_user() additionally loads the user record and rejects tokens whose
user no longer exists.

Token verification is cheap (one HMAC) and runs inline on the request path.

Layer rule: no imports from api/ or client/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.errors import AuthenticationError, InvalidTokenError
from auth.models import TokenClaims, User
from auth.store import UserStore
from auth.tokens import TokenService, parse_bearer

logger = logging.getLogger("sessiongate.auth")


def try_get_claims(request: Request) -> TokenClaims | None:
    """Verify the request's bearer token. Returns its claims, or None.

    Never raises for a missing or bad token -- callers that need a hard 401
    should use require_claims().
    """
    token = parse_bearer(request.headers.get("Authorization"))
    if token is None:
        return None
    tokens: TokenService = request.app.state.tokens
    try:
        return tokens.verify(token)
    except InvalidTokenError as exc:
        logger.debug("Rejected bearer token: %s", exc.code)
        return None


def require_claims(request: Request) -> TokenClaims:
    """Require a valid bearer token. Raises AuthenticationError (401) otherwise.

    Use as a FastAPI dependency:
        @router.post("/protected")
        async def route(claims: TokenClaims = Depends(require_claims)): ...
    """
    claims = try_get_claims(request)
    if claims is None:
        raise AuthenticationError()
    return claims


def require_user(request: Request) -> User:
    """Require a valid bearer token whose user still has a record."""
    claims = require_claims(request)
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(claims.user_id)
    if user is None or user.username != claims.username:
        raise AuthenticationError()
    return user
