"""
auth/tokens.py -- Session token issuance and verification (signed JWT).

Security design decisions:
  python-jose with HS256 by default. Tokens are signed with SECRET_KEY and
  carry sub (username), user_id, iat and exp. Sessions are stateless: no
  server-side token table exists, so logout only tells the client to discard
  its copy.

  Verification is all-or-nothing. A bad signature, a malformed token, a
  missing claim, or an exp in the past all raise -- callers never see a
  partially trusted payload. ExpiredTokenError is distinguished from
  InvalidTokenError only for logging; both are 401 at the API layer.

  The signing key is process-wide configuration, read once when the service
  is built in the app lifespan (see TokenService.from_settings).

Layer rule: no imports from api/ or client/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from jose import ExpiredSignatureError, JOSEError, JWTError, jwt

from auth.errors import ExpiredTokenError, InternalError, InvalidTokenError
from auth.models import TokenClaims
from core.config import Settings

logger = logging.getLogger("sessiongate.auth")

# Claims a token must carry to be accepted.
_REQUIRED_OPTIONS = {"require_exp": True, "require_iat": True, "require_sub": True}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Mints and verifies signed session tokens.

    Usage:
        tokens = TokenService(secret_key=settings.secret_key)
        token = tokens.issue(user_id=1, username="alice")
        claims = tokens.verify(token)   # TokenClaims or raises InvalidTokenError
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_seconds: int = 24 * 3600,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expire_seconds = expire_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.token_algorithm,
            expire_seconds=settings.token_expire_seconds,
        )

    def issue(self, user_id: int, username: str) -> str:
        """Encode a signed token identifying the user, stamped with iat and exp."""
        issued_at = int(self._clock().timestamp())
        payload = {
            "sub": username,
            "user_id": user_id,
            "iat": issued_at,
            "exp": issued_at + self.expire_seconds,
        }
        try:
            return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
        except JOSEError as exc:
            logger.error("Token signing failed: %s", exc)
            raise InternalError("Token signing failed.") from exc

    def verify(self, token: str) -> TokenClaims:
        """Decode and verify a token. Returns its claims or raises InvalidTokenError."""
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options=_REQUIRED_OPTIONS,
            )
        except ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except JWTError as exc:
            raise InvalidTokenError() from exc

        user_id = payload.get("user_id")
        username = payload.get("sub")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(username, str):
            raise InvalidTokenError()
        return TokenClaims(
            user_id=user_id,
            username=username,
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )


def parse_bearer(header_value: str | None) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header value.

    Returns None when the header is absent, uses another scheme, or carries an
    empty token. The scheme name is matched case-insensitively.
    """
    if not header_value:
        return None
    scheme, _, token = header_value.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None
