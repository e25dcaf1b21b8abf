"""
auth/errors.py -- Exception taxonomy for the authentication subsystem.

Every failure the auth layer can report is an AuthError subclass carrying a
human-readable message, a machine-readable code, and the HTTP status the API
layer should answer with. api/main.py registers one exception handler for
AuthError and renders all of them in the same envelope:

    {"error": "<message>", "code": "<code>"}

Layer rule: no imports from api/, client/, or core/. The status codes are
plain integers so this module stays framework-free.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all authentication subsystem errors."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        """Render the error as the JSON body returned to API clients."""
        return {"error": self.message, "code": self.code}


class ValidationError(AuthError):
    """Malformed, missing, or too-weak input. Never retried."""

    status_code = 400
    code = "validation_error"
    default_message = "Invalid request."


class AuthenticationError(AuthError):
    """Bad credentials, or a missing/invalid token on a protected route."""

    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required."


class InvalidTokenError(AuthenticationError):
    """Token is malformed, forged, or carries an unexpected claim set."""

    code = "invalid_token"
    default_message = "Invalid authentication token."


class ExpiredTokenError(InvalidTokenError):
    """Token signature is fine but its exp claim is in the past."""

    code = "token_expired"
    default_message = "Authentication token has expired."


class ConflictError(AuthError):
    """A unique key (the username) is already taken."""

    status_code = 409
    code = "conflict"
    default_message = "Resource already exists."


class InternalError(AuthError):
    """Hashing, signing, or storage failure. Logged, never shown verbatim."""


class HashingError(InternalError):
    """bcrypt failed for a reason unrelated to the shape of its input."""

    code = "hashing_error"
    default_message = "Password hashing failed."
