"""
API request and response models for SessionGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Separation of concerns: auth/ models = domain truth; api/ models = API contract.
The password hash never appears in any model below.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Request body for POST /api/auth/login and POST /api/auth/register.

    Both fields are optional at the schema level so the route can answer a
    missing field with a 400 that names it, instead of a generic schema error.
    """

    username: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)

    def missing_fields(self) -> list[str]:
        """Return the names of required fields that are absent or empty."""
        missing = []
        if not self.username or not self.username.strip():
            missing.append("username")
        if not self.password:
            missing.append("password")
        return missing


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class PublicUser(BaseModel):
    """The public view of a user record -- everything except the password hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    created_at: Optional[str] = None
    last_login: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            username=user.username,
            created_at=user.created_at,
            last_login=user.last_login,
        )


class AuthResponse(BaseModel):
    """Response body for a successful login or registration."""

    model_config = ConfigDict(frozen=True)

    token: str
    user: PublicUser


class StatusResponse(BaseModel):
    """Response for GET /api/auth/status."""

    model_config = ConfigDict(frozen=True)

    authenticated: bool


class CurrentUserResponse(BaseModel):
    """Response for GET /api/auth/user."""

    model_config = ConfigDict(frozen=True)

    user: PublicUser


class LogoutResponse(BaseModel):
    """Response for POST /api/auth/logout."""

    model_config = ConfigDict(frozen=True)

    success: bool = True


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    error: str
    code: str


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    database: str = "ok"
