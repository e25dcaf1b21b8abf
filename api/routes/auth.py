"""
api/routes/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/auth/login     -- password login; returns {token, user}
  POST /api/auth/register  -- create account; returns {token, user}
  GET  /api/auth/status    -- {authenticated: bool}; never an error status
  GET  /api/auth/user      -- public view of the token's user (requires auth)
  POST /api/auth/logout    -- acknowledge logout (requires auth)

Security:
  Login and register are rate-limited per client IP (LOGIN_RATE_LIMIT,
  REGISTER_RATE_LIMIT).
  Login answers unknown usernames and wrong passwords with the same 401 body
  and, through CredentialStore.authenticate(), the same bcrypt cost.
  Cache-Control: no-store on every response that carries a token.
  bcrypt and user store calls run in the thread pool, never on the event loop.
  Plaintext passwords, hashes and tokens are never logged.

Sessions are stateless: logout has no server-side effect beyond confirming
the token was valid. The client discards its copy.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from api.limiter import limiter, login_limit, register_limit
from api.models import (
    AuthResponse,
    CredentialsRequest,
    CurrentUserResponse,
    ErrorResponse,
    LogoutResponse,
    PublicUser,
    StatusResponse,
)
from auth.dependencies import require_claims, require_user, try_get_claims
from auth.errors import AuthenticationError, ConflictError, ValidationError
from auth.models import TokenClaims, User
from auth.passwords import CredentialStore
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings

logger = logging.getLogger("sessiongate.api.auth")

# Auth policy:
# - POST /api/auth/login:     public
# - POST /api/auth/register:  public
# - GET  /api/auth/status:    public -- reports the boolean instead of failing
# - GET  /api/auth/user:      requires auth (require_user)
# - POST /api/auth/logout:    requires auth (require_claims)
router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/login", response_model=AuthResponse, responses=_ERROR_RESPONSES)
@limiter.limit(login_limit)
async def login(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Authenticate with username and password; return a fresh token.

    Recording last_login is best-effort: a storage failure there is logged
    and the login still succeeds.
    """
    _require_fields(body)
    user_store: UserStore = request.app.state.user_store
    credentials: CredentialStore = request.app.state.credentials

    user = await credentials.authenticate_async(user_store, body.username, body.password)
    if user is None:
        logger.info("Login rejected: bad credentials")
        raise AuthenticationError("Invalid username or password.", code="bad_credentials")

    try:
        user.last_login = await run_in_threadpool(user_store.update_last_login, user.id)
    except SQLAlchemyError:
        logger.warning("Could not record last_login for user_id=%s", user.id, exc_info=True)

    logger.info("Login succeeded for user_id=%s", user.id)
    return _auth_response(request, user)


@router.post("/auth/register", response_model=AuthResponse, responses={**_ERROR_RESPONSES, 409: {"model": ErrorResponse}})
@limiter.limit(register_limit)
async def register(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Create an account and log it in.

    The pre-insert lookup only avoids paying for bcrypt on an obvious
    duplicate. Uniqueness itself is enforced by the store's UNIQUE index, so a
    concurrent registration that slips past the lookup still gets 409.
    """
    _require_fields(body)
    settings = get_settings()
    if len(body.password) < settings.password_min_length:
        raise ValidationError(
            f"Invalid password: must be at least {settings.password_min_length} characters.",
            code="weak_password",
        )

    user_store: UserStore = request.app.state.user_store
    credentials: CredentialStore = request.app.state.credentials

    if await run_in_threadpool(user_store.get_by_username, body.username) is not None:
        logger.info("Registration rejected: username taken")
        raise ConflictError("Username already exists.")

    hashed = await credentials.hash_async(body.password)
    user = await run_in_threadpool(user_store.create_user, User(username=body.username, password_hash=hashed))

    logger.info("Registered user_id=%s", user.id)
    return _auth_response(request, user)


@router.get("/auth/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    """Report whether the request carries a valid bearer token.

    Missing, malformed, forged and expired tokens all yield
    authenticated=false with a 200 -- this endpoint never fails on auth.
    """
    return StatusResponse(authenticated=try_get_claims(request) is not None)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/user", response_model=CurrentUserResponse, responses={401: {"model": ErrorResponse}})
async def current_user(user: User = Depends(require_user)) -> CurrentUserResponse:
    """Return the public view of the user the bearer token belongs to."""
    return CurrentUserResponse(user=PublicUser.from_user(user))


@router.post("/auth/logout", response_model=LogoutResponse, responses={401: {"model": ErrorResponse}})
async def logout(claims: TokenClaims = Depends(require_claims)) -> LogoutResponse:
    """Acknowledge logout. The client is responsible for discarding its token."""
    logger.info("Logout for user_id=%s", claims.user_id)
    return LogoutResponse(success=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_fields(body: CredentialsRequest) -> None:
    missing = body.missing_fields()
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}.", code="missing_fields")


def _auth_response(request: Request, user: User) -> JSONResponse:
    tokens: TokenService = request.app.state.tokens
    token = tokens.issue(user.id, user.username)
    return JSONResponse(
        status_code=200,
        content=AuthResponse(token=token, user=PublicUser.from_user(user)).model_dump(),
        headers={"Cache-Control": "no-store"},
    )
