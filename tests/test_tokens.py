"""Unit tests for TokenService and parse_bearer in auth/tokens.py.

Covers:
- issue() -> verify() returns the user id, username, iat and exp
- exp is iat + the configured maximum age
- Expired, forged, tampered, malformed and claim-deficient tokens all raise
- parse_bearer() header handling
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.errors import AuthenticationError, ExpiredTokenError, InternalError, InvalidTokenError
from auth.tokens import TokenService, parse_bearer

_SECRET = "k" * 64


def _fixed_clock(moment: datetime):
    return lambda: moment


# ---------------------------------------------------------------------------
# issue / verify
# ---------------------------------------------------------------------------


def test_issue_then_verify() -> None:
    service = TokenService(_SECRET)
    claims = service.verify(service.issue(7, "alice"))
    assert claims.user_id == 7
    assert claims.username == "alice"


def test_expiry_claim_matches_policy() -> None:
    now = datetime.now(timezone.utc)
    service = TokenService(_SECRET, expire_seconds=3600, clock=_fixed_clock(now))
    claims = service.verify(service.issue(1, "alice"))
    assert claims.issued_at == int(now.timestamp())
    assert claims.expires_at - claims.issued_at == 3600


def test_token_is_opaque_string() -> None:
    token = TokenService(_SECRET).issue(1, "alice")
    assert isinstance(token, str)
    assert token.count(".") == 2


def test_expired_token_raises() -> None:
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    stale = TokenService(_SECRET, expire_seconds=60, clock=_fixed_clock(past)).issue(1, "alice")
    with pytest.raises(ExpiredTokenError):
        TokenService(_SECRET).verify(stale)


def test_expired_is_an_invalid_token() -> None:
    """Callers that catch InvalidTokenError also see expiry."""
    assert issubclass(ExpiredTokenError, InvalidTokenError)
    assert issubclass(InvalidTokenError, AuthenticationError)
    assert InvalidTokenError().status_code == 401


def test_wrong_key_raises() -> None:
    token = TokenService("a" * 64).issue(1, "alice")
    with pytest.raises(InvalidTokenError):
        TokenService("b" * 64).verify(token)


def test_tampered_payload_raises() -> None:
    service = TokenService(_SECRET)
    header, payload, signature = service.issue(1, "alice").split(".")
    other_payload = service.issue(2, "mallory").split(".")[1]
    with pytest.raises(InvalidTokenError):
        service.verify(".".join([header, other_payload, signature]))
    assert payload != other_payload


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z"])
def test_malformed_token_raises(token: str) -> None:
    with pytest.raises(InvalidTokenError):
        TokenService(_SECRET).verify(token)


def test_token_without_exp_raises() -> None:
    """A correctly signed token that skips the expiry claim is still rejected."""
    now = int(datetime.now(timezone.utc).timestamp())
    token = jwt.encode({"sub": "alice", "user_id": 1, "iat": now}, _SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        TokenService(_SECRET).verify(token)


def test_token_without_user_id_raises() -> None:
    now = int(datetime.now(timezone.utc).timestamp())
    token = jwt.encode({"sub": "alice", "iat": now, "exp": now + 60}, _SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        TokenService(_SECRET).verify(token)


def test_unsigned_token_rejected() -> None:
    """alg=none tokens must never verify."""
    service = TokenService(_SECRET)
    header, payload, _signature = service.issue(1, "alice").split(".")
    with pytest.raises(InvalidTokenError):
        service.verify(f"{header}.{payload}.")


def test_signing_failure_is_internal_error() -> None:
    service = TokenService(_SECRET, algorithm="NOT-AN-ALGORITHM")
    with pytest.raises(InternalError):
        service.issue(1, "alice")


# ---------------------------------------------------------------------------
# parse_bearer
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc", "abc"),
        ("Bearer   abc  ", "abc"),
        ("Bearer ", None),
        ("Bearer", None),
        ("Basic dXNlcjpwYXNz", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_bearer(header, expected) -> None:
    assert parse_bearer(header) == expected
