"""Unit tests for Settings in core/config.py.

Covers:
- SECRET_KEY policy: required in production, auto-generated in dev, min length
- Password, bcrypt and token policy bounds
- get_settings() caching
"""

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings

_KEY = "s" * 40


@pytest.fixture()
def clean_env(monkeypatch):
    """Strip the test-session overrides so each case states its own environment."""
    for name in ("DEBUG", "SECRET_KEY", "BCRYPT_ROUNDS", "PASSWORD_MIN_LENGTH", "TOKEN_EXPIRE_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_production_without_secret_key_refuses_to_start(clean_env) -> None:
    with pytest.raises(ValidationError, match="SECRET_KEY is not set"):
        Settings(_env_file=None)


def test_short_secret_key_rejected(clean_env) -> None:
    clean_env.setenv("SECRET_KEY", "too-short")
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(_env_file=None)


def test_short_secret_key_rejected_in_debug(clean_env) -> None:
    clean_env.setenv("DEBUG", "true")
    clean_env.setenv("SECRET_KEY", "too-short")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_debug_generates_secret_key(clean_env) -> None:
    clean_env.setenv("DEBUG", "true")
    first = Settings(_env_file=None)
    second = Settings(_env_file=None)
    assert len(first.secret_key) >= 32
    assert first.secret_key != second.secret_key


def test_defaults(clean_env) -> None:
    clean_env.setenv("SECRET_KEY", _KEY)
    settings = Settings(_env_file=None)
    assert settings.debug is False
    assert settings.token_algorithm == "HS256"
    assert settings.token_expire_seconds == 86400
    assert settings.password_min_length == 8
    assert settings.bcrypt_rounds == 12


def test_env_overrides(clean_env) -> None:
    clean_env.setenv("SECRET_KEY", _KEY)
    clean_env.setenv("PASSWORD_MIN_LENGTH", "12")
    clean_env.setenv("TOKEN_EXPIRE_SECONDS", "600")
    settings = Settings(_env_file=None)
    assert settings.password_min_length == 12
    assert settings.token_expire_seconds == 600


@pytest.mark.parametrize(
    "name, value",
    [
        ("BCRYPT_ROUNDS", "3"),
        ("BCRYPT_ROUNDS", "32"),
        ("PASSWORD_MIN_LENGTH", "0"),
        ("TOKEN_EXPIRE_SECONDS", "0"),
        ("TOKEN_EXPIRE_SECONDS", "-60"),
    ],
)
def test_unworkable_policy_rejected(clean_env, name: str, value: str) -> None:
    clean_env.setenv("SECRET_KEY", _KEY)
    clean_env.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
