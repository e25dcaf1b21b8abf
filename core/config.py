"""
core/config.py -- SessionGate settings, read once from the environment.

Every tunable (signing key, token lifetime, password policy, bcrypt cost,
rate limits, HTTP allow-lists) is a field on Settings. Field names map to
upper-case env vars (bcrypt_rounds -> BCRYPT_ROUNDS); a .env file in the
working directory is read too. Nothing else in the tree touches os.environ.

get_settings() is lru_cached, so the process sees one Settings instance.
Tests that change the environment construct Settings() directly or call
get_settings.cache_clear().

Startup fails fast: the model validators below reject a missing SECRET_KEY
outside dev mode, a short one in any mode, and bcrypt/password/token
policies that could never work.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or client/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("sessiongate.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'sessiongate_auth.db'}"


class Settings(BaseSettings):
    """Server configuration. Every field has a default; only SECRET_KEY must
    be supplied, and only when DEBUG is off.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # "" means unset; validate_secret_key replaces it or raises.
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    token_algorithm: str = "HS256"
    # Maximum token age. Every issued token carries an exp claim derived from it.
    token_expire_seconds: int = 24 * 3600

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    password_min_length: int = 8
    bcrypt_rounds: int = 12

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    register_rate_limit: str = "5/minute"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Fill in or reject SECRET_KEY.

        With DEBUG on, a missing key is replaced by a random one and every
        token dies with the process. With DEBUG off, a missing key is fatal.
        Keys under 32 characters are fatal either way.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("DEBUG is on and SECRET_KEY is unset; using a random key for this process")
            else:
                raise ValueError(
                    "SECRET_KEY is not set. Export it (at least 32 characters) or "
                    "put it in .env; set DEBUG=true to run with a throwaway key."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    @model_validator(mode="after")
    def validate_auth_policy(self) -> "Settings":
        """Reject password and token policies that cannot work."""
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        if self.password_min_length < 1:
            raise ValueError("PASSWORD_MIN_LENGTH must be at least 1.")
        if self.token_expire_seconds <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, building it on first call."""
    return Settings()
