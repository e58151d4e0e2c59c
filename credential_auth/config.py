import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing or malformed."""


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer (got {raw!r})") from e


def _env_float(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number (got {raw!r})") from e


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Built once at process start by `load_config()` and passed explicitly into the
    store, token manager and service constructors. Business logic never reads the
    environment itself.

    IMPORTANT: Provide AUTH_JWT_SECRET via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Auth (JWT)
    # -----------------
    AUTH_JWT_SECRET: str

    # -----------------
    # Storage
    # -----------------
    # Preferred: set AUTH_DATABASE_URL (or DATABASE_URL) to use Postgres.
    # Fallback: AUTH_DB_PATH for SQLite.
    DB_DSN: str = "./credential_auth.sqlite"

    # Applied to every storage round trip (connect + statement). A timeout is
    # reported to callers as a storage failure.
    DB_TIMEOUT_SECONDS: float = 5.0

    AUTH_TOKEN_EXPIRE_DAYS: int = 30
    # Clock skew tolerance when checking exp/nbf/iat.
    AUTH_TOKEN_LEEWAY_SECONDS: int = 0

    # -----------------
    # Password hashing
    # -----------------
    AUTH_PBKDF2_ITERATIONS: int = 10_000
    # Upper bound on PBKDF2 derivations running at once in this process.
    AUTH_MAX_CONCURRENT_HASHES: int = 4

    # -----------------
    # HTTP adapter
    # -----------------
    CORS_ALLOW_ORIGINS: str = "*"
    API_DEBUG: bool = False


def load_config(env_file: str | None = None) -> Config:
    """Read configuration from the environment (and an optional .env file).

    A missing signing secret is a fatal startup condition, not a per-request error.
    """

    load_dotenv(env_file)

    secret = (os.environ.get("AUTH_JWT_SECRET") or "").strip()
    if not secret:
        raise ConfigError("AUTH_JWT_SECRET is not configured")

    dsn = (
        os.environ.get("AUTH_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("AUTH_DB_PATH", "./credential_auth.sqlite")
    )

    cfg = Config(
        AUTH_JWT_SECRET=secret,
        DB_DSN=dsn,
        DB_TIMEOUT_SECONDS=_env_float("DB_TIMEOUT_SECONDS", 5.0),
        AUTH_TOKEN_EXPIRE_DAYS=_env_int("AUTH_TOKEN_EXPIRE_DAYS", 30),
        AUTH_TOKEN_LEEWAY_SECONDS=_env_int("AUTH_TOKEN_LEEWAY_SECONDS", 0),
        AUTH_PBKDF2_ITERATIONS=_env_int("AUTH_PBKDF2_ITERATIONS", 10_000),
        AUTH_MAX_CONCURRENT_HASHES=_env_int("AUTH_MAX_CONCURRENT_HASHES", 4),
        CORS_ALLOW_ORIGINS=os.environ.get("CORS_ALLOW_ORIGINS", "*"),
        API_DEBUG=_env_bool("API_DEBUG", False) is True,
    )

    if cfg.AUTH_TOKEN_EXPIRE_DAYS < 1:
        raise ConfigError("AUTH_TOKEN_EXPIRE_DAYS must be >= 1")
    if cfg.AUTH_PBKDF2_ITERATIONS < 1:
        raise ConfigError("AUTH_PBKDF2_ITERATIONS must be >= 1")
    if cfg.AUTH_MAX_CONCURRENT_HASHES < 1:
        raise ConfigError("AUTH_MAX_CONCURRENT_HASHES must be >= 1")
    return cfg
