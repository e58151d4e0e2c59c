"""Credential authentication.

- Field validation against versioned rule tables (`rules`, `validators`)
- Salted PBKDF2 password hashing (`security`)
- Stateless JWT bearer tokens (`tokens`)
- SQL-backed credential store with case-insensitive uniqueness (`store`, `crud`)
- Register / login / fetch-by-token orchestration (`service`)

Nothing in this package depends on a web framework; `credential_auth.api` maps the
results onto HTTP.
"""

from credential_auth.config import Config

from .service import AuthService
from .store import CredentialStore, SqlCredentialStore
from .tokens import TokenManager


def build_auth_service(cfg: Config) -> AuthService:
    """Wire store, token manager and service from a single config object."""
    tokens = TokenManager(
        cfg.AUTH_JWT_SECRET,
        expires_days=cfg.AUTH_TOKEN_EXPIRE_DAYS,
        leeway_seconds=cfg.AUTH_TOKEN_LEEWAY_SECONDS,
    )
    return AuthService(
        SqlCredentialStore.from_config(cfg),
        tokens,
        max_concurrent_hashes=cfg.AUTH_MAX_CONCURRENT_HASHES,
        pbkdf2_iterations=cfg.AUTH_PBKDF2_ITERATIONS,
    )


__all__ = [
    "AuthService",
    "CredentialStore",
    "SqlCredentialStore",
    "TokenManager",
    "build_auth_service",
]
