"""Credential authentication service.

Registers users, checks passwords against salted PBKDF2 hashes, issues and verifies
stateless bearer tokens, and resolves a token back to a user.

Layout:
- `credential_auth.auth`: validation, hashing, tokens, storage, the auth flows
- `credential_auth.api`: thin FastAPI adapter over the flows
- `credential_auth.db` / `credential_auth.schema`: SQLite or Postgres storage

See README for setup and usage.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
