"""Credential storage.

`CredentialStore` is the contract the auth service depends on. `SqlCredentialStore`
implements it on top of `credential_auth.db.connect`, so it works against SQLite or
Postgres. Uniqueness of username/email is decided by the database's unique indexes
during a single insert; this module never checks first and inserts second.
"""

from __future__ import annotations

from typing import Optional, Protocol

from credential_auth.auth import crud
from credential_auth.auth.errors import StorageFailure, StoreError, UniquenessConflict
from credential_auth.config import Config
from credential_auth.db import connect, is_unique_violation
from credential_auth.models import User


def _debug(msg: str) -> None:
    print(f"[store] {msg}")


class CredentialStore(Protocol):
    def find_user_by_login(self, identifier: str) -> Optional[User]:
        """Exactly one user whose username or email matches, ignoring case; else None."""
        ...

    def find_user_by_identity(self, user_id: str, username: str) -> Optional[User]:
        ...

    def insert_user(self, user: User) -> None:
        """Raise UniquenessConflict on a duplicate, StorageFailure on anything else."""
        ...


class SqlCredentialStore:
    def __init__(self, db_dsn: str, *, timeout_seconds: float = 5.0):
        self.db_dsn = db_dsn
        self.timeout_seconds = float(timeout_seconds)

    @classmethod
    def from_config(cls, cfg: Config) -> "SqlCredentialStore":
        return cls(cfg.DB_DSN, timeout_seconds=cfg.DB_TIMEOUT_SECONDS)

    def _connect(self):
        return connect(self.db_dsn, timeout_seconds=self.timeout_seconds)

    def find_user_by_login(self, identifier: str) -> Optional[User]:
        try:
            with self._connect() as conn:
                rows = crud.get_users_by_login(conn, identifier, limit=2)
                users = [crud.row_to_user(r) for r in rows]
        except StoreError:
            raise
        except Exception as e:
            raise StorageFailure(f"find_user_by_login failed: {type(e).__name__}: {e}") from e

        if len(users) > 1:
            # Only possible if the unique indexes are missing or were bypassed.
            _debug(f"Ambiguous login lookup matched {len(users)} users; refusing")
            return None
        return users[0] if users else None

    def find_user_by_identity(self, user_id: str, username: str) -> Optional[User]:
        try:
            with self._connect() as conn:
                row = crud.get_user_by_identity(conn, user_id, username)
                return crud.row_to_user(row) if row is not None else None
        except StoreError:
            raise
        except Exception as e:
            raise StorageFailure(f"find_user_by_identity failed: {type(e).__name__}: {e}") from e

    def insert_user(self, user: User) -> None:
        try:
            with self._connect() as conn:
                crud.insert_user(conn, user)
        except StoreError:
            raise
        except Exception as e:
            if is_unique_violation(e):
                raise UniquenessConflict("user_exists") from e
            raise StorageFailure(f"insert_user failed: {type(e).__name__}: {e}") from e
