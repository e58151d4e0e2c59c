"""Register / login / fetch-by-token flows.

Each flow is a short pipeline that exits on the first failure and always returns an
`AuthResult`. Storage and signing faults are caught here and mapped onto the
`AuthStatus` taxonomy; nothing raw leaves this module.

Login deliberately answers "unauthorized" for both an unknown account and a wrong
password, and spends the same PBKDF2 work in both cases, so responses don't reveal
which usernames exist.
"""

from __future__ import annotations

import threading
from typing import Any, Optional

from credential_auth.auth.errors import StorageFailure, UniquenessConflict
from credential_auth.auth.security import (
    PBKDF2_ITERATIONS,
    derive_password_hash,
    generate_identifier,
    generate_salt,
    verify_password,
)
from credential_auth.auth.store import CredentialStore
from credential_auth.auth.tokens import TokenManager
from credential_auth.auth.validators import validate_all, validate_profile
from credential_auth.models import (
    NO_MATCHING_USER_CODE,
    NO_MATCHING_USER_MESSAGE,
    AuthResult,
    AuthStatus,
    User,
)
from credential_auth.util.time import utcnow_iso


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


_STORAGE_FAILURE_PROBLEM = {"message": "storage_failure"}
_INVALID_CREDENTIALS_PROBLEM = {"message": "invalid_credentials"}


class AuthService:
    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenManager,
        *,
        max_concurrent_hashes: int = 4,
        pbkdf2_iterations: int = PBKDF2_ITERATIONS,
    ):
        self.store = store
        self.tokens = tokens
        self.pbkdf2_iterations = int(pbkdf2_iterations)
        # Caps simultaneous PBKDF2 work so a login flood can't starve the process.
        self._hash_slots = threading.BoundedSemaphore(max(1, int(max_concurrent_hashes)))
        # Used when no user matches, so the miss costs as much as a real check.
        self._dummy_salt = generate_salt()
        self._dummy_hash = derive_password_hash("", self._dummy_salt, iterations=self.pbkdf2_iterations)

    def _derive(self, password: str, salt: str) -> str:
        with self._hash_slots:
            return derive_password_hash(password, salt, iterations=self.pbkdf2_iterations)

    def _verify(self, password: str, salt: str, password_hash: str, iterations: int) -> bool:
        with self._hash_slots:
            return verify_password(password, salt, password_hash, iterations=iterations)

    # -----------------
    # Register
    # -----------------

    def register(
        self,
        username: Any,
        email: Any,
        password: Any,
        first_name: Any = None,
        last_name: Any = None,
        job_title: Any = None,
    ) -> AuthResult:
        """Create an account. Success carries no token; the caller logs in separately."""
        validation = validate_all(username, email, password)
        profile = validate_profile(first_name, last_name, job_title)
        if not (validation.success and profile.success):
            problems = {**validation.as_dict(), **profile.as_dict()}
            return AuthResult(AuthStatus.BAD_INPUT, problem={"problems": problems})

        salt = generate_salt()
        user = User(
            user_id=generate_identifier(),
            username=username,
            email=email,
            password_hash=self._derive(password, salt),
            salt=salt,
            pbkdf2_iterations=self.pbkdf2_iterations,
            created_at=utcnow_iso(),
            first_name=first_name,
            last_name=last_name,
            job_title=job_title,
        )

        try:
            self.store.insert_user(user)
        except UniquenessConflict:
            return AuthResult(AuthStatus.CONFLICT, problem={"message": "username_or_email_taken"})
        except StorageFailure as e:
            _debug(f"register storage failure: {e}")
            return AuthResult(AuthStatus.STORAGE_FAILURE, problem=dict(_STORAGE_FAILURE_PROBLEM))

        _debug(f"Registered user_id={user.user_id}")
        return AuthResult(AuthStatus.CREATED)

    # -----------------
    # Login
    # -----------------

    def login(self, username_or_email: Any, password: Any) -> AuthResult:
        if not isinstance(username_or_email, str) or not username_or_email:
            return AuthResult(
                AuthStatus.BAD_INPUT,
                problem={"message": "username_or_email_required"},
            )
        if not isinstance(password, str) or not password:
            return AuthResult(AuthStatus.BAD_INPUT, problem={"message": "password_required"})

        try:
            user = self.store.find_user_by_login(username_or_email)
        except StorageFailure as e:
            _debug(f"login storage failure: {e}")
            return AuthResult(AuthStatus.STORAGE_FAILURE, problem=dict(_STORAGE_FAILURE_PROBLEM))

        if user is None:
            self._verify(password, self._dummy_salt, self._dummy_hash, self.pbkdf2_iterations)
            return AuthResult(AuthStatus.UNAUTHORIZED, problem=dict(_INVALID_CREDENTIALS_PROBLEM))

        # Each row is checked with the work factor it was hashed with.
        if not self._verify(password, user.salt, user.password_hash, user.pbkdf2_iterations):
            return AuthResult(AuthStatus.UNAUTHORIZED, problem=dict(_INVALID_CREDENTIALS_PROBLEM))

        try:
            token = self.tokens.issue(user.user_id, user.username)
        except ValueError as e:
            # A stored row without id/username violates the User invariants.
            _debug(f"login could not issue token for user_id={user.user_id!r}: {e}")
            return AuthResult(AuthStatus.STORAGE_FAILURE, problem=dict(_STORAGE_FAILURE_PROBLEM))

        return AuthResult(AuthStatus.AUTHENTICATED, payload={"token": token})

    # -----------------
    # Fetch by token
    # -----------------

    def fetch_by_token(self, token: Optional[str]) -> AuthResult:
        verification = self.tokens.verify(token)
        if not verification.success or verification.claims is None:
            return AuthResult(
                AuthStatus.UNAUTHORIZED,
                problem={"code": verification.code, "message": verification.message},
            )

        claims = verification.claims
        try:
            user = self.store.find_user_by_identity(str(claims.user_id), claims.username)
        except StorageFailure as e:
            _debug(f"fetch_by_token storage failure: {e}")
            return AuthResult(AuthStatus.STORAGE_FAILURE, problem=dict(_STORAGE_FAILURE_PROBLEM))

        if user is None:
            return AuthResult(
                AuthStatus.UNAUTHORIZED,
                problem={"code": NO_MATCHING_USER_CODE, "message": NO_MATCHING_USER_MESSAGE},
            )
        return AuthResult(AuthStatus.FOUND, payload={"user": user.public()})
