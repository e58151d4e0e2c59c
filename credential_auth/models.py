from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class User:
    """A stored identity record.

    `password_hash`, `salt` and `pbkdf2_iterations` are only ever set together, at creation.
    """

    user_id: str
    username: str
    email: str
    password_hash: str
    salt: str
    pbkdf2_iterations: int
    created_at: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    job_title: Optional[str] = None

    def public(self) -> Dict[str, Any]:
        """Projection safe to hand to clients (no hash, no salt)."""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "job_title": self.job_title,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class ValidationResult:
    problems: Tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return not self.problems


@dataclass(frozen=True)
class CompositeValidation:
    """Outcome of validating several fields at once.

    `problems` only carries the fields that failed, in field order.
    """

    problems: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.problems

    def as_dict(self) -> Dict[str, list[str]]:
        return {k: list(v) for k, v in self.problems.items()}


class TokenStatus(str, Enum):
    VALID = "valid"
    MISSING = "missing"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    INVALID = "invalid"


# Short codes surfaced to clients; they describe token state, never account state.
TOKEN_STATUS_CODES: Dict[TokenStatus, str] = {
    TokenStatus.MISSING: "ABS",
    TokenStatus.EXPIRED: "EXP",
    TokenStatus.NOT_YET_VALID: "EAR",
    TokenStatus.INVALID: "INV",
}

TOKEN_STATUS_MESSAGES: Dict[TokenStatus, str] = {
    TokenStatus.MISSING: "Token is missing.",
    TokenStatus.EXPIRED: "Token is expired.",
    TokenStatus.NOT_YET_VALID: "It is too early to use this token.",
    TokenStatus.INVALID: "Token could not be parsed.",
}

NO_MATCHING_USER_CODE = "NMF"
NO_MATCHING_USER_MESSAGE = "No matching user found."


@dataclass(frozen=True)
class TokenClaims:
    user_id: Any
    username: str
    issued_at: int
    expires_at: int

    @property
    def identity(self) -> Dict[str, Any]:
        return {"user_id": self.user_id, "username": self.username}


@dataclass(frozen=True)
class VerificationResult:
    status: TokenStatus
    claims: Optional[TokenClaims] = None

    @property
    def success(self) -> bool:
        return self.status is TokenStatus.VALID

    @property
    def code(self) -> Optional[str]:
        return TOKEN_STATUS_CODES.get(self.status)

    @property
    def message(self) -> Optional[str]:
        return TOKEN_STATUS_MESSAGES.get(self.status)

    @property
    def payload(self) -> Optional[Dict[str, Any]]:
        """The identity claims of a valid token: exactly user_id and username."""
        if self.claims is None:
            return None
        return self.claims.identity


class AuthStatus(str, Enum):
    """Transport-agnostic outcome classification for AuthService flows."""

    CREATED = "created"
    AUTHENTICATED = "authenticated"
    FOUND = "found"
    BAD_INPUT = "bad_input"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    STORAGE_FAILURE = "storage_failure"


@dataclass(frozen=True)
class AuthResult:
    status: AuthStatus
    payload: Dict[str, Any] = field(default_factory=dict)
    problem: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status in (AuthStatus.CREATED, AuthStatus.AUTHENTICATED, AuthStatus.FOUND)

    def body(self) -> Dict[str, Any]:
        """Payload on success, problem description otherwise."""
        return dict(self.payload) if self.ok else dict(self.problem)
