from __future__ import annotations

import secrets

from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq


PBKDF2_DIGEST = "sha512"
PBKDF2_ITERATIONS = 10_000
HASH_SIZE = 64

SALT_SIZE = 64
IDENTIFIER_SIZE = 8


def generate_salt(size: int = SALT_SIZE) -> str:
    """Random password salt: `size` CSPRNG bytes, hex-encoded (2*size chars)."""
    if size < 1:
        raise ValueError("salt_size_invalid")
    return secrets.token_hex(size)


def generate_identifier(size: int = IDENTIFIER_SIZE) -> str:
    """Opaque user identifier, hex-encoded.

    Kept separate from `generate_salt` so the two can be sized independently.
    """
    if size < 1:
        raise ValueError("identifier_size_invalid")
    return secrets.token_hex(size)


def derive_password_hash(password: str, salt: str, *, iterations: int = PBKDF2_ITERATIONS) -> str:
    """PBKDF2-HMAC-SHA512 of `password` with `salt`, hex-encoded.

    The salt's hex text (not its decoded bytes) is the PBKDF2 salt, so hashes stay
    compatible with rows written by earlier versions of the service.
    """
    if not isinstance(password, str) or not isinstance(salt, str) or not salt:
        raise ValueError("password_or_salt_invalid")
    raw = pbkdf2_hmac(
        PBKDF2_DIGEST,
        password.encode("utf-8"),
        salt.encode("utf-8"),
        int(iterations),
        HASH_SIZE,
    )
    return raw.hex()


def hashes_match(candidate: str, expected: str) -> bool:
    """Constant-time comparison of two hex digests."""
    if not candidate or not expected:
        return False
    return consteq(candidate, expected)


def verify_password(
    password: str,
    salt: str,
    password_hash: str,
    *,
    iterations: int = PBKDF2_ITERATIONS,
) -> bool:
    if not password or not salt or not password_hash:
        return False
    return hashes_match(derive_password_hash(password, salt, iterations=iterations), password_hash)
