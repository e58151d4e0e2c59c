"""Bearer token issuance and verification.

Tokens are stateless HS256 JWTs carrying only `username` and `user_id` plus time claims.
Nothing is stored server-side, so a token stays valid for its whole lifetime unless the
signing secret is rotated. Verification never mutates state or extends a lifetime.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import jwt

from credential_auth.models import TokenClaims, TokenStatus, VerificationResult
from credential_auth.util.time import utcnow


_JWT_ALG = "HS256"
DEFAULT_EXPIRES_DAYS = 30


class TokenManager:
    def __init__(
        self,
        secret: str,
        *,
        expires_days: int = DEFAULT_EXPIRES_DAYS,
        leeway_seconds: int = 0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("jwt_secret_blank")
        self._secret = secret
        self._lifetime = timedelta(days=max(1, int(expires_days)))
        self._leeway = max(0, int(leeway_seconds))
        # Only issuance is clock-driven; verification always checks against real time.
        self._clock = clock or utcnow

    def issue(self, user_id: Any, username: str) -> str:
        """Sign a token for a stored user.

        A missing id or username means the caller passed something that isn't a valid
        User, which is a bug rather than a client error, hence ValueError.
        """
        if user_id is None or user_id == "":
            raise ValueError("user_id_blank")
        if not username:
            raise ValueError("username_blank")

        now = self._clock()
        exp = now + self._lifetime
        iat = int(now.timestamp())
        payload: Dict[str, Any] = {
            "username": username,
            "user_id": user_id,
            "iat": iat,
            "nbf": iat,
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=_JWT_ALG)

    def verify(self, token: Optional[str]) -> VerificationResult:
        if not token:
            return VerificationResult(TokenStatus.MISSING)
        if not isinstance(token, str):
            return VerificationResult(TokenStatus.INVALID)

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_JWT_ALG],
                leeway=self._leeway,
                options={"require": ["exp", "iat", "username", "user_id"]},
            )
        except jwt.ExpiredSignatureError:
            return VerificationResult(TokenStatus.EXPIRED)
        except jwt.ImmatureSignatureError:
            return VerificationResult(TokenStatus.NOT_YET_VALID)
        except jwt.InvalidTokenError:
            return VerificationResult(TokenStatus.INVALID)

        username = payload.get("username")
        user_id = payload.get("user_id")
        if not isinstance(username, str) or not username or user_id in (None, ""):
            return VerificationResult(TokenStatus.INVALID)

        return VerificationResult(
            TokenStatus.VALID,
            TokenClaims(
                user_id=user_id,
                username=username,
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            ),
        )
