from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from credential_auth.auth import AuthService


_bearer = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    svc = getattr(request.app.state, "auth_service", None)
    if svc is None:
        raise HTTPException(status_code=500, detail="server_config_missing")
    return svc


def bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[str]:
    """Token from `Authorization: Bearer <token>`, or None when absent.

    A missing token is not rejected here; the service reports it as code ABS.
    """
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials
