from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from credential_auth import __version__
from credential_auth.api.deps import bearer_token, get_auth_service
from credential_auth.auth import AuthService, build_auth_service
from credential_auth.auth.rules import describe_rules
from credential_auth.config import Config, load_config
from credential_auth.db import init_db
from credential_auth.models import AuthResult, AuthStatus


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


# Transport mapping for the transport-agnostic service outcomes.
HTTP_STATUS: Dict[AuthStatus, int] = {
    AuthStatus.CREATED: 201,
    AuthStatus.AUTHENTICATED: 200,
    AuthStatus.FOUND: 200,
    AuthStatus.BAD_INPUT: 400,
    AuthStatus.UNAUTHORIZED: 401,
    AuthStatus.CONFLICT: 409,
    AuthStatus.STORAGE_FAILURE: 500,
}


def _respond(result: AuthResult) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if result.status is AuthStatus.UNAUTHORIZED else None
    return JSONResponse(
        status_code=HTTP_STATUS[result.status],
        content=result.body(),
        headers=headers,
    )


# Field types stay `Any`: type problems, profile fields included, are reported by the
# validators together with every other rule rather than as a framework 422.
class RegisterRequest(BaseModel):
    username: Any = None
    email: Any = None
    password: Any = None
    f_name: Any = None
    l_name: Any = None
    job_title: Any = None


class LoginRequest(BaseModel):
    """`username` may be either the username or the email address."""

    username: Any = None
    password: Any = None


def create_app(cfg: Optional[Config] = None, *, auth_service: Optional[AuthService] = None) -> FastAPI:
    """Build the HTTP app.

    Config is loaded once here (process start) unless passed in. The auth service can be
    injected for tests; otherwise it is wired from the config.
    """
    cfg = cfg or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Ensure schema exists.
        init_db(cfg.DB_DSN, timeout_seconds=cfg.DB_TIMEOUT_SECONDS)
        _debug("Credential store ready")
        yield

    app = FastAPI(title="Credential Auth", version=__version__, debug=cfg.API_DEBUG, lifespan=lifespan)

    cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.cfg = cfg
    app.state.auth_service = auth_service or build_auth_service(cfg)

    # -----------------------------
    # Health / rules
    # -----------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    @app.get("/rules")
    def rules() -> Dict[str, Any]:
        return describe_rules()

    # -----------------------------
    # Auth
    # -----------------------------
    # Handlers are plain `def` so FastAPI runs the PBKDF2 work in its threadpool,
    # off the event loop.

    @app.post("/")
    def register(payload: RegisterRequest, svc: AuthService = Depends(get_auth_service)) -> JSONResponse:
        result = svc.register(
            payload.username,
            payload.email,
            payload.password,
            first_name=payload.f_name,
            last_name=payload.l_name,
            job_title=payload.job_title,
        )
        return _respond(result)

    @app.post("/auth")
    def login(payload: LoginRequest, svc: AuthService = Depends(get_auth_service)) -> JSONResponse:
        return _respond(svc.login(payload.username, payload.password))

    @app.get("/auth")
    def fetch_current_user(
        token: Optional[str] = Depends(bearer_token),
        svc: AuthService = Depends(get_auth_service),
    ) -> JSONResponse:
        return _respond(svc.fetch_by_token(token))

    return app
