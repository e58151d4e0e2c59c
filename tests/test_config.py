"""
Tests for configuration loading.
"""

import pytest

from credential_auth.auth import AuthService, build_auth_service
from credential_auth.config import ConfigError, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "AUTH_JWT_SECRET",
        "AUTH_DATABASE_URL",
        "DATABASE_URL",
        "AUTH_DB_PATH",
        "AUTH_TOKEN_EXPIRE_DAYS",
        "AUTH_PBKDF2_ITERATIONS",
        "AUTH_MAX_CONCURRENT_HASHES",
        "DB_TIMEOUT_SECONDS",
        "API_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


def test_missing_secret_is_fatal():
    with pytest.raises(ConfigError):
        load_config()


def test_defaults(monkeypatch):
    monkeypatch.setenv("AUTH_JWT_SECRET", "s3cret-value-for-tests-0123456789abcdef")
    cfg = load_config()
    assert cfg.AUTH_TOKEN_EXPIRE_DAYS == 30
    assert cfg.AUTH_PBKDF2_ITERATIONS == 10_000
    assert cfg.DB_DSN == "./credential_auth.sqlite"
    assert cfg.API_DEBUG is False


def test_database_url_precedence(monkeypatch):
    monkeypatch.setenv("AUTH_JWT_SECRET", "s3cret-value-for-tests-0123456789abcdef")
    monkeypatch.setenv("AUTH_DB_PATH", "/tmp/fallback.sqlite")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/generic")
    monkeypatch.setenv("AUTH_DATABASE_URL", "postgresql://u:p@db/auth")
    assert load_config().DB_DSN == "postgresql://u:p@db/auth"


def test_malformed_number(monkeypatch):
    monkeypatch.setenv("AUTH_JWT_SECRET", "s3cret-value-for-tests-0123456789abcdef")
    monkeypatch.setenv("AUTH_PBKDF2_ITERATIONS", "lots")
    with pytest.raises(ConfigError):
        load_config()


def test_non_positive_limits_rejected(monkeypatch):
    monkeypatch.setenv("AUTH_JWT_SECRET", "s3cret-value-for-tests-0123456789abcdef")
    monkeypatch.setenv("AUTH_MAX_CONCURRENT_HASHES", "0")
    with pytest.raises(ConfigError):
        load_config()


def test_build_auth_service(cfg):
    svc = build_auth_service(cfg)
    assert isinstance(svc, AuthService)
    assert svc.pbkdf2_iterations == cfg.AUTH_PBKDF2_ITERATIONS
    assert svc.store.db_dsn == cfg.DB_DSN
