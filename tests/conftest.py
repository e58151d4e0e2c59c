import pytest

from credential_auth.auth import AuthService, SqlCredentialStore, TokenManager
from credential_auth.config import Config
from credential_auth.db import init_db


TEST_SECRET = "test-signing-secret-0123456789-abcdefghijklmnopqrstuvwxyz"

# Far below production cost; hashing behaviour is covered with real parameters in
# test_security.py.
FAST_ITERATIONS = 1000


@pytest.fixture
def db_dsn(tmp_path):
    dsn = str(tmp_path / "auth.sqlite")
    init_db(dsn)
    return dsn


@pytest.fixture
def store(db_dsn):
    return SqlCredentialStore(db_dsn, timeout_seconds=2.0)


@pytest.fixture
def tokens():
    return TokenManager(TEST_SECRET)


@pytest.fixture
def service(store, tokens):
    return AuthService(store, tokens, pbkdf2_iterations=FAST_ITERATIONS)


@pytest.fixture
def cfg(tmp_path):
    return Config(
        AUTH_JWT_SECRET=TEST_SECRET,
        DB_DSN=str(tmp_path / "api.sqlite"),
        DB_TIMEOUT_SECONDS=2.0,
        AUTH_PBKDF2_ITERATIONS=FAST_ITERATIONS,
    )


@pytest.fixture
def secret():
    return TEST_SECRET
