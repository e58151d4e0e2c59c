"""
Tests for the SQL credential store (SQLite).
"""

import sqlite3
import time

import pytest

from credential_auth.auth.errors import StorageFailure, UniquenessConflict
from credential_auth.auth.store import SqlCredentialStore
from credential_auth.db import connect, init_db
from credential_auth.models import User


def _user(user_id="u1", username="alice_w", email="alice@example.com", **kw):
    kw.setdefault("pbkdf2_iterations", 1000)
    return User(
        user_id=user_id,
        username=username,
        email=email,
        password_hash="ab" * 64,
        salt="cd" * 64,
        created_at="2026-01-01T00:00:00Z",
        **kw,
    )


class TestInsertAndFind:
    def test_round_trip(self, store):
        user = _user(first_name="Alice", job_title="Engineer")
        store.insert_user(user)
        assert store.find_user_by_login("alice_w") == user

    @pytest.mark.parametrize("identifier", ["ALICE_W", "Alice_W", "ALICE@EXAMPLE.COM", "alice@example.com"])
    def test_login_lookup_ignores_case(self, store, identifier):
        store.insert_user(_user())
        found = store.find_user_by_login(identifier)
        assert found is not None
        assert found.user_id == "u1"

    def test_login_lookup_miss(self, store):
        store.insert_user(_user())
        assert store.find_user_by_login("nobody_here") is None

    def test_identity_lookup_needs_both_fields(self, store):
        store.insert_user(_user())
        assert store.find_user_by_identity("u1", "alice_w") is not None
        assert store.find_user_by_identity("u1", "someone_else") is None
        assert store.find_user_by_identity("u2", "alice_w") is None

    def test_identity_lookup_is_exact_on_username(self, store):
        store.insert_user(_user())
        assert store.find_user_by_identity("u1", "ALICE_W") is None

    def test_iterations_are_stored_per_row(self, store):
        store.insert_user(_user(pbkdf2_iterations=25_000))
        assert store.find_user_by_login("alice_w").pbkdf2_iterations == 25_000


class TestUniqueness:
    def test_username_conflict_ignores_case(self, store):
        store.insert_user(_user(username="Alice_W"))
        with pytest.raises(UniquenessConflict):
            store.insert_user(_user(user_id="u2", username="alice_w", email="other@example.com"))

    def test_email_conflict_ignores_case(self, store):
        store.insert_user(_user())
        with pytest.raises(UniquenessConflict):
            store.insert_user(_user(user_id="u2", username="bob_smith", email="Alice@Example.com"))

    def test_failed_insert_leaves_no_row(self, store, db_dsn):
        store.insert_user(_user())
        with pytest.raises(UniquenessConflict):
            store.insert_user(_user(user_id="u2", email="other@example.com"))
        with connect(db_dsn) as conn:
            n = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"]
        assert n == 1

    def test_ambiguous_login_lookup_returns_none(self, store, db_dsn):
        # Simulate a store whose unique indexes were lost.
        with connect(db_dsn) as conn:
            conn.execute("DROP INDEX uq_users_username_ci")
            conn.execute("DROP INDEX uq_users_email_ci")
        store.insert_user(_user())
        store.insert_user(_user(user_id="u2", username="ALICE_W", email="x@example.com"))
        assert store.find_user_by_login("alice_w") is None


class TestFailures:
    def test_missing_schema_is_storage_failure(self, tmp_path):
        store = SqlCredentialStore(str(tmp_path / "empty.sqlite"), timeout_seconds=1.0)
        with pytest.raises(StorageFailure):
            store.find_user_by_login("alice_w")
        with pytest.raises(StorageFailure):
            store.find_user_by_identity("u1", "alice_w")
        with pytest.raises(StorageFailure):
            store.insert_user(_user())

    def test_unopenable_database_is_storage_failure(self, tmp_path):
        # A directory can't be opened as a database file.
        store = SqlCredentialStore(str(tmp_path), timeout_seconds=1.0)
        with pytest.raises(StorageFailure):
            store.find_user_by_login("alice_w")

    def test_storage_failure_is_not_a_conflict(self, tmp_path):
        store = SqlCredentialStore(str(tmp_path / "empty.sqlite"), timeout_seconds=1.0)
        with pytest.raises(StorageFailure) as exc_info:
            store.insert_user(_user())
        assert not isinstance(exc_info.value, UniquenessConflict)

    def test_write_lock_timeout_is_storage_failure(self, db_dsn):
        blocker = sqlite3.connect(db_dsn, isolation_level=None)
        blocker.execute("BEGIN EXCLUSIVE")
        try:
            store = SqlCredentialStore(db_dsn, timeout_seconds=0.2)
            start = time.monotonic()
            with pytest.raises(StorageFailure):
                store.insert_user(_user())
            elapsed = time.monotonic() - start
        finally:
            blocker.rollback()
            blocker.close()
        assert elapsed < 5.0


class TestMigration:
    def test_adds_iterations_column_to_existing_table(self, tmp_path):
        dsn = str(tmp_path / "old.sqlite")
        with connect(dsn) as conn:
            conn.execute(
                """
                CREATE TABLE users (
                    user_id TEXT PRIMARY KEY NOT NULL,
                    username TEXT NOT NULL,
                    email TEXT NOT NULL,
                    password_hash TEXT NOT NULL,
                    salt TEXT NOT NULL,
                    first_name TEXT,
                    last_name TEXT,
                    job_title TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "INSERT INTO users (user_id, username, email, password_hash, salt, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                ("u1", "alice_w", "alice@example.com", "ab" * 64, "cd" * 64, "2026-01-01T00:00:00Z"),
            )

        init_db(dsn)
        init_db(dsn)

        user = SqlCredentialStore(dsn).find_user_by_login("alice_w")
        assert user is not None
        assert user.pbkdf2_iterations == 10_000
