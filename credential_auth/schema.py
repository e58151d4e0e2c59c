"""Database schema for the credential store.

The schema is written for SQLite; the Postgres variant is generated from it by dropping
the SQLite pragmas.

Timestamps are ISO-8601 TEXT (UTC, with 'Z') for portability across engines.

Username and email uniqueness is case-insensitive and lives entirely in the unique
expression indexes below. The application never does check-then-insert; it relies on
the insert failing atomically.
"""

from __future__ import annotations


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Users / credentials
-- password_hash, salt and pbkdf2_iterations are written together, once.
-- The iteration count is kept per row so changing the work factor only affects new accounts.
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY NOT NULL,
    username TEXT NOT NULL,
    email TEXT NOT NULL,
    password_hash TEXT NOT NULL,
    salt TEXT NOT NULL,
    pbkdf2_iterations INTEGER NOT NULL DEFAULT 10000,
    first_name TEXT,
    last_name TEXT,
    job_title TEXT,
    created_at TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS uq_users_username_ci ON users (lower(username));
CREATE UNIQUE INDEX IF NOT EXISTS uq_users_email_ci ON users (lower(email));
"""


def _sqlite_to_postgres(ddl: str) -> str:
    # Remove SQLite pragmas
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    return "\n".join(lines)


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE
