from __future__ import annotations

from typing import Any, Dict, List, Optional

from credential_auth.models import User


_USER_COLUMNS = (
    "user_id",
    "username",
    "email",
    "password_hash",
    "salt",
    "pbkdf2_iterations",
    "first_name",
    "last_name",
    "job_title",
    "created_at",
)
_SELECT_USER = f"SELECT {', '.join(_USER_COLUMNS)} FROM users"


def row_to_user(row: Any | Dict[str, Any]) -> User:
    d = dict(row)
    return User(
        user_id=str(d["user_id"]),
        username=str(d["username"]),
        email=str(d["email"]),
        password_hash=str(d["password_hash"]),
        salt=str(d["salt"]),
        pbkdf2_iterations=int(d["pbkdf2_iterations"]),
        created_at=str(d["created_at"]),
        first_name=d.get("first_name"),
        last_name=d.get("last_name"),
        job_title=d.get("job_title"),
    )


def get_users_by_login(conn: Any, identifier: str, *, limit: int = 2) -> List[Any]:
    """Rows whose username OR email equals `identifier`, ignoring case.

    Fetches up to `limit` rows so callers can tell "exactly one" from "ambiguous".
    """
    return conn.execute(
        f"""
        {_SELECT_USER}
        WHERE lower(username) = lower(?) OR lower(email) = lower(?)
        LIMIT ?
        """,
        (identifier, identifier, int(limit)),
    ).fetchall()


def get_user_by_identity(conn: Any, user_id: str, username: str) -> Optional[Any]:
    # Exact match on both: a renamed account no longer resolves old tokens.
    return conn.execute(
        f"{_SELECT_USER} WHERE user_id=? AND username=?",
        (str(user_id), username),
    ).fetchone()


def insert_user(conn: Any, user: User) -> None:
    """Single conditional insert; the unique indexes reject duplicates atomically."""
    placeholders = ", ".join("?" for _ in _USER_COLUMNS)
    conn.execute(
        f"INSERT INTO users ({', '.join(_USER_COLUMNS)}) VALUES ({placeholders})",
        (
            user.user_id,
            user.username,
            user.email,
            user.password_hash,
            user.salt,
            int(user.pbkdf2_iterations),
            user.first_name,
            user.last_name,
            user.job_title,
            user.created_at,
        ),
    )
