from __future__ import annotations


class StoreError(Exception):
    """Base class for credential store failures."""


class UniquenessConflict(StoreError):
    """The username or email is already taken (case-insensitively).

    This is authoritative: the store's unique indexes decided it atomically.
    """

    def __init__(self, detail: str = "user_exists"):
        super().__init__(detail)
        self.detail = str(detail)


class StorageFailure(StoreError):
    """Any other storage fault: connection errors, timeouts, bad rows.

    Carries internal detail for logs only; it must never reach a client.
    """
