"""Collision-resistant identifiers for test-created resources."""

from __future__ import annotations

import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits
TOKEN_LENGTH = 6


def current_millis() -> int:
    return time.time_ns() // 1_000_000


def generate_test_id(prefix: str = "test") -> str:
    """
    Return ``{prefix}_{millis}_{token}``.

    Uniqueness is probabilistic only: the millisecond timestamp separates
    runs, the random base-36 token separates calls within one millisecond.
    Nothing is recorded.
    """
    token = "".join(secrets.choice(_ALPHABET) for _ in range(TOKEN_LENGTH))
    return f"{prefix}_{current_millis()}_{token}"


def unique_name(label: str) -> str:
    """Display name for channels, e.g. ``"Test Open Channel 1718000000000"``."""
    return f"{label} {current_millis()}"
