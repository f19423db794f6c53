"""Kernel types – push identifier generation.

The push id is not a provider field: Android clients use it to drop
notifications they have already displayed.
"""
from __future__ import annotations

import secrets
import string
from typing import Protocol

PUSH_ID_ALPHABET = string.ascii_letters + string.digits
PUSH_ID_LENGTH = 10


class IdGenerator(Protocol):
    """Port: produce a fresh deduplication id per push."""

    def __call__(self) -> str: ...


def random_push_id(length: int = PUSH_ID_LENGTH) -> str:
    """Return a random alphanumeric id of *length* characters."""
    return "".join(secrets.choice(PUSH_ID_ALPHABET) for _ in range(length))


__all__ = ["IdGenerator", "PUSH_ID_ALPHABET", "PUSH_ID_LENGTH", "random_push_id"]
