"""Application push – fixed-size batching of device lists."""
from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

__all__ = ["split_devices"]


def split_devices(items: Sequence[T], max_size: int) -> list[list[T]]:
    """Split *items* into consecutive chunks of at most *max_size* elements.

    The input is left untouched.  An empty input yields a single empty chunk
    so callers can always treat ``chunks[0]`` as the batch to send.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if not items:
        return [[]]
    return [list(items[i : i + max_size]) for i in range(0, len(items), max_size)]
