"""Kernel value types."""
from push_dispatch.kernel.types.ids import IdGenerator, random_push_id

__all__ = ["IdGenerator", "random_push_id"]
