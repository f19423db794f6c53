"""Resilience – bounded retries for provider calls."""
from push_dispatch.resilience.retry import DEFAULT_TRANSPORT_ATTEMPTS, TransportRetryPolicy, is_transient

__all__ = ["DEFAULT_TRANSPORT_ATTEMPTS", "TransportRetryPolicy", "is_transient"]
