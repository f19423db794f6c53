"""Kernel time – Clock port + implementations."""
from push_dispatch.kernel.time.clock import Clock, FrozenClock, SystemClock, epoch_millis, utc_now

__all__ = ["Clock", "FrozenClock", "SystemClock", "epoch_millis", "utc_now"]
