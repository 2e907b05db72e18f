"""Clock helpers."""

from datetime import datetime, timezone
from time import perf_counter_ns as _perf_counter_ns
from time import time as _time_sec


def time_s() -> float:
    """Get the current time in seconds since the epoch."""
    return _time_sec()


def time_iso8601() -> str:
    """Get the current UTC time as an ISO 8601 string with milliseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def perf_ns() -> int:
    """Monotonic high-resolution counter in nanoseconds, for intervals only."""
    return _perf_counter_ns()


def ns_to_ms(value_ns: float) -> float:
    """Convert nanoseconds to fractional milliseconds."""
    return value_ns / 1e6
