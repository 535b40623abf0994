"""Millisecond tick counter and sleep helpers."""

from __future__ import annotations

import time

__all__ = ["get_tick", "sys_sleep", "delta_time"]

_TICK_MASK = 0xFFFFFFFF


def get_tick() -> int:
    """Return a monotonic millisecond counter that wraps at 32 bits."""
    return (time.monotonic_ns() // 1_000_000) & _TICK_MASK


def sys_sleep(delay_ms: int) -> None:
    """Sleep for ``delay_ms`` milliseconds."""
    if delay_ms < 0:
        raise ValueError("delay must not be negative")
    time.sleep(delay_ms / 1000)


def delta_time(start: int) -> int:
    """Return the milliseconds elapsed since tick ``start``.

    If the counter has rolled over since ``start``, the time is measured
    from zero instead.
    """
    now = get_tick()
    if now < start:
        start = 0
    return now - start