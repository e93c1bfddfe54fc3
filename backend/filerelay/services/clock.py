"""Millisecond timestamps used to name temp files and stored artifacts."""

import threading
import time

_lock = threading.Lock()
_last = 0


def timestamp_ms() -> int:
    """
    Current wall-clock time in milliseconds, strictly increasing per process.

    Two calls inside the same millisecond return consecutive values, so names
    built from it stay distinct for back-to-back requests.
    """
    global _last
    now = time.time_ns() // 1_000_000
    with _lock:
        if now <= _last:
            now = _last + 1
        _last = now
    return now
