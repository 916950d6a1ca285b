"""
Rate limiting for POST /auth/login. In-memory sliding window per key (client IP)
to slow down password guessing.
"""
import math
import threading
import time

from shop_common.errors import RateLimited

_store: dict[str, list[float]] = {}
_lock = threading.Lock()
_WINDOW_SECONDS = 60
_last_sweep = 0.0
_clock = time.monotonic


def check_and_consume(
    key: str,
    limit: int,
    window_seconds: int = _WINDOW_SECONDS,
) -> tuple[bool, int | None]:
    """
    Check if the key is under the limit for the sliding window; if so, record this request.
    Returns (allowed, retry_after_seconds). When not allowed, retry_after_seconds is the
    suggested Retry-After value (>= 1).
    """
    if limit <= 0:
        return True, None
    global _last_sweep
    now = _clock()
    with _lock:
        cutoff = now - window_seconds
        if now - _last_sweep >= window_seconds:
            # Forget clients with nothing inside the window
            for stale in [k for k, ts in _store.items() if not ts or ts[-1] <= cutoff]:
                del _store[stale]
            _last_sweep = now
        timestamps = [t for t in _store.get(key, ()) if t > cutoff]
        _store[key] = timestamps
        if len(timestamps) >= limit:
            oldest = min(timestamps)
            retry_after = max(1, math.ceil(window_seconds - (now - oldest)))
            return False, retry_after
        timestamps.append(now)
        return True, None


def enforce(key: str, limit: int) -> None:
    """Raise RateLimited when key is over limit."""
    allowed, retry_after = check_and_consume(key, limit)
    if not allowed:
        raise RateLimited(retry_after)


def reset() -> None:
    global _last_sweep
    with _lock:
        _store.clear()
        _last_sweep = 0.0
