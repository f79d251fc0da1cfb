from __future__ import annotations

from contextlib import contextmanager

import redis

from meaningless.errors import GameBusyError

LOCK_TTL_MS = 5_000


@contextmanager
def session_lock(*, r: redis.Redis, player_id: str, ttl_ms: int = LOCK_TTL_MS):
    """Best-effort per-player lock serializing commands on one session.

    A timer-driven selection and a click arriving together are applied one after the
    other; whichever comes second sees the completed round. Single holder only: the
    key is released unconditionally.
    """

    key = f"lock:meaningless:player:{player_id}"
    acquired = r.set(key, "1", nx=True, px=ttl_ms)
    if not acquired:
        raise GameBusyError("Game is busy")
    try:
        yield
    finally:
        r.delete(key)
