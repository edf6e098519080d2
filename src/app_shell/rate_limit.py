from collections import deque
from datetime import datetime, timedelta
from threading import Lock

from src.adapters.clock import SystemClock
from src.core.ports.time import TimePort
from src.rules.models import RateLimitRules, RateLimitWindow

DEFAULT_LOGIN_ATTEMPTS = 5
DEFAULT_SUBSCRIBE_REQUESTS = 5
SWEEP_EVERY = 256


class RateLimiter:
    """
    Sliding-window limiter held in process memory.

    Each key keeps the timestamps of its accepted requests, oldest first.
    Denied requests are not recorded, so a caller that keeps retrying
    regains access once its oldest accepted hit leaves the window. Keys
    with no hit left in their window are dropped, either when revisited or
    by a sweep every ``SWEEP_EVERY`` calls.
    """

    def __init__(self, rules: RateLimitRules, time_port: TimePort | None = None):
        self.rules = rules
        self._clock = time_port or SystemClock()
        self._hits: dict[str, deque[datetime]] = {}
        self._windows: dict[str, int] = {}
        self._calls = 0
        self._lock = Lock()

    def _prune(self, key: str, now: datetime) -> deque[datetime] | None:
        hits = self._hits.get(key)
        if hits is None:
            return None
        cutoff = now - timedelta(seconds=self._windows[key])
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
            del self._windows[key]
            return None
        return hits

    def _sweep(self, now: datetime) -> None:
        for key in list(self._hits):
            self._prune(key, now)

    def allow_request(self, key: str, window: int, limit: int) -> bool:
        """Record a hit for ``key`` and return True, or return False when over ``limit``."""
        if limit <= 0:
            return False

        now = self._clock.now_utc()
        with self._lock:
            self._calls += 1
            if self._calls % SWEEP_EVERY == 0:
                self._sweep(now)

            hits = self._prune(key, now)
            if hits is None:
                self._hits[key] = deque([now])
                self._windows[key] = window
                return True
            if len(hits) >= limit:
                return False
            hits.append(now)
            return True

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def _check(self, scope: str, caller: str, cfg: RateLimitWindow, fallback: int) -> bool:
        limit = cfg.max_attempts or cfg.max_requests or fallback
        return self.allow_request(f"{scope}:{caller}", cfg.window_seconds, limit)

    def check_login(self, ip: str) -> bool:
        # One counter for admin, family and personal logins
        return self._check("login", ip, self.rules.login, DEFAULT_LOGIN_ATTEMPTS)

    def check_subscribe(self, ip: str) -> bool:
        return self._check("subscribe", ip, self.rules.subscribe, DEFAULT_SUBSCRIBE_REQUESTS)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._windows.clear()
