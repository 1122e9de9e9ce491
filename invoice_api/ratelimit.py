import time
from typing import Dict, List, Optional


class RateLimiter:
    """Sliding-window request counter per client key (usually the IP).

    A request is allowed when fewer than ``max_requests`` were recorded for
    the key during the last ``window_seconds``. Keys with no request inside
    the window are dropped.
    """

    def __init__(self, max_requests: int = 100, window_seconds: int = 15 * 60, clock=time.time):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.requests: Dict[str, List[float]] = {}

    def hit(self, key: str) -> Optional[int]:
        """Record a request; return seconds to wait if the limit is exceeded"""
        now = self.clock()
        self._prune(now)
        recent = self.requests.get(key, [])

        if len(recent) >= self.max_requests:
            return max(1, int(self.window_seconds - (now - recent[0])) + 1)

        recent.append(now)
        self.requests[key] = recent
        return None

    def _prune(self, now: float):
        for key in list(self.requests):
            recent = [t for t in self.requests[key] if now - t < self.window_seconds]
            if recent:
                self.requests[key] = recent
            else:
                del self.requests[key]
