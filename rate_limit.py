import logging
import time
from typing import Dict, Optional, Tuple

from fastapi import HTTPException, Request


class RateLimiter:
    """
    Fixed-window request counter keyed by client IP.
    Counts live in process memory; windows that have ended are swept out
    at most once per window length.
    """

    def __init__(self, limit: int, window_sec: int = 60):
        self.limit = limit
        self.window_sec = window_sec
        self._counters: Dict[str, Tuple[float, int]] = {}
        self._next_sweep = 0.0

    def sweep(self, now: float) -> None:
        """Drops every counter whose window has ended."""
        expired = [ident for ident, (started, _) in self._counters.items() if now - started >= self.window_sec]
        for ident in expired:
            del self._counters[ident]
        self._next_sweep = now + self.window_sec
        if expired:
            logging.debug(f"Rate limiter dropped {len(expired)} expired counters")

    def hit(self, ident: str, now: Optional[float] = None) -> Tuple[bool, int, float]:
        """Counts one request. Returns (allowed, remaining, reset_epoch)."""
        now = time.time() if now is None else now
        if now >= self._next_sweep:
            self.sweep(now)
        started, count = self._counters.get(ident, (now, 0))
        if now - started >= self.window_sec:
            started, count = now, 0
        count += 1
        self._counters[ident] = (started, count)
        reset_epoch = started + self.window_sec
        return count <= self.limit, max(0, self.limit - count), reset_epoch

    # Runs on the event loop as an async dependency, so counter updates never interleave
    async def __call__(self, request: Request) -> None:
        if self.limit <= 0:
            return
        ip = request.client.host if request.client else "unknown"
        allowed, remaining, reset_epoch = self.hit(ip)
        if not allowed:
            logging.warning(f"Rate limit exceeded for {ip}")
            raise HTTPException(
                status_code=429,
                detail="Too many requests, please try again later",
                headers={
                    "Retry-After": str(max(1, int(reset_epoch - time.time()))),
                    "X-RateLimit-Limit": str(self.limit),
                    "X-RateLimit-Remaining": str(remaining),
                },
            )
