from fastapi import Request
from typing import Dict
import time

from .config import settings
from .exceptions import RateLimitExceeded

class RateLimiter:
    def __init__(self):
        self.requests: Dict[str, list] = {}

    async def check_rate_limit(self, request: Request, max_requests: int = 60, window: int = 60):
        """Check rate limit for the matched route template, not the concrete path"""
        client_ip = request.client.host if request.client else "unknown"
        route = request.scope.get("route")
        endpoint = getattr(route, "path", None) or str(request.url.path)
        key = f"{client_ip}:{endpoint}"

        now = time.time()
        self._purge(now, window)

        hits = self.requests.setdefault(key, [])
        if len(hits) >= max_requests:
            raise RateLimitExceeded()

        hits.append(now)

    def _purge(self, now: float, window: int):
        # Drop expired hits and forget keys whose window has emptied
        for key in list(self.requests):
            hits = [req_time for req_time in self.requests[key] if now - req_time < window]
            if hits:
                self.requests[key] = hits
            else:
                del self.requests[key]

    def reset(self):
        self.requests.clear()

rate_limiter = RateLimiter()

async def public_rate_limit(request: Request):
    """Dependency for unauthenticated endpoints (certificate lookup, guest registration)."""
    await rate_limiter.check_rate_limit(request, max_requests=settings.public_rate_limit, window=60)
