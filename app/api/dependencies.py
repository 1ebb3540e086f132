"""FastAPI dependencies for DI (transaction store, rate limiting).

The store and the rate limiter are created by the application factory and kept on ``app.state``; these helpers hand them to endpoints so tests can build an app around any store they like.
"""

from fastapi import Request
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from app.core.db import TransactionStore
from app.core.errors import RateLimitError

RATE_LIMIT_SCOPE = "api"


class RateLimiter:
    """Moving-window request budget shared by every ``/api`` route, keyed by client address."""

    def __init__(self, rate_limit: str) -> None:
        """Parse a limit such as ``300 per 900 seconds``."""
        self.limit = parse(rate_limit)
        self.strategy = MovingWindowRateLimiter(MemoryStorage())

    def hit(self, client_key: str) -> bool:
        """Record one request; False once the client is over budget."""
        return self.strategy.hit(self.limit, RATE_LIMIT_SCOPE, client_key)


def get_store(request: Request) -> TransactionStore:
    """Provide the application's open TransactionStore."""
    return request.app.state.store


def enforce_rate_limit(request: Request) -> None:
    """Refuse the request with a 429 when the client has exceeded its budget."""
    limiter: RateLimiter = request.app.state.rate_limiter
    client_key = request.client.host if request.client else "unknown"
    if not limiter.hit(client_key):
        msg = f"Too many requests: {limiter.limit}"
        raise RateLimitError(msg)
