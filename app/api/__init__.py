"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import RateLimiter, enforce_rate_limit, get_store  # noqa: F401
from .routes import router  # noqa: F401
