"""Core package: provides models, the transaction store, settings, errors and shared utilities."""

from .db import TransactionStore  # noqa: F401
from .errors import FinanceError, NotFoundError, RateLimitError, TransportError, ValidationError  # noqa: F401
from .models import TransactionRecord, TransactionType, Totals  # noqa: F401
from .settings import Settings  # noqa: F401
