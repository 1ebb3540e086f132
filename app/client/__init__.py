"""Client package: HTTP client for the Finance Tracker API, local ledger state and totals."""

from .api_client import FinanceClient  # noqa: F401
from .state import LedgerState, TransactionForm  # noqa: F401
from .totals import aggregate  # noqa: F401
