"""Client-side ledger state.

LedgerState keeps the last successfully fetched list of transactions, drives the
create/edit form, and reconciles the cached list after each confirmed create,
update or delete. The cache is a view of the server's data: it only changes
after the service has answered successfully, and totals are always recomputed
from it. Failures never escape; they are reported through ``error``.
"""

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from app.client.api_client import FinanceClient
from app.client.totals import aggregate
from app.core.errors import FinanceError, ValidationError
from app.core.models import Totals, TransactionType
from app.core.utils import get_logger, today_iso

logger = get_logger("finance-tracker.client")

DEFAULT_TYPE = TransactionType.EXPENSE.value
DEFAULT_CATEGORY = "Food"
DELETE_PROMPT = "Delete this transaction?"
LOAD_ERROR = "Failed to load transactions. Is the server running?"
SAVE_ERROR = "Failed to save transaction."
DELETE_ERROR = "Failed to delete transaction."


def _format_amount(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class TransactionForm:
    """Values of the add/edit form, kept as the user typed them."""

    type: str = DEFAULT_TYPE
    amount: str = ""
    category: str = DEFAULT_CATEGORY
    note: str = ""
    date: str = field(default_factory=today_iso)

    def to_payload(self) -> dict[str, Any]:
        """Validate the form and build the request body, or raise ValidationError."""
        try:
            amount = float(str(self.amount).strip())
        except ValueError:
            amount = math.nan
        if not math.isfinite(amount) or amount <= 0:
            msg = "Amount must be a number greater than 0."
            raise ValidationError(msg)
        if not self.category.strip():
            msg = "Category is required."
            raise ValidationError(msg)
        if not self.date:
            msg = "Date is required."
            raise ValidationError(msg)
        return {
            "type": self.type,
            "amount": amount,
            "category": self.category.strip(),
            "note": self.note.strip(),
            "date": self.date,
        }

    def fill_from(self, record: Mapping[str, Any]) -> None:
        """Copy a stored record into the form for editing."""
        self.type = str(record.get("type", DEFAULT_TYPE))
        self.amount = _format_amount(record.get("amount", ""))
        self.category = str(record.get("category", ""))
        self.note = str(record.get("note") or "")
        self.date = str(record.get("date", ""))[:10]

    def reset(self, *, keep_type: bool = False) -> None:
        """Restore the default values; the type survives a reset after saving."""
        if not keep_type:
            self.type = DEFAULT_TYPE
        self.amount = ""
        self.category = DEFAULT_CATEGORY
        self.note = ""
        self.date = today_iso()


class LedgerState:
    """Local cache of transactions plus the form and status flags around it."""

    def __init__(self, client: FinanceClient, confirm: Callable[[str], bool]) -> None:
        """Bind the state to an API client and a blocking confirmation prompt."""
        self.client = client
        self.confirm = confirm
        self.items: list[dict[str, Any]] = []
        self.form = TransactionForm()
        self.editing_id: str | None = None
        self.error = ""
        self.loading = False
        self.submitting = False
        self.deleting_id: str | None = None

    @property
    def totals(self) -> Totals:
        """Totals over the currently cached transactions."""
        return aggregate(self.items)

    def load(self) -> bool:
        """Replace the cache with the server's list; keep the old cache on failure."""
        self.loading = True
        self.error = ""
        try:
            items = self.client.list()
        except FinanceError as exc:
            logger.warning(f"Loading transactions failed: {exc.message}")
            self.error = LOAD_ERROR
            return False
        finally:
            self.loading = False
        self.items = list(items)
        return True

    def start_edit(self, record: Mapping[str, Any]) -> None:
        """Make ``record`` the edit target, replacing any previous one."""
        self.editing_id = record["id"]
        self.form.fill_from(record)

    def cancel_edit(self) -> None:
        """Leave edit mode and reset the whole form."""
        self.editing_id = None
        self.form.reset()

    def submit(self) -> dict[str, Any] | None:
        """Validate the form, then create or update; returns the saved record or None."""
        if self.submitting:
            return None
        self.error = ""
        try:
            payload = self.form.to_payload()
        except ValidationError as exc:
            self.error = exc.message
            return None

        editing_id = self.editing_id
        self.submitting = True
        try:
            if editing_id:
                saved = self.client.update(editing_id, payload)
            else:
                saved = self.client.create(payload)
        except FinanceError as exc:
            logger.warning(f"Saving transaction failed: {exc.message}")
            self.error = SAVE_ERROR
            return None
        finally:
            self.submitting = False

        if editing_id:
            self.items = [saved if item.get("id") == editing_id else item for item in self.items]
            self.editing_id = None
        else:
            # Not re-sorted; the next load restores the server order.
            self.items = [saved, *self.items]
        self.form.reset(keep_type=True)
        return saved

    def remove(self, transaction_id: str) -> bool:
        """Delete a transaction after confirmation; returns True once it is gone."""
        if self.deleting_id is not None:
            return False
        if not self.confirm(DELETE_PROMPT):
            return False
        self.deleting_id = transaction_id
        self.error = ""
        try:
            self.client.delete(transaction_id)
        except FinanceError as exc:
            logger.warning(f"Deleting transaction {transaction_id} failed: {exc.message}")
            self.error = DELETE_ERROR
            return False
        finally:
            self.deleting_id = None
        self.items = [item for item in self.items if item.get("id") != transaction_id]
        if self.editing_id == transaction_id:
            self.cancel_edit()
        return True
