"""Income, expense and balance over a set of transactions."""

from collections.abc import Iterable, Mapping
from typing import Any

from app.core.models import Totals, TransactionType
from app.core.utils import safe_amount


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def aggregate(items: Iterable[Any]) -> Totals:
    """Sum income and expense amounts and derive the balance.

    Items may be API dicts or ``TransactionRecord`` objects. Anything whose type
    is not ``income`` counts as an expense, and amounts that are not finite
    numbers count as 0 so one malformed record cannot spoil the totals.
    """
    income = 0.0
    expense = 0.0
    for item in items:
        amount = safe_amount(_field(item, "amount"))
        if _field(item, "type") == TransactionType.INCOME:
            income += amount
        else:
            expense += amount
    return Totals(income=income, expense=expense, balance=income - expense)
