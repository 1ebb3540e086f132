"""Pydantic models for the Finance Tracker.

This module defines the transaction enumeration, the field set validated by the store on every write, the record shape returned by the API, and the small response envelopes used by the health, delete, error and totals payloads.
"""

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

EDITABLE_FIELDS = ("type", "amount", "category", "note", "date")


class TransactionType(str, Enum):
    """The two kinds of ledger entry."""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionFields(BaseModel):
    """Editable transaction fields as enforced by the store.

    The store accepts an amount of zero; the stricter ``> 0`` rule lives in the
    client form and, through the presence check, in the create endpoint.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    type: TransactionType
    amount: float = Field(ge=0, allow_inf_nan=False)
    category: str = Field(min_length=1)
    note: str = ""
    date: dt.date

    @field_validator("note", mode="before")
    @classmethod
    def _note_default(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("amount", mode="before")
    @classmethod
    def _reject_bool_amount(cls, value: object) -> object:
        if isinstance(value, bool):
            msg = "Input should be a valid number"
            raise ValueError(msg)
        return value


class TransactionRecord(BaseModel):
    """Pydantic model representing a stored transaction as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: TransactionType
    amount: float
    category: str
    note: str = ""
    date: dt.date
    created_at: dt.datetime = Field(alias="createdAt")
    updated_at: dt.datetime = Field(alias="updatedAt")


class Totals(BaseModel):
    """Income, expense and balance derived from a set of transactions."""

    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0


class HealthStatus(BaseModel):
    """Health check payload."""

    ok: bool
    message: str


class Acknowledgement(BaseModel):
    """Payload returned after a successful delete."""

    ok: bool = True


class ErrorMessage(BaseModel):
    """Error payload returned for every handled failure."""

    message: str


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten a pydantic validation error into a single readable sentence."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts) or "Invalid transaction"
