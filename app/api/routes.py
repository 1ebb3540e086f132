"""FastAPI endpoints for the Finance Tracker API.

This module defines the health check and the transaction CRUD routes. Handlers are synchronous and stateless: they check the request, call the injected TransactionStore and return its records. Store errors (validation, not found) are turned into JSON responses by the exception handlers registered in ``app.main``.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from app.api.dependencies import enforce_rate_limit, get_store
from app.core.db import TransactionStore
from app.core.models import Acknowledgement, ErrorMessage, HealthStatus, TransactionRecord
from app.core.utils import get_logger

router = APIRouter(prefix="/api", dependencies=[Depends(enforce_rate_limit)])
logger = get_logger("finance-tracker.api")

REQUIRED_FIELDS = ("type", "amount", "category", "date")
HEALTH_MESSAGE = "Finance Tracker API is running"

NOT_FOUND_RESPONSE = {
    "model": ErrorMessage,
    "description": "Transaction not found.",
    "content": {"application/json": {"example": {"message": "Not found"}}},
}


def missing_required_fields(payload: dict[str, Any]) -> list[str]:
    """Return the required fields that are absent or falsy (so an amount of 0 counts as missing)."""
    return [name for name in REQUIRED_FIELDS if not payload.get(name)]


@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health check",
    description="Simple health check endpoint.",
    responses={
        200: {
            "description": "API is healthy.",
            "content": {"application/json": {"example": {"ok": True, "message": HEALTH_MESSAGE}}},
        }
    },
)
def health() -> HealthStatus:
    """Health check endpoint."""
    return HealthStatus(ok=True, message=HEALTH_MESSAGE)


@router.get(
    "/transactions",
    response_model=list[TransactionRecord],
    summary="List transactions",
    description="Return every transaction, newest date first. Records sharing a date are returned newest-created first.",
)
def list_transactions(store: TransactionStore = Depends(get_store)) -> list[TransactionRecord]:
    """List all transactions."""
    return store.list()


@router.post(
    "/transactions",
    status_code=201,
    response_model=TransactionRecord,
    summary="Create a transaction",
    description=(
        "Create an income or expense entry.\n\n"
        "**Request body:** `{type, amount, category, note?, date}`\n\n"
        "**Response:**\n"
        "- 201 Created: the stored record with its assigned `id` and timestamps.\n"
        "- 400 Bad Request: a required field is missing (an `amount` of 0 counts as missing) "
        "or a field fails validation."
    ),
    responses={
        400: {
            "model": ErrorMessage,
            "description": "Missing or invalid fields.",
            "content": {"application/json": {"example": {"message": "Missing required fields"}}},
        }
    },
)
def create_transaction(
    payload: dict[str, Any] | None = Body(None),
    store: TransactionStore = Depends(get_store),
) -> TransactionRecord | JSONResponse:
    """Create a transaction after checking the required fields are present."""
    payload = payload or {}
    missing = missing_required_fields(payload)
    if missing:
        logger.warning(f"Rejected create, missing fields: {', '.join(missing)}")
        return JSONResponse(status_code=400, content={"message": "Missing required fields"})
    fields = {name: payload[name] for name in REQUIRED_FIELDS}
    fields["note"] = payload.get("note") or ""
    return store.create(fields)


@router.patch(
    "/transactions/{transaction_id}",
    response_model=TransactionRecord,
    summary="Update a transaction",
    description=(
        "Merge the supplied fields into an existing transaction. The merged record is validated again; "
        "`id` and `createdAt` cannot be changed.\n\n"
        "**Response:**\n"
        "- 200 OK: the updated record.\n"
        "- 400 Bad Request: the merged record is invalid.\n"
        "- 404 Not Found: no transaction has this id."
    ),
    responses={
        400: {"model": ErrorMessage, "description": "Validation failed."},
        404: NOT_FOUND_RESPONSE,
    },
)
def update_transaction(
    transaction_id: str,
    payload: dict[str, Any] | None = Body(None),
    store: TransactionStore = Depends(get_store),
) -> TransactionRecord:
    """Apply a partial update to a transaction."""
    return store.update(transaction_id, payload or {})


@router.delete(
    "/transactions/{transaction_id}",
    response_model=Acknowledgement,
    summary="Delete a transaction",
    description="Permanently remove a transaction.",
    responses={404: NOT_FOUND_RESPONSE},
)
def delete_transaction(transaction_id: str, store: TransactionStore = Depends(get_store)) -> Acknowledgement:
    """Delete a transaction."""
    store.delete(transaction_id)
    return Acknowledgement(ok=True)
