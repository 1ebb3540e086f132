"""Tests for the API client and the client-side ledger state."""

import pytest
import requests
from fastapi.testclient import TestClient

from app.client.api_client import FinanceClient
from app.client.state import DELETE_ERROR, LOAD_ERROR, SAVE_ERROR, LedgerState
from app.core.errors import NotFoundError, TransportError, ValidationError
from app.core.settings import Settings


class UnreachableSession:
    """Stands in for a requests session whose server is down; records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def request(self, method: str, url: str, **_: object) -> None:
        self.calls.append((method, url))
        raise requests.ConnectionError("connection refused")


class Confirm:
    """Scripted answer for the delete confirmation prompt."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def api(client: TestClient, settings: Settings) -> FinanceClient:
    """A FinanceClient talking to the in-process app."""
    return FinanceClient.from_settings(settings, session=client)


@pytest.fixture
def ledger(api: FinanceClient) -> LedgerState:
    """A LedgerState whose deletes are always confirmed."""
    return LedgerState(api, Confirm(answer=True))


def _fill(state: LedgerState, **values: str) -> None:
    for key, value in values.items():
        setattr(state.form, key, value)


def test_client_error_mapping(api: FinanceClient) -> None:
    """400 and 404 responses map onto the shared error types."""
    with pytest.raises(ValidationError):
        api.create({"type": "expense"})
    with pytest.raises(NotFoundError):
        api.delete("missing")
    health = api.health()
    if health.get("ok") is not True:
        msg = f"Unexpected health payload {health}"
        raise AssertionError(msg)


def test_client_transport_error() -> None:
    """Connection failures raise TransportError."""
    with pytest.raises(TransportError):
        FinanceClient("http://localhost:1", session=UnreachableSession()).list()


def test_submit_creates_and_prepends(ledger: LedgerState) -> None:
    """A valid form creates a record, prepends it and resets the form but keeps the type."""
    _fill(ledger, type="income", amount="100", category=" Salary ", date="2024-01-01")
    first = ledger.submit()
    _fill(ledger, type="expense", amount="40", category="Food", note=" lunch ", date="2023-12-01")
    second = ledger.submit()
    if first is None or second is None or ledger.error:
        msg = f"Submit failed: {ledger.error}"
        raise AssertionError(msg)
    if [item["id"] for item in ledger.items] != [second["id"], first["id"]]:
        msg = "New records should be prepended"
        raise AssertionError(msg)
    if first["category"] != "Salary" or second["note"] != "lunch":
        msg = "Text fields should be trimmed before sending"
        raise AssertionError(msg)
    if ledger.form.amount != "" or ledger.form.category != "Food" or ledger.form.type != "expense":
        msg = f"Form not reset as expected: {ledger.form}"
        raise AssertionError(msg)
    totals = ledger.totals
    if (totals.income, totals.expense, totals.balance) != (100, 40, 60):
        msg = f"Unexpected totals {totals}"
        raise AssertionError(msg)


@pytest.mark.parametrize(
    ("values", "message"),
    [
        ({"amount": "abc"}, "Amount must be a number greater than 0."),
        ({"amount": "0"}, "Amount must be a number greater than 0."),
        ({"amount": "inf"}, "Amount must be a number greater than 0."),
        ({"amount": "5", "category": "  "}, "Category is required."),
        ({"amount": "5", "date": ""}, "Date is required."),
    ],
)
def test_submit_validates_before_any_request(values: dict, message: str) -> None:
    """Invalid forms are rejected locally without touching the network."""
    session = UnreachableSession()
    state = LedgerState(FinanceClient("http://testserver", session=session), Confirm(answer=True))
    _fill(state, **values)
    if state.submit() is not None:
        msg = "Submit should have been rejected"
        raise AssertionError(msg)
    if state.error != message or session.calls or state.items:
        msg = f"Expected {message!r} and no request, got {state.error!r} and {session.calls}"
        raise AssertionError(msg)


def test_load_replaces_cache(ledger: LedgerState, api: FinanceClient) -> None:
    """load() mirrors the server's list, in the server's order."""
    api.create({"type": "income", "amount": 100, "category": "Salary", "date": "2024-01-01"})
    api.create({"type": "expense", "amount": 40, "category": "Food", "date": "2024-01-02"})
    ledger.items = [{"id": "stale", "type": "income", "amount": 1}]
    if not ledger.load() or ledger.loading:
        msg = f"Load failed: {ledger.error}"
        raise AssertionError(msg)
    if [item["category"] for item in ledger.items] != ["Food", "Salary"]:
        msg = f"Unexpected cache {ledger.items}"
        raise AssertionError(msg)


def test_load_failure_keeps_cache() -> None:
    """A failed load sets the banner and leaves the previous cache alone."""
    state = LedgerState(FinanceClient("http://localhost:1", session=UnreachableSession()), Confirm(answer=True))
    cached = [{"id": "a", "type": "income", "amount": 5}]
    state.items = list(cached)
    if state.load():
        msg = "Load should report failure"
        raise AssertionError(msg)
    if state.error != LOAD_ERROR or state.items != cached or state.loading:
        msg = f"Unexpected state after failed load: {state.error!r} {state.items}"
        raise AssertionError(msg)


def test_edit_replaces_record_in_place(ledger: LedgerState) -> None:
    """Submitting in edit mode updates the matching cached record and leaves edit mode."""
    _fill(ledger, amount="10", category="Coffee", date="2024-01-01")
    first = ledger.submit()
    _fill(ledger, amount="20", category="Books", date="2024-01-02")
    second = ledger.submit()
    ledger.start_edit(second)
    ledger.start_edit(first)
    if ledger.editing_id != first["id"] or ledger.form.amount != "10" or ledger.form.date != "2024-01-01":
        msg = f"Edit target not replaced: {ledger.editing_id} {ledger.form}"
        raise AssertionError(msg)
    ledger.form.amount = "12.5"
    saved = ledger.submit()
    if saved is None or ledger.editing_id is not None:
        msg = f"Edit failed: {ledger.error}"
        raise AssertionError(msg)
    if [item["id"] for item in ledger.items] != [second["id"], first["id"]] or ledger.items[1]["amount"] != 12.5:  # noqa: PLR2004
        msg = f"Record not replaced in place: {ledger.items}"
        raise AssertionError(msg)


def test_failed_save_leaves_cache(ledger: LedgerState, api: FinanceClient) -> None:
    """Editing a record deleted elsewhere reports an error and changes nothing locally."""
    _fill(ledger, amount="10", category="Coffee", date="2024-01-01")
    record = ledger.submit()
    api.delete(record["id"])
    ledger.start_edit(record)
    ledger.form.amount = "99"
    if ledger.submit() is not None:
        msg = "Submit should fail"
        raise AssertionError(msg)
    if ledger.error != SAVE_ERROR or ledger.items != [record] or ledger.editing_id != record["id"]:
        msg = f"Unexpected state after failed save: {ledger.error!r} {ledger.items}"
        raise AssertionError(msg)


def test_remove_requires_confirmation(api: FinanceClient) -> None:
    """Declining the prompt keeps the record on the server and in the cache."""
    confirm = Confirm(answer=False)
    state = LedgerState(api, confirm)
    _fill(state, amount="10", category="Coffee", date="2024-01-01")
    record = state.submit()
    if state.remove(record["id"]):
        msg = "Remove should be declined"
        raise AssertionError(msg)
    if confirm.prompts != ["Delete this transaction?"] or state.items != [record] or len(api.list()) != 1:
        msg = "Nothing should have been deleted"
        raise AssertionError(msg)


def test_remove_cancels_edit_of_deleted_record(ledger: LedgerState, api: FinanceClient) -> None:
    """Deleting the record being edited also leaves edit mode and resets the form."""
    _fill(ledger, type="income", amount="10", category="Gift", date="2024-01-01")
    record = ledger.submit()
    ledger.start_edit(record)
    if not ledger.remove(record["id"]):
        msg = f"Remove failed: {ledger.error}"
        raise AssertionError(msg)
    if ledger.items or api.list() or ledger.editing_id is not None or ledger.form.type != "expense":
        msg = f"Unexpected state after remove: {ledger.items} {ledger.editing_id} {ledger.form}"
        raise AssertionError(msg)
    if ledger.deleting_id is not None:
        msg = "deleting_id should be cleared"
        raise AssertionError(msg)


def test_remove_failure_reports_error(ledger: LedgerState) -> None:
    """Deleting an unknown id reports an error and keeps the cache."""
    cached = [{"id": "ghost", "type": "expense", "amount": 3}]
    ledger.items = list(cached)
    if ledger.remove("ghost"):
        msg = "Remove should fail"
        raise AssertionError(msg)
    if ledger.error != DELETE_ERROR or ledger.items != cached:
        msg = f"Unexpected state after failed remove: {ledger.error!r} {ledger.items}"
        raise AssertionError(msg)
