"""Shared pytest fixtures: settings on a temporary database, an API test client, and an in-memory store."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.db import TransactionStore
from app.core.settings import Settings
from main import create_app

CLIENT_ORIGIN = "http://localhost:5173"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'finance.db'}",
        client_url=CLIENT_ORIGIN,
        rate_limit_requests=1000,
        api_base_url="http://testserver",
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """A TestClient with the app lifespan (and therefore the store) running."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def store() -> Iterator[TransactionStore]:
    """An open in-memory transaction store."""
    with TransactionStore("sqlite://") as opened:
        yield opened
