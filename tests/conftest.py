"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from pool_ledger import InMemoryAssetLedger, PoolLedger
from pool_ledger.api.endpoints import get_assets, get_ledger
from pool_ledger.api.main import app
from tests.helpers import make_ledger


@pytest.fixture
def ledger_and_assets() -> tuple[PoolLedger, InMemoryAssetLedger]:
    """A fresh ledger with a frozen clock over fresh in-memory custody."""
    return make_ledger()


@pytest.fixture
def ledger(ledger_and_assets: tuple[PoolLedger, InMemoryAssetLedger]) -> PoolLedger:
    return ledger_and_assets[0]


@pytest.fixture
def assets(ledger_and_assets: tuple[PoolLedger, InMemoryAssetLedger]) -> InMemoryAssetLedger:
    return ledger_and_assets[1]


@pytest.fixture
def api_ledger() -> tuple[PoolLedger, InMemoryAssetLedger]:
    """Ledger used by the API client fixture, with the credit endpoint enabled."""
    return make_ledger(allow_credit=True)


@pytest.fixture
def client(api_ledger: tuple[PoolLedger, InMemoryAssetLedger]) -> Iterator[TestClient]:
    """Create a test client wired to a fresh ledger."""
    ledger, assets = api_ledger
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_assets] = lambda: assets
    yield TestClient(app)
    app.dependency_overrides.clear()
