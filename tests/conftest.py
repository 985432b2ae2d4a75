"""
conftest.py - Shared pytest fixtures for asset transfer tests

Provides:
- Contracts with default and owner-enforcing settings
- Ledgers (empty, seeded, funded for the order workflow)
"""

import pytest
from datetime import datetime, timezone

from assettransfer import AssetTransferContract, MemoryLedger, Settings, wallet_id

from tests.helpers import ADMIN_TOKEN, ALICE, BOB, CAROL, create


@pytest.fixture
def settings():
    return Settings(enforce_asset_owner=False, seed_assets=True)


@pytest.fixture
def strict_settings():
    return Settings(enforce_asset_owner=True, seed_assets=True)


@pytest.fixture
def contract(settings):
    return AssetTransferContract(settings)


@pytest.fixture
def ledger(contract):
    """Fresh ledger with no records."""
    return MemoryLedger("test", contract=contract, initial_time=datetime(2025, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def strict_ledger(strict_settings):
    """Ledger whose contract requires asset owners to authorize mutations."""
    return MemoryLedger("strict", contract=AssetTransferContract(strict_settings))


@pytest.fixture
def seeded_ledger(ledger):
    """Ledger after InitLedger."""
    ledger.submit(ADMIN_TOKEN, "InitLedger")
    return ledger


@pytest.fixture
def market_ledger(ledger):
    """
    Ledger for the order workflow.

    alice sells "painting" (1500); alice holds 2000, bob 5000 and carol 1000.
    """
    create(ledger, wallet_id(ALICE), "money", "2000", ALICE)
    create(ledger, wallet_id(BOB), "money", "5000", BOB)
    create(ledger, wallet_id(CAROL), "money", "1000", CAROL)
    create(ledger, "painting", "art", "1500", ALICE)
    return ledger
