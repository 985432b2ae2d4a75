"""
helpers.py - Test helpers shared across the suite

Caller tokens, principals and functions for reading committed state
outside a business invocation.
"""

from decimal import Decimal
from typing import Dict

from assettransfer import AssetStore, MemoryLedger, OrderStore, make_token, wallet_id


ORG = "org1.example.com"

ALICE_TOKEN = make_token("alice", ORG)
BOB_TOKEN = make_token("bob", ORG)
CAROL_TOKEN = make_token("carol", ORG)
ADMIN_TOKEN = make_token("admin", ORG)

ALICE = f"alice@{ORG}"
BOB = f"bob@{ORG}"
CAROL = f"carol@{ORG}"


def read_asset(ledger: MemoryLedger, asset_id: str):
    """Read a committed asset outside any business invocation."""
    with ledger.transaction(ADMIN_TOKEN, commit=False) as ctx:
        return AssetStore(ctx.stub).read(asset_id)


def read_order(ledger: MemoryLedger, order_id: str):
    with ledger.transaction(ADMIN_TOKEN, commit=False) as ctx:
        return OrderStore(ctx.stub).read(order_id)


def balance(ledger: MemoryLedger, principal: str) -> Decimal:
    """Money balance of a principal's wallet."""
    return read_asset(ledger, wallet_id(principal)).price


def balances(ledger: MemoryLedger, *principals: str) -> Dict[str, Decimal]:
    return {p: balance(ledger, p) for p in principals}


def create(ledger: MemoryLedger, asset_id: str, type: str, price, owner: str, caller: str = ADMIN_TOKEN):
    """Create one asset in its own committed invocation."""
    return ledger.submit(caller, "CreateAsset", asset_id, type, str(price), owner)
