"""
assettransfer - Asset Transfer Ledger Contract

State-transition logic for an asset ledger: asset CRUD, paid ownership
transfers between "<principal>-wallet" money assets, and a buy/confirm
order workflow. World state, caller authentication and atomic commit are
supplied by the hosting platform through the KeyValueLedger protocol.

Usage:
    from decimal import Decimal
    from assettransfer import AssetTransferContract, MemoryLedger, make_token

    ledger = MemoryLedger("main")
    admin = make_token("admin", "org1.example.com")

    ledger.submit(admin, "InitLedger")
    summary = ledger.submit(admin, "TransferAsset", "asset1", "B")
    print(summary)

    # Or call the contract directly inside one invocation
    contract = AssetTransferContract()
    with ledger.transaction(caller=admin) as ctx:
        contract.create_asset(ctx, "asset7", "wood", Decimal("250"), "B")
"""

# Core types
from .core import (
    KeyValueLedger,
    Context,
    Asset,
    Order,
    AssetTransferError,
    NotFound,
    AlreadyExists,
    AlreadyConfirmed,
    InsufficientFunds,
    Unauthorized,
    MalformedIdentity,
    Corrupt,
    InvalidArgument,
    UnknownOperation,
    WALLET_SUFFIX,
    TYPE_MONEY,
    wallet_id,
    parse_price,
)

# Identity and authorization
from .identity import resolve, is_principal, make_token
from .guard import require_owner, caller_principal

# Stores
from .assets import AssetStore
from .orders import OrderStore, derive_order_id

# Transfers
from .transfer import TransferEngine, TransferSummary

# Contract
from .contract import (
    AssetTransferContract,
    Operation,
    Intent,
    OPERATIONS,
    SEED_ASSETS,
    dispatch,
    validate_operations,
)

# Platform harness
from .memory import MemoryLedger, Invocation

# Configuration and logging
from .config import Settings, get_settings
from .observability import setup_logging, JSONFormatter

__version__ = "0.1.0"

__all__ = [
    # Core
    "KeyValueLedger", "Context", "Asset", "Order",
    "AssetTransferError", "NotFound", "AlreadyExists", "AlreadyConfirmed",
    "InsufficientFunds", "Unauthorized", "MalformedIdentity", "Corrupt", "InvalidArgument",
    "UnknownOperation",
    "WALLET_SUFFIX", "TYPE_MONEY", "wallet_id", "parse_price",
    # Identity
    "resolve", "is_principal", "make_token", "require_owner", "caller_principal",
    # Stores
    "AssetStore", "OrderStore", "derive_order_id",
    # Transfers
    "TransferEngine", "TransferSummary",
    # Contract
    "AssetTransferContract", "Operation", "Intent", "OPERATIONS", "SEED_ASSETS",
    "dispatch", "validate_operations",
    # Harness
    "MemoryLedger", "Invocation",
    # Config
    "Settings", "get_settings", "setup_logging", "JSONFormatter",
]
