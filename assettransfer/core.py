"""
Core types and pure functions for the asset transfer ledger.

This module provides the foundational data structures and protocols:
1. Protocols: KeyValueLedger for the platform's world-state access
2. Immutable data structures: Asset, Order, Context
3. Exceptions: AssetTransferError and domain-specific error types
4. Key helpers: namespaced storage keys and the wallet naming convention

All functions in this module are pure. Persistent state lives only in the
KeyValueLedger supplied by the hosting platform.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, getcontext, ROUND_HALF_EVEN
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple, runtime_checkable


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Balance arithmetic must be deterministic across every peer that executes
# an invocation, so the context is pinned at import time.
#
_LEDGER_DECIMAL_CONTEXT = getcontext()
_LEDGER_DECIMAL_CONTEXT.prec = 50
_LEDGER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

# Suffix that turns a principal into the ID of its money wallet.
WALLET_SUFFIX = "-wallet"

# Asset type used for wallets.
TYPE_MONEY = "money"

# Record kinds. Each kind has its own key namespace and a docType marker
# inside the stored JSON.
DOC_TYPE_ASSET = "asset"
DOC_TYPE_ORDER = "order"

# Separator between a namespace and the record ID in a storage key.
KEY_SEPARATOR = "~"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class AssetTransferError(Exception):
    """Base exception for all asset transfer errors."""
    code = "ASSET_TRANSFER_ERROR"


class NotFound(AssetTransferError):
    """Raised when a referenced asset, wallet or order is absent."""
    code = "NOT_FOUND"


class AlreadyExists(AssetTransferError):
    """Raised when a create collides with an existing key."""
    code = "ALREADY_EXISTS"


class AlreadyConfirmed(AssetTransferError):
    """Raised when confirming an order that is already settled."""
    code = "ALREADY_CONFIRMED"


class InsufficientFunds(AssetTransferError):
    """Raised when a wallet balance is below the price being paid."""
    code = "INSUFFICIENT_FUNDS"


class Unauthorized(AssetTransferError):
    """Raised when the caller principal does not match the required owner."""
    code = "UNAUTHORIZED"


class MalformedIdentity(Unauthorized):
    """Raised when the caller token does not parse into a principal."""
    code = "MALFORMED_IDENTITY"


class Corrupt(AssetTransferError):
    """Raised when a stored value is present but cannot be decoded."""
    code = "CORRUPT"


class InvalidArgument(AssetTransferError, ValueError):
    """Raised when an operation argument cannot form a valid record."""
    code = "INVALID_ARGUMENT"


class UnknownOperation(AssetTransferError):
    """Raised when dispatching a name that is not in the operation registry."""
    code = "UNKNOWN_OPERATION"


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class KeyValueLedger(Protocol):
    """
    World-state interface supplied by the hosting platform.

    Reads observe committed state. The platform applies all writes issued
    during one invocation together or not at all; nothing in this package
    adds locking or compensation on top of that guarantee.
    """

    def get_state(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None."""
        ...

    def put_state(self, key: str, value: str) -> None:
        """Store value under key."""
        ...

    def del_state(self, key: str) -> None:
        """Remove key."""
        ...

    def get_state_by_range(self, start_key: str, end_key: str) -> Iterator[Tuple[str, str]]:
        """
        Yield (key, value) pairs with start_key <= key < end_key in lexical order.

        An empty start_key or end_key leaves that side of the range unbounded.
        """
        ...


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Context:
    """
    Everything one invocation may touch.

    Attributes:
        stub: The platform's key-value ledger for this invocation.
        caller: Opaque caller-identity token (see identity.resolve).
        tx_id: Platform transaction ID of this invocation.
        timestamp: Platform timestamp of this invocation.
    """
    stub: KeyValueLedger
    caller: str
    tx_id: str
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class Asset:
    """
    A ledger-resident asset.

    Attributes:
        asset_id: Unique asset identifier (also the suffix of its storage key).
        type: Free-form category, e.g. "water" or "money" for wallets.
        price: Decimal price; for wallets, the money balance.
        owner: Principal that owns the asset.

    Instances are never mutated; every change writes a new Asset that fully
    replaces the stored one.
    """
    asset_id: str
    type: str
    price: Decimal
    owner: str

    def __post_init__(self):
        if not self.asset_id:
            raise ValueError("Asset asset_id cannot be empty")
        if not isinstance(self.price, Decimal):
            raise ValueError(f"Asset price must be Decimal, got {type(self.price)}")
        if self.price.is_infinite() or self.price.is_nan():
            raise ValueError(f"Asset price must be finite, got {self.price}")

    @property
    def is_wallet(self) -> bool:
        return self.asset_id.endswith(WALLET_SUFFIX)

    def with_owner(self, owner: str) -> Asset:
        return Asset(self.asset_id, self.type, self.price, owner)

    def with_price(self, price: Decimal) -> Asset:
        return Asset(self.asset_id, self.type, price, self.owner)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetID": self.asset_id,
            "type": self.type,
            "price": str(self.price),
            "owner": self.owner,
        }

    def __repr__(self) -> str:
        return f"Asset({self.asset_id}: {self.type} {self.price} owner={self.owner})"


@dataclass(frozen=True, slots=True)
class Order:
    """
    A purchase of one asset by one principal from another.

    Attributes:
        order_id: Derived order identifier (see orders.derive_order_id).
        purchaser: Principal buying the asset.
        business: Principal selling the asset (its owner when ordered).
        asset_id: ID of the traded asset.
        confirm: False until the business confirms; flips exactly once.
    """
    order_id: str
    purchaser: str
    business: str
    asset_id: str
    confirm: bool = field(default=False)

    def __post_init__(self):
        if not self.order_id:
            raise ValueError("Order order_id cannot be empty")
        if not isinstance(self.confirm, bool):
            raise ValueError(f"Order confirm must be bool, got {type(self.confirm)}")

    def confirmed(self) -> Order:
        return Order(self.order_id, self.purchaser, self.business, self.asset_id, True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderId": self.order_id,
            "purchaser": self.purchaser,
            "business": self.business,
            "assetId": self.asset_id,
            "confirm": self.confirm,
        }


# ============================================================================
# KEY HELPERS
# ============================================================================

def wallet_id(principal: str) -> str:
    """Return the asset ID of the principal's money wallet."""
    return principal + WALLET_SUFFIX


def namespaced_key(doc_type: str, record_id: str) -> str:
    """Return the storage key for a record of the given kind."""
    return f"{doc_type}{KEY_SEPARATOR}{record_id}"


def strip_namespace(doc_type: str, key: str) -> str:
    """Inverse of namespaced_key."""
    prefix = f"{doc_type}{KEY_SEPARATOR}"
    if not key.startswith(prefix):
        raise ValueError(f"Key {key!r} is not in the {doc_type} namespace")
    return key[len(prefix):]


def namespace_range(doc_type: str) -> Tuple[str, str]:
    """
    Return the (start, end) range covering every key of one record kind.

    The end key is the prefix with its last character incremented, so the
    half-open range contains exactly the keys that start with the prefix.
    """
    prefix = f"{doc_type}{KEY_SEPARATOR}"
    end = prefix[:-1] + chr(ord(prefix[-1]) + 1)
    return prefix, end


def parse_price(value: Any) -> Decimal:
    """
    Convert a platform argument into a Decimal price.

    Strings and ints are accepted; floats go through str() so that 1000.0
    becomes Decimal("1000.0") rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        price = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid price {value!r}")
    elif isinstance(value, (int, float, str)):
        try:
            price = Decimal(str(value).strip())
        except ArithmeticError:
            raise ValueError(f"Invalid price {value!r}") from None
    else:
        raise ValueError(f"Invalid price {value!r}")
    if price.is_infinite() or price.is_nan():
        raise ValueError(f"Price must be finite, got {value!r}")
    return price
