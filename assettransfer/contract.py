"""
contract.py - The operations exposed to the platform

AssetTransferContract holds one method per operation. Each method takes the
invocation Context first, then typed arguments, and either returns a value or
raises an AssetTransferError.

The platform addresses operations by name with string arguments. OPERATIONS
maps each name to its method and argument parsers explicitly; there is no
discovery by decorator or getattr convention, and validate_operations()
checks the table against the class when this module is imported.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import codec, guard
from .assets import AssetStore
from .config import Settings, get_settings
from .core import (
    Asset, Context, Order,
    TYPE_MONEY,
    InvalidArgument, UnknownOperation,
    parse_price,
)
from .orders import OrderStore
from .transfer import TransferEngine, TransferSummary

logger = logging.getLogger(__name__)


CONTRACT_NAME = "basic"
CONTRACT_TITLE = "Asset Transfer"
CONTRACT_VERSION = "0.0.1"


# (asset_id, type, price, owner) written by init_ledger.
SEED_ASSETS: Tuple[Tuple[str, str, Decimal, str], ...] = (
    ("A-wallet", TYPE_MONEY, Decimal("5000.0"), "A"),
    ("B-wallet", TYPE_MONEY, Decimal("5000.0"), "B"),
    ("asset1", "water", Decimal("1000.0"), "A"),
    ("asset3", "medicine", Decimal("6000.0"), "A"),
    ("asset2", "clothes", Decimal("2000.0"), "B"),
    ("asset5", "glass", Decimal("4000.0"), "bank"),
    ("asset6", "desk", Decimal("3000.0"), "port"),
)


class AssetTransferContract:
    """
    Asset CRUD, direct transfers and the buy/confirm order workflow.

    The contract itself is stateless; every method works only on the
    Context it is given.

    Example:
        contract = AssetTransferContract()
        with ledger.transaction(caller=token) as ctx:
            contract.create_asset(ctx, "asset1", "water", Decimal("1000"), "A")
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _authorize_asset_owner(self, ctx: Context, asset: Asset) -> None:
        if self.settings.enforce_asset_owner:
            guard.require_owner(ctx, asset.owner)

    # ========================================================================
    # BOOTSTRAP
    # ========================================================================

    def init_ledger(self, ctx: Context) -> List[Asset]:
        """Create the sample wallets and assets."""
        if not self.settings.seed_assets:
            return []
        store = AssetStore(ctx.stub)
        created = [store.create(*seed) for seed in SEED_ASSETS]
        logger.info("Initialised ledger with %d assets", len(created), extra={"tx_id": ctx.tx_id})
        return created

    # ========================================================================
    # ASSETS
    # ========================================================================

    def create_asset(self, ctx: Context, asset_id: str, type: str, price: Decimal, owner: str) -> Asset:
        return AssetStore(ctx.stub).create(asset_id, type, price, owner)

    def read_asset(self, ctx: Context, asset_id: str) -> Asset:
        return AssetStore(ctx.stub).read(asset_id)

    def update_asset(self, ctx: Context, asset_id: str, type: str, price: Decimal, owner: str) -> Asset:
        """Replace every field of an existing asset."""
        store = AssetStore(ctx.stub)
        if self.settings.enforce_asset_owner:
            self._authorize_asset_owner(ctx, store.read(asset_id))
        return store.update(asset_id, type, price, owner)

    def delete_asset(self, ctx: Context, asset_id: str) -> None:
        store = AssetStore(ctx.stub)
        if self.settings.enforce_asset_owner:
            self._authorize_asset_owner(ctx, store.read(asset_id))
        store.delete(asset_id)

    def asset_exists(self, ctx: Context, asset_id: str) -> bool:
        return AssetStore(ctx.stub).exists(asset_id)

    def transfer_asset(self, ctx: Context, asset_id: str, new_owner: str) -> TransferSummary:
        """
        Transfer an asset to new_owner against payment of its price.

        See TransferEngine.transfer_direct for the balance movements.
        """
        engine = TransferEngine(ctx)
        if self.settings.enforce_asset_owner:
            self._authorize_asset_owner(ctx, engine.assets.read(asset_id))
        return engine.transfer_direct(asset_id, new_owner)

    def get_all_assets(self, ctx: Context) -> List[Asset]:
        return AssetStore(ctx.stub).list_all()

    def get_all_assets_json(self, ctx: Context) -> str:
        """get_all_assets rendered as the JSON array clients receive."""
        return codec.dumps_assets(self.get_all_assets(ctx))

    # ========================================================================
    # ORDERS
    # ========================================================================

    def create_order(self, ctx: Context, purchaser: str, business: str, asset_id: str) -> Order:
        return TransferEngine(ctx).create_order(purchaser, business, asset_id)

    def read_order(self, ctx: Context, order_id: str) -> Order:
        return OrderStore(ctx.stub).read(order_id)

    def confirm_order(self, ctx: Context, order_id: str) -> Order:
        return TransferEngine(ctx).confirm_order(order_id)

    def buy_asset(self, ctx: Context, asset_id: str) -> str:
        return TransferEngine(ctx).buy(asset_id)


# ============================================================================
# OPERATION REGISTRY
# ============================================================================

class Intent(Enum):
    """
    Whether an operation's writes are meant to be committed.

    SUBMIT: Ordered and committed by the platform.
    EVALUATE: Read-only query; any writes are discarded.
    """
    SUBMIT = "submit"
    EVALUATE = "evaluate"


@dataclass(frozen=True, slots=True)
class Operation:
    """
    One externally callable operation.

    Attributes:
        name: Name the platform invokes it by.
        method: AssetTransferContract method implementing it.
        intent: SUBMIT or EVALUATE.
        params: One parser per argument, turning platform strings into typed values.
    """
    name: str
    method: str
    intent: Intent
    params: Tuple[Callable[[Any], Any], ...] = ()


OPERATIONS: Dict[str, Operation] = {op.name: op for op in (
    Operation("InitLedger", "init_ledger", Intent.SUBMIT),
    Operation("CreateAsset", "create_asset", Intent.SUBMIT, (str, str, parse_price, str)),
    Operation("ReadAsset", "read_asset", Intent.EVALUATE, (str,)),
    Operation("UpdateAsset", "update_asset", Intent.SUBMIT, (str, str, parse_price, str)),
    Operation("DeleteAsset", "delete_asset", Intent.SUBMIT, (str,)),
    Operation("AssetExists", "asset_exists", Intent.EVALUATE, (str,)),
    Operation("TransferAsset", "transfer_asset", Intent.SUBMIT, (str, str)),
    Operation("GetAllAssets", "get_all_assets", Intent.EVALUATE),
    Operation("CreateOrder", "create_order", Intent.SUBMIT, (str, str, str)),
    Operation("ReadOrder", "read_order", Intent.EVALUATE, (str,)),
    Operation("ConfirmOrder", "confirm_order", Intent.SUBMIT, (str,)),
    Operation("BuyAsset", "buy_asset", Intent.SUBMIT, (str,)),
)}


def validate_operations(operations: Dict[str, Operation] = OPERATIONS) -> None:
    """
    Check every registry entry against AssetTransferContract.

    Raises:
        ValueError: If a name is mismatched, a method is missing, or the
                    number of parsers differs from the method's arguments.
    """
    for name, op in operations.items():
        if name != op.name:
            raise ValueError(f"Operation registered as {name!r} is named {op.name!r}")
        method = getattr(AssetTransferContract, op.method, None)
        if method is None or not callable(method):
            raise ValueError(f"Operation {name!r} refers to missing method {op.method!r}")
        # Drop self and ctx.
        arguments = list(inspect.signature(method).parameters)[2:]
        if len(arguments) != len(op.params):
            raise ValueError(
                f"Operation {name!r} declares {len(op.params)} parameters, "
                f"{op.method} takes {len(arguments)}"
            )


def dispatch(contract: AssetTransferContract, ctx: Context, name: str, *args: Any) -> Any:
    """
    Invoke a registered operation by name.

    Raises:
        UnknownOperation: If name is not registered.
        InvalidArgument: If the arguments do not match the operation.
    """
    op = OPERATIONS.get(name)
    if op is None:
        raise UnknownOperation(f"Unknown operation {name!r}")
    if len(args) != len(op.params):
        raise InvalidArgument(f"{name} expects {len(op.params)} arguments, got {len(args)}")
    try:
        typed = [parse(arg) for parse, arg in zip(op.params, args)]
    except ValueError as exc:
        raise InvalidArgument(f"{name}: {exc}") from exc
    logger.debug("Dispatching %s", name, extra={"tx_id": ctx.tx_id})
    return getattr(contract, op.method)(ctx, *typed)


validate_operations()
