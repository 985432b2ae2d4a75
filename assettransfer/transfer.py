"""
transfer.py - Balance movements between wallets

TransferEngine implements the two ways value changes hands:

    Direct transfer:   asset -> new owner, price: new owner's wallet -> old owner's wallet
    Order workflow:    buy (purchaser pays, order created)
                       confirm (business is paid, asset changes owner)

Every operation issues several independent writes to the invocation's
KeyValueLedger. They are NOT atomic with respect to each other inside this
module: a fault between two writes would leave wallets and assets out of
step. Correctness relies entirely on the platform applying all writes of an
invocation together or not at all. No locking, compensation or two-phase
protocol is performed here.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import Optional

from . import guard
from .assets import AssetStore
from .core import (
    Asset, Context, Order,
    AlreadyConfirmed, AlreadyExists, InsufficientFunds, InvalidArgument,
    wallet_id,
)
from .orders import OrderStore, derive_order_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransferSummary:
    """
    Outcome of a direct transfer.

    Attributes:
        asset_id, asset_type, price: The transferred asset.
        previous_owner: Owner before the transfer.
        new_owner: Owner after the transfer.
        previous_owner_balance: Previous owner's wallet balance after the credit.
        new_owner_balance: New owner's wallet balance after the debit.
    """
    asset_id: str
    asset_type: str
    price: Decimal
    previous_owner: str
    new_owner: str
    previous_owner_balance: Decimal
    new_owner_balance: Decimal

    def __str__(self) -> str:
        return "\n".join([
            f"Asset: [assetId: {self.asset_id}, type: {self.asset_type}, price: {self.price}]",
            f"Transferred from {self.previous_owner} to {self.new_owner}",
            f"{self.previous_owner} balance: {self.previous_owner_balance}",
            f"{self.new_owner} balance: {self.new_owner_balance}",
        ])


def _require_funds(wallet: Asset, asset: Asset, principal: str) -> None:
    if wallet.price < asset.price:
        logger.info(
            "%s has insufficient funds: balance %s, %s costs %s",
            principal, wallet.price, asset.asset_id, asset.price,
            extra={"asset_id": asset.asset_id, "principal": principal,
                   "error_code": InsufficientFunds.code},
        )
        raise InsufficientFunds(
            f"{principal} has insufficient funds: balance {wallet.price}, "
            f"buying {asset.type} requires {asset.price}"
        )


class TransferEngine:
    """
    Multi-record balance movements for one invocation.

    Example:
        engine = TransferEngine(ctx)
        summary = engine.transfer_direct("asset1", "B")
        print(summary)
    """

    def __init__(self, ctx: Context):
        self.ctx = ctx
        self.assets = AssetStore(ctx.stub)
        self.orders = OrderStore(ctx.stub)

    # ========================================================================
    # DIRECT TRANSFER
    # ========================================================================

    def transfer_direct(self, asset_id: str, new_owner: str) -> TransferSummary:
        """
        Hand an asset to new_owner, who pays its price to the current owner.

        Writes, in order: the re-owned asset, the debited destination wallet
        (its owner field set to new_owner), the credited origin wallet.

        Raises:
            NotFound: If the asset or either wallet is missing.
            InsufficientFunds: If new_owner's wallet holds less than the price.
            InvalidArgument: If the asset is one of the two paying wallets.
        """
        asset = self.assets.read(asset_id)
        previous_owner = asset.owner

        dest_wallet = self.assets.read(wallet_id(new_owner))
        origin_wallet = self.assets.read(wallet_id(previous_owner))

        if asset.asset_id in (dest_wallet.asset_id, origin_wallet.asset_id):
            # The wallet writes would overwrite the re-owned asset.
            logger.info("Cannot transfer wallet %s as payment for itself", asset.asset_id,
                        extra={"asset_id": asset.asset_id, "error_code": InvalidArgument.code})
            raise InvalidArgument(f"Asset {asset.asset_id} is a wallet paying for its own transfer")

        _require_funds(dest_wallet, asset, new_owner)

        self.assets.put(asset.with_owner(new_owner))

        if dest_wallet.asset_id == origin_wallet.asset_id:
            # Paying yourself: both wallet writes would target one key.
            new_owner_balance = previous_owner_balance = dest_wallet.price
        else:
            debited = Asset(dest_wallet.asset_id, dest_wallet.type,
                            dest_wallet.price - asset.price, new_owner)
            credited = origin_wallet.with_price(origin_wallet.price + asset.price)
            self.assets.put(debited)
            self.assets.put(credited)
            new_owner_balance = debited.price
            previous_owner_balance = credited.price

        summary = TransferSummary(
            asset_id=asset.asset_id,
            asset_type=asset.type,
            price=asset.price,
            previous_owner=previous_owner,
            new_owner=new_owner,
            previous_owner_balance=previous_owner_balance,
            new_owner_balance=new_owner_balance,
        )
        logger.info("Transferred %s from %s to %s", asset.asset_id, previous_owner, new_owner,
                    extra={"asset_id": asset.asset_id, "tx_id": self.ctx.tx_id})
        logger.debug("%s", summary)
        return summary

    # ========================================================================
    # ORDER WORKFLOW
    # ========================================================================

    def create_order(
        self,
        purchaser: str,
        business: str,
        asset_id: str,
        order_id: Optional[str] = None,
    ) -> Order:
        """
        Create an unconfirmed order without moving any funds.

        The order ID defaults to derive_order_id(asset_id, purchaser, tx_id).

        Raises:
            AlreadyExists: If the order ID is already stored.
        """
        if order_id is None:
            order_id = derive_order_id(asset_id, purchaser, self.ctx.tx_id)
        order = self.orders.create(Order(order_id, purchaser, business, asset_id, False))
        logger.info("Created order %s: %s buys %s from %s", order_id, purchaser, asset_id, business,
                    extra={"order_id": order_id, "asset_id": asset_id, "tx_id": self.ctx.tx_id})
        return order

    def buy(self, asset_id: str) -> str:
        """
        Pay for an asset now and open an order for its owner to confirm.

        The purchaser is the invocation's caller. Funds leave the purchaser's
        wallet immediately, and that wallet record is written with the
        asset's current owner in its owner field. The asset itself only moves on confirm_order.

        Returns:
            The new order's ID.

        Raises:
            MalformedIdentity: If the caller token does not parse.
            NotFound: If the asset or the purchaser's wallet is missing.
            InsufficientFunds: If the purchaser's wallet holds less than the price.
            AlreadyExists: If the derived order ID is already stored.
        """
        purchaser = guard.caller_principal(self.ctx)
        asset = self.assets.read(asset_id)
        wallet = self.assets.read(wallet_id(purchaser))

        _require_funds(wallet, asset, purchaser)

        order_id = derive_order_id(asset_id, purchaser, self.ctx.tx_id)
        if self.orders.exists(order_id):
            logger.info("Order %s already exists", order_id,
                        extra={"order_id": order_id, "error_code": AlreadyExists.code})
            raise AlreadyExists(f"Order {order_id} already exists")

        # The debited wallet is written with the business as its owner.
        self.assets.put(Asset(wallet.asset_id, wallet.type, wallet.price - asset.price, asset.owner))
        self.create_order(purchaser, asset.owner, asset_id, order_id)
        return order_id

    def confirm_order(self, order_id: str) -> Order:
        """
        Settle an order: the business is paid and the purchaser receives the asset.

        Only the order's business may confirm it, and only once.

        Raises:
            NotFound: If the order, its asset or the business wallet is missing.
            AlreadyConfirmed: If the order was already confirmed.
            Unauthorized: If the caller is not the order's business.
        """
        order = self.orders.read(order_id)
        if order.confirm:
            logger.info("Order %s is already confirmed", order_id,
                        extra={"order_id": order_id, "error_code": AlreadyConfirmed.code})
            raise AlreadyConfirmed(f"Order {order_id} is already confirmed")

        guard.require_owner(self.ctx, order.business)

        asset = self.assets.read(order.asset_id)
        wallet = self.assets.read(wallet_id(order.business))

        self.assets.put(wallet.with_price(wallet.price + asset.price))
        self.assets.put(asset.with_owner(order.purchaser))
        confirmed = self.orders.put(order.confirmed())

        logger.info("Confirmed order %s: %s now owns %s", order_id, order.purchaser, asset.asset_id,
                    extra={"order_id": order_id, "asset_id": asset.asset_id,
                           "tx_id": self.ctx.tx_id})
        return confirmed
