"""
orders.py - CRUD over Order records and order ID derivation

Orders live in their own key namespace. An order ID is a content hash of the
traded asset, the purchaser and the platform transaction ID, so replaying the
same invocation derives the same ID while two invocations never collide in
practice.
"""

from __future__ import annotations
import hashlib
import logging
from typing import List

from . import codec
from .core import (
    Order, KeyValueLedger,
    AlreadyExists, NotFound,
    DOC_TYPE_ORDER,
    namespaced_key, namespace_range,
)

logger = logging.getLogger(__name__)

# Hex digits kept from the SHA-256 digest.
ORDER_ID_LENGTH = 16


def derive_order_id(asset_id: str, purchaser: str, tx_id: str) -> str:
    """
    Compute the order ID for a purchase.

    The fields are length-prefixed before hashing so that ("ab", "c") and
    ("a", "bc") cannot produce the same content.
    """
    content = "|".join(f"{len(part)}:{part}" for part in (asset_id, purchaser, tx_id))
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:ORDER_ID_LENGTH]


class OrderStore:
    """Order records keyed by order ID."""

    def __init__(self, stub: KeyValueLedger):
        self.stub = stub

    @staticmethod
    def key(order_id: str) -> str:
        return namespaced_key(DOC_TYPE_ORDER, order_id)

    def exists(self, order_id: str) -> bool:
        return bool(self.stub.get_state(self.key(order_id)))

    def read(self, order_id: str) -> Order:
        """
        Load an order.

        Raises:
            NotFound: If nothing is stored under order_id.
            Corrupt: If the stored value is not an order record.
        """
        key = self.key(order_id)
        raw = self.stub.get_state(key)
        if not raw:
            logger.info("Order %s does not exist", order_id,
                        extra={"order_id": order_id, "error_code": NotFound.code})
            raise NotFound(f"Order {order_id} does not exist")
        return codec.decode_order(raw, key)

    def put(self, order: Order) -> Order:
        self.stub.put_state(self.key(order.order_id), codec.encode_order(order))
        return order

    def create(self, order: Order) -> Order:
        """
        Store a new order.

        Raises:
            AlreadyExists: If order.order_id is already stored.
        """
        if self.exists(order.order_id):
            logger.info("Order %s already exists", order.order_id,
                        extra={"order_id": order.order_id, "error_code": AlreadyExists.code})
            raise AlreadyExists(f"Order {order.order_id} already exists")
        return self.put(order)

    def list_all(self) -> List[Order]:
        start, end = namespace_range(DOC_TYPE_ORDER)
        return [codec.decode_order(raw, key)
                for key, raw in self.stub.get_state_by_range(start, end) if raw]
