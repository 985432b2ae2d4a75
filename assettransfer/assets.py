"""
assets.py - CRUD over Asset records

AssetStore reads and writes assets in the asset key namespace of the
invocation's KeyValueLedger. It performs no authorization; callers check
ownership first where it matters.
"""

from __future__ import annotations
import logging
from decimal import Decimal
from typing import List

from . import codec
from .core import (
    Asset, KeyValueLedger,
    AlreadyExists, InvalidArgument, NotFound,
    DOC_TYPE_ASSET,
    namespaced_key, namespace_range,
)

logger = logging.getLogger(__name__)


def _build(asset_id: str, type: str, price: Decimal, owner: str) -> Asset:
    try:
        return Asset(asset_id, type, price, owner)
    except ValueError as exc:
        logger.info("Rejected asset %r: %s", asset_id, exc,
                    extra={"asset_id": asset_id, "error_code": InvalidArgument.code})
        raise InvalidArgument(str(exc)) from exc


class AssetStore:
    """
    Asset records keyed by asset ID.

    Example:
        store = AssetStore(ctx.stub)
        store.create("asset1", "water", Decimal("1000.0"), "A")
        store.read("asset1").owner  # "A"
    """

    def __init__(self, stub: KeyValueLedger):
        self.stub = stub

    @staticmethod
    def key(asset_id: str) -> str:
        return namespaced_key(DOC_TYPE_ASSET, asset_id)

    def exists(self, asset_id: str) -> bool:
        """True iff a non-empty value is stored for asset_id."""
        return bool(self.stub.get_state(self.key(asset_id)))

    def read(self, asset_id: str) -> Asset:
        """
        Load an asset.

        Raises:
            NotFound: If nothing (or an empty value) is stored.
            Corrupt: If the stored value is not an asset record.
        """
        key = self.key(asset_id)
        raw = self.stub.get_state(key)
        if not raw:
            logger.info("Asset %s does not exist", asset_id,
                        extra={"asset_id": asset_id, "error_code": NotFound.code})
            raise NotFound(f"Asset {asset_id} does not exist")
        return codec.decode_asset(raw, key)

    def put(self, asset: Asset) -> Asset:
        """Write asset, replacing whatever is stored under its ID."""
        self.stub.put_state(self.key(asset.asset_id), codec.encode_asset(asset))
        return asset

    def create(self, asset_id: str, type: str, price: Decimal, owner: str) -> Asset:
        """
        Create a new asset.

        Raises:
            AlreadyExists: If asset_id is already stored.
            InvalidArgument: If the fields do not form a valid asset.
        """
        if self.exists(asset_id):
            logger.info("Asset %s already exists", asset_id,
                        extra={"asset_id": asset_id, "error_code": AlreadyExists.code})
            raise AlreadyExists(f"Asset {asset_id} already exists")
        return self.put(_build(asset_id, type, price, owner))

    def update(self, asset_id: str, type: str, price: Decimal, owner: str) -> Asset:
        """
        Overwrite an existing asset with the given fields.

        Raises:
            NotFound: If asset_id is not stored.
            InvalidArgument: If the fields do not form a valid asset.
        """
        if not self.exists(asset_id):
            logger.info("Asset %s does not exist", asset_id,
                        extra={"asset_id": asset_id, "error_code": NotFound.code})
            raise NotFound(f"Asset {asset_id} does not exist")
        return self.put(_build(asset_id, type, price, owner))

    def delete(self, asset_id: str) -> None:
        """
        Remove an asset.

        Raises:
            NotFound: If asset_id is not stored.
        """
        if not self.exists(asset_id):
            logger.info("Asset %s does not exist", asset_id,
                        extra={"asset_id": asset_id, "error_code": NotFound.code})
            raise NotFound(f"Asset {asset_id} does not exist")
        self.stub.del_state(self.key(asset_id))

    def list_all(self) -> List[Asset]:
        """
        Return every asset in lexical asset-ID order.

        The scan covers the asset namespace only, so order records sharing
        the ledger are never read here. The whole range is consumed eagerly.
        """
        start, end = namespace_range(DOC_TYPE_ASSET)
        return [codec.decode_asset(raw, key)
                for key, raw in self.stub.get_state_by_range(start, end) if raw]
