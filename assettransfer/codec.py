"""
codec.py - JSON encoding of Asset and Order records

Records are stored as JSON objects with sorted keys, so the same record
always produces the same bytes on every peer. Each object carries a docType
marker; decoding a value of the wrong kind is treated as corruption.

Prices are written as decimal strings to keep full Decimal precision.
"""

from __future__ import annotations
import json
import logging
from decimal import Decimal
from typing import Any, Dict, List

from .core import (
    Asset, Order,
    DOC_TYPE_ASSET, DOC_TYPE_ORDER,
    Corrupt,
)

logger = logging.getLogger(__name__)


def _corrupt(key: str, message: str) -> Corrupt:
    logger.warning("Corrupt record under %s: %s", key, message, extra={"error_code": Corrupt.code})
    return Corrupt(f"Value under {key} {message}")


def _dumps(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _loads(raw: str, doc_type: str, key: str) -> Dict[str, Any]:
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise _corrupt(key, f"is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise _corrupt(key, "is not a JSON object")
    found = payload.get("docType")
    if found != doc_type:
        raise _corrupt(key, f"has docType {found!r}, expected {doc_type!r}")
    return payload


def _require_str(payload: Dict[str, Any], name: str, key: str) -> str:
    value = payload.get(name)
    if not isinstance(value, str):
        raise _corrupt(key, f"has invalid field {name!r}: {value!r}")
    return value


def encode_asset(asset: Asset) -> str:
    return _dumps({"docType": DOC_TYPE_ASSET, **asset.to_dict()})


def decode_asset(raw: str, key: str = "?") -> Asset:
    """
    Decode a stored asset.

    Raises:
        Corrupt: If the value is not a well-formed asset record.
    """
    payload = _loads(raw, DOC_TYPE_ASSET, key)
    price = payload.get("price")
    # Numbers are tolerated so hand-written JSON still decodes.
    if isinstance(price, bool) or not isinstance(price, (str, int, float)):
        raise _corrupt(key, f"has invalid field 'price': {price!r}")
    try:
        price = Decimal(str(price))
    except ArithmeticError:
        raise _corrupt(key, f"has invalid field 'price': {price!r}") from None
    try:
        return Asset(
            asset_id=_require_str(payload, "assetID", key),
            type=_require_str(payload, "type", key),
            price=price,
            owner=_require_str(payload, "owner", key),
        )
    except ValueError as exc:
        raise _corrupt(key, f"is not a valid asset: {exc}") from exc


def encode_order(order: Order) -> str:
    return _dumps({"docType": DOC_TYPE_ORDER, **order.to_dict()})


def decode_order(raw: str, key: str = "?") -> Order:
    """
    Decode a stored order.

    Raises:
        Corrupt: If the value is not a well-formed order record.
    """
    payload = _loads(raw, DOC_TYPE_ORDER, key)
    confirm = payload.get("confirm")
    if not isinstance(confirm, bool):
        raise _corrupt(key, f"has invalid field 'confirm': {confirm!r}")
    try:
        return Order(
            order_id=_require_str(payload, "orderId", key),
            purchaser=_require_str(payload, "purchaser", key),
            business=_require_str(payload, "business", key),
            asset_id=_require_str(payload, "assetId", key),
            confirm=confirm,
        )
    except ValueError as exc:
        raise _corrupt(key, f"is not a valid order: {exc}") from exc


def dumps_assets(assets: List[Asset]) -> str:
    """Render a list of assets as the JSON array returned to clients."""
    return json.dumps([a.to_dict() for a in assets], sort_keys=True, separators=(",", ":"),
                      ensure_ascii=False)
