"""
observability.py - Logging setup

Modules log through logging.getLogger(__name__); this module only decides
where records go and how they look. JSON output carries the ledger extras
(asset_id, order_id, principal, tx_id, error_code) when a record has them.
"""

from __future__ import annotations
from datetime import datetime, timezone
import json
import logging
from typing import Optional

from .config import get_settings

_EXTRA_FIELDS = ("asset_id", "order_id", "principal", "tx_id", "error_code")


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Handler:
    """
    Attach a stream handler to the package logger.

    Arguments default to the configured log_level and log_format. Calling
    again replaces the handler installed by the previous call.
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    fmt = fmt or settings.log_format

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    handler.set_name("assettransfer")

    package_logger = logging.getLogger("assettransfer")
    for existing in list(package_logger.handlers):
        if existing.get_name() == "assettransfer":
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level, logging.INFO))
    return handler
