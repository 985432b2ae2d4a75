"""
memory.py - In-memory platform for running the contract

MemoryLedger stands in for the hosting ledger platform: it keeps committed
world state in a dict and runs each invocation against a write buffer.

    - Reads see committed state only, never the invocation's own writes.
    - A clean exit commits every buffered write together.
    - An exception discards every buffered write.

This gives the all-or-nothing guarantee the contract relies on for its
multi-write transfers. It is not thread-safe.
"""

from __future__ import annotations
from bisect import bisect_left
from contextlib import contextmanager
from datetime import datetime, timezone
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .contract import AssetTransferContract, Intent, OPERATIONS, dispatch
from .core import Context, UnknownOperation

logger = logging.getLogger(__name__)

# Sentinel for a buffered delete.
_DELETED = None


class Invocation:
    """
    KeyValueLedger view for one invocation.

    Implements the KeyValueLedger protocol over the owning ledger's
    committed state plus a private write set.
    """

    def __init__(self, ledger: MemoryLedger):
        self._ledger = ledger
        self.writes: Dict[str, Optional[str]] = {}

    def get_state(self, key: str) -> Optional[str]:
        return self._ledger.state.get(key)

    def put_state(self, key: str, value: str) -> None:
        if not key:
            raise ValueError("Key cannot be empty")
        if not isinstance(value, str):
            raise ValueError(f"Value must be str, got {type(value)}")
        self.writes[key] = value

    def del_state(self, key: str) -> None:
        self.writes[key] = _DELETED

    def get_state_by_range(self, start_key: str, end_key: str) -> Iterator[Tuple[str, str]]:
        keys = sorted(self._ledger.state)
        i = bisect_left(keys, start_key) if start_key else 0
        while i < len(keys):
            key = keys[i]
            if end_key and key >= end_key:
                return
            yield key, self._ledger.state[key]
            i += 1


class MemoryLedger:
    """
    Committed key-value state plus invocation management.

    Example:
        ledger = MemoryLedger("main")
        contract = AssetTransferContract()
        ledger.submit(token, "InitLedger")
        ledger.submit(token, "TransferAsset", "asset1", "B")
        ledger.evaluate(token, "ReadAsset", "asset1").owner  # "B"
    """

    def __init__(
        self,
        name: str = "main",
        contract: Optional[AssetTransferContract] = None,
        initial_time: Optional[datetime] = None,
    ):
        self.name = name
        self.contract = contract or AssetTransferContract()
        self.state: Dict[str, str] = {}
        self._current_time = initial_time or datetime(1970, 1, 1, tzinfo=timezone.utc)
        self._next_sequence = 0
        self.committed_tx_ids: List[str] = []

    @property
    def current_time(self) -> datetime:
        return self._current_time

    def advance_time(self, new_time: datetime) -> None:
        """Advance the logical clock. Time only moves forward."""
        if new_time < self._current_time:
            raise ValueError(f"Cannot move time backwards: {new_time} < {self._current_time}")
        self._current_time = new_time

    def _generate_tx_id(self) -> str:
        sequence = self._next_sequence
        self._next_sequence += 1
        return f"{self.name}-{sequence}"

    def _commit(self, tx_id: str, writes: Dict[str, Optional[str]]) -> None:
        for key, value in writes.items():
            if value is _DELETED:
                self.state.pop(key, None)
            else:
                self.state[key] = value
        self.committed_tx_ids.append(tx_id)

    @contextmanager
    def transaction(
        self,
        caller: str,
        tx_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        commit: bool = True,
    ) -> Iterator[Context]:
        """
        Run one invocation.

        Yields a Context for the contract. On clean exit the buffered writes
        are committed (unless commit is False); if the body raises, they are
        discarded and the exception propagates.
        """
        invocation = Invocation(self)
        ctx = Context(
            stub=invocation,
            caller=caller,
            tx_id=tx_id or self._generate_tx_id(),
            timestamp=timestamp or self._current_time,
        )
        try:
            yield ctx
        except Exception:
            logger.info("Invocation %s failed, discarding %d writes", ctx.tx_id,
                        len(invocation.writes), extra={"tx_id": ctx.tx_id})
            raise
        if commit:
            self._commit(ctx.tx_id, invocation.writes)

    def submit(self, caller: str, name: str, *args: Any, tx_id: Optional[str] = None) -> Any:
        """Invoke an operation and commit its writes."""
        with self.transaction(caller, tx_id=tx_id) as ctx:
            return dispatch(self.contract, ctx, name, *args)

    def evaluate(self, caller: str, name: str, *args: Any) -> Any:
        """
        Invoke a read-only operation; nothing is committed.

        Raises:
            UnknownOperation: If name is not registered.
            ValueError: If name is a SUBMIT operation.
        """
        op = OPERATIONS.get(name)
        if op is None:
            raise UnknownOperation(f"Unknown operation {name!r}")
        if op.intent is not Intent.EVALUATE:
            raise ValueError(f"{name} must be submitted, not evaluated")
        with self.transaction(caller, commit=False) as ctx:
            return dispatch(self.contract, ctx, name, *args)

    def snapshot(self) -> Dict[str, str]:
        """Copy of the committed state."""
        return dict(self.state)

    def keys(self) -> List[str]:
        return sorted(self.state)
