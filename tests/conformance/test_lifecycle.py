"""
Lifecycle Conformance Tests

INVARIANT: An order moves from unconfirmed to confirmed exactly once.

    Order.confirm: False → True, never back
    ConfirmOrder(o) succeeds at most once for any o
    after a successful confirm:
        business wallet += price(asset)
        owner(asset) = purchaser(o)
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from decimal import Decimal

from assettransfer import (
    AssetTransferContract, MemoryLedger, Settings,
    AlreadyConfirmed, AssetTransferError, wallet_id,
)

from tests.helpers import (
    ADMIN_TOKEN, ALICE, ALICE_TOKEN, BOB, BOB_TOKEN, CAROL_TOKEN,
    balance, create, read_asset, read_order,
)


CALLERS = [ALICE_TOKEN, BOB_TOKEN, CAROL_TOKEN, "garbage"]


def _market() -> MemoryLedger:
    ledger = MemoryLedger("life", contract=AssetTransferContract(Settings(seed_assets=False)))
    create(ledger, wallet_id(ALICE), "money", "0", ALICE)
    create(ledger, wallet_id(BOB), "money", "10000", BOB)
    create(ledger, "lamp", "furniture", "250", ALICE)
    return ledger


class TestLifecycleProperties:

    @given(st.lists(st.sampled_from(CALLERS), min_size=1, max_size=10))
    @settings(max_examples=50, deadline=None)
    def test_confirm_succeeds_at_most_once(self, callers):
        """
        PROPERTY: Whatever sequence of callers attempts ConfirmOrder, the
        business is paid once and the order ends confirmed iff the business
        attempted it.
        """
        ledger = _market()
        order_id = ledger.submit(BOB_TOKEN, "BuyAsset", "lamp")

        successes = 0
        for caller in callers:
            try:
                ledger.submit(caller, "ConfirmOrder", order_id)
                successes += 1
            except AssetTransferError:
                pass

        assert successes == (1 if ALICE_TOKEN in callers else 0)
        assert read_order(ledger, order_id).confirm is (ALICE_TOKEN in callers)
        assert balance(ledger, ALICE) == Decimal("250") * successes
        assert balance(ledger, BOB) == Decimal("9750")

    @given(st.integers(min_value=1, max_value=5))
    @settings(max_examples=10, deadline=None)
    def test_orders_settle_independently(self, purchases):
        """PROPERTY: N purchases produce N orders, each confirmable once."""
        ledger = _market()
        order_ids = [ledger.submit(BOB_TOKEN, "BuyAsset", "lamp") for _ in range(purchases)]
        assert len(set(order_ids)) == purchases

        for order_id in order_ids:
            ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)
            with pytest.raises(AlreadyConfirmed):
                ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)

        assert balance(ledger, BOB) == Decimal("10000") - Decimal("250") * purchases
        assert balance(ledger, ALICE) == Decimal("250") * purchases


class TestLifecycleExamples:

    def test_unconfirmed_then_confirmed(self):
        ledger = _market()
        order_id = ledger.submit(BOB_TOKEN, "BuyAsset", "lamp")
        assert read_order(ledger, order_id).confirm is False
        assert read_asset(ledger, "lamp").owner == ALICE

        ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)
        assert read_order(ledger, order_id).confirm is True
        assert read_asset(ledger, "lamp").owner == BOB

    def test_confirmed_check_precedes_authorization(self):
        """A confirmed order reports AlreadyConfirmed even to a stranger."""
        ledger = _market()
        order_id = ledger.submit(BOB_TOKEN, "BuyAsset", "lamp")
        ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)
        with pytest.raises(AlreadyConfirmed):
            ledger.submit(CAROL_TOKEN, "ConfirmOrder", order_id)

    def test_business_changes_before_confirm(self):
        """The order names the owner at purchase time, not the current one."""
        ledger = _market()
        order_id = ledger.submit(BOB_TOKEN, "BuyAsset", "lamp")
        ledger.submit(ADMIN_TOKEN, "UpdateAsset", "lamp", "furniture", "250", "someone@else")

        ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)
        assert read_asset(ledger, "lamp").owner == BOB
        assert balance(ledger, ALICE) == Decimal("250")

    def test_confirm_pays_current_price(self):
        """Settlement credits the asset's price at confirm time."""
        ledger = _market()
        order_id = ledger.submit(BOB_TOKEN, "BuyAsset", "lamp")
        ledger.submit(ADMIN_TOKEN, "UpdateAsset", "lamp", "furniture", "300", ALICE)
        ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)
        assert balance(ledger, ALICE) == Decimal("300")
        assert balance(ledger, BOB) == Decimal("9750")
