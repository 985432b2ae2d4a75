"""
test_order_workflow.py - The buy / confirm order lifecycle

market_ledger: alice sells "painting" (1500); alice holds 2000,
bob 5000 and carol 1000 in their wallets.
"""

import pytest
from decimal import Decimal

from assettransfer import (
    Order, AlreadyConfirmed, AlreadyExists, InsufficientFunds, NotFound,
    Unauthorized, MalformedIdentity, derive_order_id,
)

from tests.helpers import (
    ADMIN_TOKEN, ALICE, ALICE_TOKEN, BOB, BOB_TOKEN, CAROL, CAROL_TOKEN,
    balance, balances, read_asset, read_order,
)


class TestBuy:

    def test_buy_debits_purchaser_and_opens_order(self, market_ledger):
        order_id = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")

        assert balance(market_ledger, BOB) == Decimal("3500")
        assert balance(market_ledger, ALICE) == Decimal("2000")
        assert read_asset(market_ledger, "painting").owner == ALICE
        assert read_order(market_ledger, order_id) == Order(order_id, BOB, ALICE, "painting", False)

    def test_purchaser_wallet_written_with_business_as_owner(self, market_ledger):
        market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        wallet = read_asset(market_ledger, f"{BOB}-wallet")
        assert wallet.owner == ALICE
        assert wallet.price == Decimal("3500")

    def test_order_id_is_derived_from_invocation(self, market_ledger):
        order_id = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting", tx_id="tx-buy")
        assert order_id == derive_order_id("painting", BOB, "tx-buy")

    def test_insufficient_funds(self, market_ledger):
        before = market_ledger.snapshot()
        with pytest.raises(InsufficientFunds, match=CAROL):
            market_ledger.submit(CAROL_TOKEN, "BuyAsset", "painting")
        assert market_ledger.snapshot() == before

    def test_purchaser_without_wallet(self, market_ledger):
        with pytest.raises(NotFound):
            market_ledger.submit(ADMIN_TOKEN, "BuyAsset", "painting")

    def test_missing_asset(self, market_ledger):
        with pytest.raises(NotFound):
            market_ledger.submit(BOB_TOKEN, "BuyAsset", "sculpture")

    def test_malformed_caller(self, market_ledger):
        before = market_ledger.snapshot()
        with pytest.raises(MalformedIdentity):
            market_ledger.submit("anonymous", "BuyAsset", "painting")
        assert market_ledger.snapshot() == before

    def test_replayed_invocation_collides(self, market_ledger):
        market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting", tx_id="tx-1")
        after_first = market_ledger.snapshot()
        with pytest.raises(AlreadyExists):
            market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting", tx_id="tx-1")
        assert market_ledger.snapshot() == after_first

    def test_two_purchases_two_orders(self, market_ledger):
        first = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        second = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        assert first != second
        assert balance(market_ledger, BOB) == Decimal("2000")


class TestConfirm:

    def test_confirm_settles(self, market_ledger):
        order_id = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        confirmed = market_ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)

        assert confirmed.confirm is True
        assert read_order(market_ledger, order_id).confirm is True
        assert read_asset(market_ledger, "painting").owner == BOB
        assert balances(market_ledger, ALICE, BOB) == {ALICE: Decimal("3500"), BOB: Decimal("3500")}

    def test_buy_confirm_conserves_money(self, market_ledger):
        total = sum(balances(market_ledger, ALICE, BOB, CAROL).values())
        order_id = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        market_ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)
        assert sum(balances(market_ledger, ALICE, BOB, CAROL).values()) == total

    def test_second_confirm_fails(self, market_ledger):
        order_id = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        market_ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)
        settled = market_ledger.snapshot()

        with pytest.raises(AlreadyConfirmed):
            market_ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)

        assert market_ledger.snapshot() == settled
        assert market_ledger.evaluate(ALICE_TOKEN, "ReadOrder", order_id).confirm is True

    def test_only_business_may_confirm(self, market_ledger):
        order_id = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        pending = market_ledger.snapshot()

        for token in (BOB_TOKEN, CAROL_TOKEN, "garbage"):
            with pytest.raises(Unauthorized):
                market_ledger.submit(token, "ConfirmOrder", order_id)

        assert market_ledger.snapshot() == pending

    def test_business_with_enrolled_cn(self, market_ledger):
        """A certificate CN of the form name@domain resolves to the same business."""
        order_id = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        token = "x509::CN=alice@org1.example.com,OU=client,L=San Francisco::" \
                "CN=ca.org1.example.com,O=org1.example.com"
        market_ledger.submit(token, "ConfirmOrder", order_id)
        assert read_asset(market_ledger, "painting").owner == BOB

    def test_unknown_order(self, market_ledger):
        with pytest.raises(NotFound):
            market_ledger.submit(ALICE_TOKEN, "ConfirmOrder", "0000000000000000")

    def test_asset_deleted_before_confirm(self, market_ledger):
        order_id = market_ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
        market_ledger.submit(ADMIN_TOKEN, "DeleteAsset", "painting")
        with pytest.raises(NotFound, match="painting"):
            market_ledger.submit(ALICE_TOKEN, "ConfirmOrder", order_id)
        assert read_order(market_ledger, order_id).confirm is False

    def test_business_without_wallet(self, market_ledger):
        market_ledger.submit(ADMIN_TOKEN, "CreateAsset", "vase", "pottery", "10", "dave@org1.example.com")
        with market_ledger.transaction(ADMIN_TOKEN) as ctx:
            order = market_ledger.contract.create_order(ctx, BOB, "dave@org1.example.com", "vase")
        dave = "x509::CN=dave::O=org1.example.com"
        with pytest.raises(NotFound, match="wallet"):
            market_ledger.submit(dave, "ConfirmOrder", order.order_id)


class TestCreateOrder:

    def test_administrative_order_moves_no_funds(self, market_ledger):
        before = balances(market_ledger, ALICE, BOB)
        order = market_ledger.submit(ADMIN_TOKEN, "CreateOrder", BOB, ALICE, "painting")
        assert order.confirm is False
        assert (order.purchaser, order.business, order.asset_id) == (BOB, ALICE, "painting")
        assert balances(market_ledger, ALICE, BOB) == before

    def test_confirm_administrative_order(self, market_ledger):
        order = market_ledger.submit(ADMIN_TOKEN, "CreateOrder", BOB, ALICE, "painting")
        market_ledger.submit(ALICE_TOKEN, "ConfirmOrder", order.order_id)
        assert read_asset(market_ledger, "painting").owner == BOB
        assert balance(market_ledger, ALICE) == Decimal("3500")
        assert balance(market_ledger, BOB) == Decimal("5000")

    def test_duplicate_order_id(self, market_ledger):
        market_ledger.submit(ADMIN_TOKEN, "CreateOrder", BOB, ALICE, "painting", tx_id="tx-order")
        with market_ledger.transaction(ADMIN_TOKEN, tx_id="tx-order", commit=False) as ctx:
            with pytest.raises(AlreadyExists):
                market_ledger.contract.create_order(ctx, BOB, ALICE, "painting")

    def test_read_order(self, market_ledger):
        order = market_ledger.submit(ADMIN_TOKEN, "CreateOrder", BOB, ALICE, "painting")
        assert market_ledger.evaluate(ADMIN_TOKEN, "ReadOrder", order.order_id) == order
        with pytest.raises(NotFound):
            market_ledger.evaluate(ADMIN_TOKEN, "ReadOrder", "missing")
