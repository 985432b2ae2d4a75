#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Asset Transfer Contract Step by Step

Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation      - Seeding the ledger, reading assets, identities
  4-6:  Direct Transfer - Paying for an asset, rejections, atomicity
  7-9:  Orders          - Buying, confirming, confirming twice
  10:   Conservation    - Money moves between wallets, never appears

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
import sys

from assettransfer import (
    AssetTransferContract, MemoryLedger, Settings,
    AssetTransferError, InsufficientFunds,
    make_token, resolve, wallet_id, setup_logging,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: datetime = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
    organization: str = "org1.example.com"
    alice_funds: Decimal = Decimal("2000.00")
    bob_funds: Decimal = Decimal("5000.00")
    painting_price: Decimal = Decimal("1500.00")
    log_level: str = "WARNING"


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv

ADMIN = make_token("admin", CONFIG.organization)
ALICE_TOKEN = make_token("alice", CONFIG.organization)
BOB_TOKEN = make_token("bob", CONFIG.organization)
ALICE = resolve(ALICE_TOKEN)
BOB = resolve(BOB_TOKEN)


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def show_assets(ledger: MemoryLedger):
    for asset in ledger.evaluate(ADMIN, "GetAllAssets"):
        print(f"  {asset.asset_id:<32} {asset.type:<10} {asset.price:>10}  {asset.owner}")


def show_balances(ledger: MemoryLedger, *principals: str):
    for principal in principals:
        wallet = ledger.evaluate(ADMIN, "ReadAsset", wallet_id(principal))
        print(f"  {principal:<28} {wallet.price:>10}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_init_ledger():
    """Seed an empty ledger with the sample assets."""
    step_header(1, "Seeding the Ledger",
        "InitLedger writes two wallets and five assets in one invocation.")

    print("""
    Everything on the ledger is an Asset: an ID, a type, a price and an owner.
    A WALLET is just an asset whose ID is "<principal>-wallet" and whose type
    is "money". Its price is the principal's balance.
    """)

    wait_for_enter()

    print(">>> ledger = MemoryLedger('tutorial')")
    print(">>> ledger.submit(admin, 'InitLedger')")
    ledger = MemoryLedger("tutorial", contract=AssetTransferContract(Settings()),
                          initial_time=CONFIG.start_time)
    ledger.submit(ADMIN, "InitLedger")

    section_header("World State")
    show_assets(ledger)
    return ledger


def step_02_read_asset(ledger: MemoryLedger):
    """Read one asset and check for a missing one."""
    step_header(2, "Reading Assets",
        "Reads are EVALUATE operations: they never commit anything.")

    print(">>> ledger.evaluate(admin, 'ReadAsset', 'asset1')")
    print(f"  {ledger.evaluate(ADMIN, 'ReadAsset', 'asset1')}")
    print(">>> ledger.evaluate(admin, 'AssetExists', 'asset4')")
    print(f"  {ledger.evaluate(ADMIN, 'AssetExists', 'asset4')}")


def step_03_identities():
    """Show how caller tokens become principals."""
    step_header(3, "Caller Identities",
        "The platform passes a certificate descriptor; the contract needs 'name@org'.")

    print(f"  token:     {ALICE_TOKEN}")
    print(f"  principal: {ALICE}")
    print("""
    Only the subject CN and the issuer O are used. A token that does not
    parse is treated as an authorization failure, never as a default user.
    """)


# ============================================================================
# PHASE 2: DIRECT TRANSFER (Steps 4-6)
# ============================================================================

def step_04_transfer(ledger: MemoryLedger):
    """B pays A for asset1."""
    step_header(4, "Direct Transfer",
        "The new owner's wallet pays the asset's price to the old owner's wallet.")

    print(">>> ledger.submit(admin, 'TransferAsset', 'asset1', 'B')")
    summary = ledger.submit(ADMIN, "TransferAsset", "asset1", "B")
    print()
    print(summary)

    section_header("Balances")
    show_balances(ledger, "A", "B")


def step_05_rejection(ledger: MemoryLedger):
    """B cannot afford asset3."""
    step_header(5, "Rejected Transfer",
        "Insufficient funds aborts the invocation before anything is written.")

    before = ledger.snapshot()
    print(">>> ledger.submit(admin, 'TransferAsset', 'asset3', 'B')")
    try:
        ledger.submit(ADMIN, "TransferAsset", "asset3", "B")
    except InsufficientFunds as exc:
        print(f"  REJECTED [{exc.code}]: {exc}")
    print(f"\n  State unchanged: {ledger.snapshot() == before}")


def step_06_atomicity(ledger: MemoryLedger):
    """A transfer to an owner without a wallet fails as a whole."""
    step_header(6, "Atomicity",
        "Three writes per transfer: either all of them land or none do.")

    print("""
    The contract writes the asset, then the debited wallet, then the credited
    wallet. It does not lock or compensate. The platform buffers the writes
    and commits them together only if the invocation returns normally.
    """)

    before = ledger.snapshot()
    print(">>> ledger.submit(admin, 'TransferAsset', 'asset5', 'A')   # 'bank' has no wallet")
    try:
        ledger.submit(ADMIN, "TransferAsset", "asset5", "A")
    except AssetTransferError as exc:
        print(f"  REJECTED [{exc.code}]: {exc}")
    print(f"\n  State unchanged: {ledger.snapshot() == before}")


# ============================================================================
# PHASE 3: ORDERS (Steps 7-9)
# ============================================================================

def step_07_market():
    """Fund alice and bob and list a painting."""
    step_header(7, "A Market With Real Identities",
        "Orders tie wallets to authenticated callers.")

    ledger = MemoryLedger("market", contract=AssetTransferContract(Settings(seed_assets=False)),
                          initial_time=CONFIG.start_time)
    ledger.submit(ADMIN, "CreateAsset", wallet_id(ALICE), "money", str(CONFIG.alice_funds), ALICE)
    ledger.submit(ADMIN, "CreateAsset", wallet_id(BOB), "money", str(CONFIG.bob_funds), BOB)
    ledger.submit(ADMIN, "CreateAsset", "painting", "art", str(CONFIG.painting_price), ALICE)

    show_assets(ledger)
    return ledger


def step_08_buy_and_confirm(ledger: MemoryLedger):
    """bob buys, alice confirms."""
    step_header(8, "Buy, Then Confirm",
        "Buying debits the purchaser now; confirming pays the business and moves the asset.")

    print(">>> order_id = ledger.submit(bob, 'BuyAsset', 'painting')")
    order_id = ledger.submit(BOB_TOKEN, "BuyAsset", "painting")
    print(f"  {ledger.evaluate(ADMIN, 'ReadOrder', order_id)}")
    show_balances(ledger, ALICE, BOB)

    wait_for_enter()

    print("\n>>> ledger.submit(alice, 'ConfirmOrder', order_id)")
    print(f"  {ledger.submit(ALICE_TOKEN, 'ConfirmOrder', order_id)}")
    show_balances(ledger, ALICE, BOB)
    print(f"  painting owner: {ledger.evaluate(ADMIN, 'ReadAsset', 'painting').owner}")
    return order_id


def step_09_confirm_twice(ledger: MemoryLedger, order_id: str):
    """A second confirm is refused."""
    step_header(9, "Confirm Exactly Once",
        "A confirmed order can never pay out again.")

    for token, label in ((ALICE_TOKEN, "alice"), (BOB_TOKEN, "bob")):
        print(f">>> ledger.submit({label}, 'ConfirmOrder', order_id)")
        try:
            ledger.submit(token, "ConfirmOrder", order_id)
        except AssetTransferError as exc:
            print(f"  REJECTED [{exc.code}]: {exc}")


# ============================================================================
# PHASE 4: CONSERVATION (Step 10)
# ============================================================================

def step_10_conservation(ledger: MemoryLedger):
    """Sum the wallets."""
    step_header(10, "Conservation",
        "Completed transfers move money between wallets; the total never changes.")

    total = sum(ledger.evaluate(ADMIN, "ReadAsset", wallet_id(p)).price for p in (ALICE, BOB))
    print(f"  Starting total: {CONFIG.alice_funds + CONFIG.bob_funds}")
    print(f"  Current total:  {total}")
    print(f"  Committed invocations: {len(ledger.committed_tx_ids)}")


def main():
    setup_logging(level=CONFIG.log_level)

    print("=" * 70)
    print("       ASSET TRANSFER TUTORIAL")
    print("=" * 70)

    ledger = step_01_init_ledger()
    wait_for_enter()
    step_02_read_asset(ledger)
    wait_for_enter()
    step_03_identities()
    wait_for_enter()

    step_04_transfer(ledger)
    wait_for_enter()
    step_05_rejection(ledger)
    wait_for_enter()
    step_06_atomicity(ledger)
    wait_for_enter()

    market = step_07_market()
    wait_for_enter()
    order_id = step_08_buy_and_confirm(market)
    wait_for_enter()
    step_09_confirm_twice(market, order_id)
    wait_for_enter()

    step_10_conservation(market)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See assettransfer/contract.py for the operation table
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
