"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the asset transfer contract.

The tests are organized by invariant:
1. conservation.py - Transfers move money between wallets, never create it
2. atomicity.py - A failed invocation leaves the ledger untouched
3. isolation.py - Asset and order records never leak into each other
4. lifecycle.py - Orders confirm exactly once

These tests use hypothesis for property-based testing.
"""
