"""Tests for the ProceedsLedger."""

from __future__ import annotations

import pytest

from marketledger.core.proceeds_ledger import ProceedsLedger


class TestProceedsLedger:
    def test_unknown_seller_is_zero(self):
        assert ProceedsLedger().balance_of("alice") == 0

    def test_credit_accumulates(self):
        ledger = ProceedsLedger()
        ledger.credit("alice", 10)
        assert ledger.credit("alice", 5) == 15
        assert ledger.total() == 15

    def test_negative_credit_rejected(self):
        with pytest.raises(ValueError):
            ProceedsLedger().credit("alice", -1)

    def test_drain_takes_everything(self):
        ledger = ProceedsLedger()
        ledger.credit("alice", 10)
        assert ledger.drain("alice") == 10
        assert ledger.balance_of("alice") == 0
        assert ledger.drain("alice") == 0

    def test_restore(self):
        ledger = ProceedsLedger()
        ledger.credit("alice", 10)
        amount = ledger.drain("alice")
        ledger.restore("alice", amount)
        assert ledger.balance_of("alice") == 10
        ledger.restore("alice", 0)
        assert ledger.balance_of("alice") == 0
        assert ledger.total() == 0
