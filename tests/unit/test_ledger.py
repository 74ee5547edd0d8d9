"""Tests for the in-memory asset ledger."""

import pytest

from exchange.ledger import AssetLedger, InMemoryLedger
from exchange.safe_int import UINT256_MAX, Uint256Overflow
from tests.helpers import ALICE, BASE, BOB, CAROL, TOKEN1


class TestBalances:
    def test_implements_protocol(self, ledger):
        assert isinstance(ledger, AssetLedger)

    def test_unknown_balance_is_zero(self, ledger):
        assert ledger.balance_of(ALICE, TOKEN1) == 0

    def test_mint_accumulates(self, ledger):
        ledger.mint(ALICE, TOKEN1, 100)
        ledger.mint(ALICE, TOKEN1, 50)
        assert ledger.balance_of(ALICE, TOKEN1) == 150

    def test_addresses_are_case_insensitive(self, ledger):
        ledger.mint(ALICE.upper().replace("0X", "0x"), TOKEN1, 7)
        assert ledger.balance_of(ALICE, TOKEN1) == 7

    def test_mint_overflow_raises(self, ledger):
        ledger.mint(ALICE, TOKEN1, UINT256_MAX)
        with pytest.raises(Uint256Overflow):
            ledger.mint(ALICE, TOKEN1, 1)
        assert ledger.balance_of(ALICE, TOKEN1) == UINT256_MAX


class TestTransfer:
    def test_moves_balance(self, ledger):
        ledger.mint(ALICE, BASE, 100)
        assert ledger.transfer(ALICE, BOB, BASE, 40) is True
        assert ledger.balance_of(ALICE, BASE) == 60
        assert ledger.balance_of(BOB, BASE) == 40

    def test_insufficient_balance_rejected(self, ledger):
        ledger.mint(ALICE, BASE, 10)
        assert ledger.transfer(ALICE, BOB, BASE, 11) is False
        assert ledger.balance_of(ALICE, BASE) == 10
        assert ledger.balance_of(BOB, BASE) == 0

    def test_negative_amount_rejected(self, ledger):
        ledger.mint(ALICE, BASE, 10)
        assert ledger.transfer(ALICE, BOB, BASE, -1) is False

    def test_zero_amount_allowed(self, ledger):
        assert ledger.transfer(ALICE, BOB, BASE, 0) is True

    def test_self_transfer_keeps_balance(self, ledger):
        ledger.mint(ALICE, BASE, 10)
        assert ledger.transfer(ALICE, ALICE, BASE, 10) is True
        assert ledger.balance_of(ALICE, BASE) == 10

    def test_recipient_overflow_rejected(self, ledger):
        ledger.mint(ALICE, TOKEN1, 1)
        ledger.mint(BOB, TOKEN1, UINT256_MAX)
        assert ledger.transfer(ALICE, BOB, TOKEN1, 1) is False
        assert ledger.balance_of(ALICE, TOKEN1) == 1


class TestAllowances:
    def test_approve_and_read(self, ledger):
        assert ledger.approve(ALICE, BOB, TOKEN1, 500) is True
        assert ledger.allowance(ALICE, BOB, TOKEN1) == 500

    def test_approve_replaces(self, ledger):
        ledger.approve(ALICE, BOB, TOKEN1, 500)
        ledger.approve(ALICE, BOB, TOKEN1, 5)
        assert ledger.allowance(ALICE, BOB, TOKEN1) == 5

    def test_approve_out_of_range_rejected(self, ledger):
        assert ledger.approve(ALICE, BOB, TOKEN1, UINT256_MAX + 1) is False
        assert ledger.approve(ALICE, BOB, TOKEN1, -1) is False
        assert ledger.allowance(ALICE, BOB, TOKEN1) == 0

    def test_transfer_from_spends_allowance(self, ledger):
        ledger.mint(ALICE, TOKEN1, 100)
        ledger.approve(ALICE, BOB, TOKEN1, 60)
        assert ledger.transfer_from(BOB, ALICE, CAROL, TOKEN1, 50) is True
        assert ledger.balance_of(ALICE, TOKEN1) == 50
        assert ledger.balance_of(CAROL, TOKEN1) == 50
        assert ledger.allowance(ALICE, BOB, TOKEN1) == 10

    def test_transfer_from_above_allowance_rejected(self, ledger):
        ledger.mint(ALICE, TOKEN1, 100)
        ledger.approve(ALICE, BOB, TOKEN1, 10)
        assert ledger.transfer_from(BOB, ALICE, BOB, TOKEN1, 11) is False
        assert ledger.balance_of(ALICE, TOKEN1) == 100
        assert ledger.allowance(ALICE, BOB, TOKEN1) == 10

    def test_transfer_from_above_balance_keeps_allowance(self, ledger):
        ledger.mint(ALICE, TOKEN1, 5)
        ledger.approve(ALICE, BOB, TOKEN1, 10)
        assert ledger.transfer_from(BOB, ALICE, BOB, TOKEN1, 6) is False
        assert ledger.allowance(ALICE, BOB, TOKEN1) == 10


def test_fresh_ledgers_are_independent():
    first, second = InMemoryLedger(), InMemoryLedger()
    first.mint(ALICE, BASE, 1)
    assert second.balance_of(ALICE, BASE) == 0
