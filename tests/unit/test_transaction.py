"""Tests for the transaction journal and atomic()."""

import pytest
from structlog.testing import capture_logs

from exchange.errors import LedgerTransferFailed
from exchange.transaction import Journal, atomic
from tests.helpers import ALICE, BASE, BOB, CAROL, TOKEN1


class TestJournal:
    def test_transfer_applies_and_records(self, ledger):
        ledger.mint(ALICE, BASE, 100)
        journal = Journal("test")
        journal.transfer(ledger, ALICE, BOB, BASE, 30)
        assert ledger.balance_of(BOB, BASE) == 30
        assert len(journal) == 1

    def test_rejected_transfer_raises_and_records_nothing(self, ledger):
        journal = Journal("test")
        with pytest.raises(LedgerTransferFailed):
            journal.transfer(ledger, ALICE, BOB, BASE, 1)
        assert len(journal) == 0

    def test_rollback_reverses_newest_first(self, ledger):
        """B's credit is spent onward before rollback; newest-first undo still succeeds."""
        ledger.mint(ALICE, BASE, 100)
        journal = Journal("test")
        journal.transfer(ledger, ALICE, BOB, BASE, 30)
        journal.transfer(ledger, BOB, CAROL, BASE, 30)
        journal.rollback()
        assert ledger.balance_of(ALICE, BASE) == 100
        assert ledger.balance_of(BOB, BASE) == 0
        assert ledger.balance_of(CAROL, BASE) == 0

    def test_transfer_from_rollback_refunds_owner(self, ledger):
        ledger.mint(ALICE, TOKEN1, 100)
        ledger.approve(ALICE, BOB, TOKEN1, 100)
        journal = Journal("test")
        journal.transfer_from(ledger, BOB, ALICE, BOB, TOKEN1, 40)
        journal.rollback()
        assert ledger.balance_of(ALICE, TOKEN1) == 100
        assert ledger.balance_of(BOB, TOKEN1) == 0
        # Spent allowance stays spent
        assert ledger.allowance(ALICE, BOB, TOKEN1) == 60

    def test_transfer_from_without_allowance_raises(self, ledger):
        ledger.mint(ALICE, TOKEN1, 100)
        with pytest.raises(LedgerTransferFailed):
            Journal("test").transfer_from(ledger, BOB, ALICE, BOB, TOKEN1, 1)

    def test_failing_undo_is_logged_and_others_still_run(self, ledger):
        calls = []
        journal = Journal("test")
        journal.record("first", lambda: calls.append("first"))
        journal.record("broken", lambda: 1 / 0)
        journal.record("last", lambda: calls.append("last"))

        with capture_logs() as logs:
            journal.rollback()

        assert calls == ["last", "first"]
        failed = [entry for entry in logs if entry["event"] == "journal_undo_failed"]
        assert len(failed) == 1
        assert failed[0]["step"] == "broken"
        summary = [entry for entry in logs if entry["event"] == "journal_rolled_back"]
        assert summary[0]["failures"] == 1

    def test_closed_journal_rejects_records(self):
        journal = Journal("test")
        journal.commit()
        with pytest.raises(RuntimeError):
            journal.record("late", lambda: None)


class TestAtomic:
    def test_commits_on_success(self, ledger):
        ledger.mint(ALICE, BASE, 10)
        with atomic("op") as journal:
            journal.transfer(ledger, ALICE, BOB, BASE, 10)
        assert ledger.balance_of(BOB, BASE) == 10
        assert len(journal) == 0

    def test_rolls_back_and_reraises(self, ledger):
        ledger.mint(ALICE, BASE, 10)
        with pytest.raises(ValueError, match="boom"):
            with atomic("op") as journal:
                journal.transfer(ledger, ALICE, BOB, BASE, 10)
                raise ValueError("boom")
        assert ledger.balance_of(ALICE, BASE) == 10
        assert ledger.balance_of(BOB, BASE) == 0

    def test_joined_journal_defers_to_outer_block(self, ledger):
        """A nested atomic() on an outer journal does not roll back by itself."""
        ledger.mint(ALICE, BASE, 10)
        with pytest.raises(ValueError):
            with atomic("outer") as outer:
                with pytest.raises(KeyError):
                    with atomic("inner", outer) as inner:
                        assert inner is outer
                        inner.transfer(ledger, ALICE, BOB, BASE, 4)
                        raise KeyError("inner")
                assert ledger.balance_of(BOB, BASE) == 4
                raise ValueError("outer")
        assert ledger.balance_of(ALICE, BASE) == 10
