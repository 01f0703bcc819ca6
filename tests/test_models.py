import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import (
    AccountSnapshot,
    ProcessingStats,
    Transaction,
    TransactionRecord,
    TransactionState,
    TransactionType,
    format_money,
    to_money,
)


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None

    def test_only_deposits_and_withdrawals_create_records(self):
        assert TransactionType.DEPOSIT.creates_record
        assert TransactionType.WITHDRAWAL.creates_record
        assert not TransactionType.DISPUTE.creates_record
        assert not TransactionType.RESOLVE.creates_record
        assert not TransactionType.CHARGEBACK.creates_record


class TestTransactionRecord:
    def test_starts_normal(self):
        record = TransactionRecord(1, 1, TransactionType.DEPOSIT, Decimal("5"))
        assert record.state == TransactionState.NORMAL
        assert record.disputed is False

    def test_disputed_flag_follows_state(self):
        record = TransactionRecord(1, 1, TransactionType.DEPOSIT, Decimal("5"))
        record.state = TransactionState.DISPUTED
        assert record.disputed is True
        record.state = TransactionState.CHARGED_BACK
        assert record.disputed is False


class TestAccountSnapshot:
    def test_total_property(self):
        snapshot = AccountSnapshot(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
            locked=False,
        )
        assert snapshot.total == Decimal("150")


class TestMoney:
    def test_truncates_to_four_places(self):
        assert to_money("5.7245462362") == Decimal("5.7245")
        assert to_money("5.72459") == Decimal("5.7245")
        assert to_money("-1.99999") == Decimal("-1.9999")

    def test_accepts_integers_and_decimals(self):
        assert to_money(3) == Decimal("3.0000")
        assert to_money(Decimal("0.5")) == Decimal("0.5")

    @pytest.mark.parametrize("value", ["", "abc", "1.2.3", "NaN", "Infinity"])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            to_money(value)

    @pytest.mark.parametrize("value", ["1e30", "1234567890123456789012345", "-1e25"])
    def test_rejects_oversized(self, value):
        with pytest.raises(ValueError):
            to_money(value)

    def test_largest_amount(self):
        assert to_money("999999999999999999999999.99999") == Decimal("999999999999999999999999.9999")

    def test_format_wide_balance(self):
        assert format_money(Decimal("1999999999999999999999999.9998")) == "1999999999999999999999999.9998"

    def test_format_has_four_places(self):
        assert format_money(Decimal("1.5")) == "1.5000"
        assert format_money(Decimal("0")) == "0.0000"
        assert format_money(Decimal("1234567.0001")) == "1234567.0001"

    def test_no_float_drift(self):
        total = Decimal("0")
        for _ in range(10000):
            total += to_money("0.1")
        assert total == Decimal("1000")


class TestProcessingStats:
    def test_counters(self):
        stats = ProcessingStats()
        stats.record_success()
        stats.record_success()
        stats.record_failure()
        stats.record_unparseable()
        assert (stats.applied, stats.rejected, stats.unparseable) == (2, 1, 1)
