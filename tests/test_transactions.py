"""Tests for the revenue transaction contract."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from revenue_cohorts.foundation.transactions import (
    CustomerSnapshot,
    Transaction,
    TransactionContract,
    TransactionKind,
    snapshots_to_transactions,
)


class TestTransaction:
    """Test Transaction value normalisation."""

    def test_coerces_kind_amount_and_datetime(self):
        txn = Transaction("A", datetime(2023, 1, 1, 15, 30), 1000, "expansion", 800.5)

        assert txn.effective_date == date(2023, 1, 1)
        assert txn.revenue_amount == Decimal("1000")
        assert txn.kind is TransactionKind.EXPANSION
        assert txn.previous_revenue_amount == Decimal("800.5")

    def test_defaults_to_new(self):
        txn = Transaction("A", date(2023, 1, 1), Decimal("10"))
        assert txn.kind is TransactionKind.NEW
        assert txn.previous_revenue_amount is None
        assert not txn.is_churn

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            Transaction("A", date(2023, 1, 1), Decimal("10"), "upsell")

    def test_is_immutable(self):
        txn = Transaction("A", date(2023, 1, 1), Decimal("10"))
        with pytest.raises(AttributeError):
            txn.revenue_amount = Decimal("20")


class TestTransactionContract:
    """Test validation of raw transaction records."""

    def test_validate_records_parses_strings(self):
        contract = TransactionContract()
        transactions = contract.validate_records(
            [
                {
                    "customer_id": " CUST-1 ",
                    "effective_date": "2023-01-15",
                    "revenue_amount": "$12,000",
                    "kind": "NEW",
                },
                {
                    "customer_id": 7,
                    "effective_date": "2023-06-01T00:00:00Z",
                    "revenue_amount": 0,
                    "kind": "churn",
                    "previous_revenue_amount": "12000",
                },
            ]
        )

        assert transactions[0] == Transaction(
            "CUST-1", date(2023, 1, 15), Decimal("12000"), TransactionKind.NEW
        )
        assert transactions[1].customer_id == "7"
        assert transactions[1].effective_date == date(2023, 6, 1)
        assert transactions[1].kind is TransactionKind.CHURN
        assert transactions[1].previous_revenue_amount == Decimal("12000")

    def test_kind_defaults_to_new(self):
        transactions = TransactionContract().validate_records(
            [{"customer_id": "A", "effective_date": date(2023, 1, 1), "revenue_amount": 5}]
        )
        assert transactions[0].kind is TransactionKind.NEW

    def test_zero_revenue_is_not_missing(self):
        transactions = TransactionContract().validate_records(
            [{"customer_id": "A", "effective_date": "2023-01-01", "revenue_amount": 0}]
        )
        assert transactions[0].revenue_amount == Decimal("0")

    def test_rejects_missing_fields(self):
        with pytest.raises(ValueError, match="missing required transaction fields"):
            TransactionContract().validate_records([{"customer_id": "A"}])

    def test_rejects_negative_revenue(self):
        with pytest.raises(ValueError, match="non-negative"):
            TransactionContract().validate_records(
                [{"customer_id": "A", "effective_date": "2023-01-01", "revenue_amount": -1}]
            )

    def test_rejects_unparseable_revenue(self):
        with pytest.raises(ValueError, match="not a number"):
            TransactionContract().validate_records(
                [{"customer_id": "A", "effective_date": "2023-01-01", "revenue_amount": "abc"}]
            )

    def test_rejects_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown transaction kind"):
            TransactionContract().validate_records(
                [
                    {
                        "customer_id": "A",
                        "effective_date": "2023-01-01",
                        "revenue_amount": 1,
                        "kind": "refund",
                    }
                ]
            )

    def test_rejects_bad_date_string(self):
        with pytest.raises(ValueError, match="not an ISO date"):
            TransactionContract().validate_records(
                [{"customer_id": "A", "effective_date": "15/01/2023", "revenue_amount": 1}]
            )

    def test_rejects_non_date_type(self):
        with pytest.raises(TypeError):
            TransactionContract().validate_records(
                [{"customer_id": "A", "effective_date": 20230101, "revenue_amount": 1}]
            )

    def test_error_reports_record_index(self):
        records = [
            {"customer_id": "A", "effective_date": "2023-01-01", "revenue_amount": 1},
            {"customer_id": "B", "effective_date": "2023-01-01"},
        ]
        with pytest.raises(ValueError) as excinfo:
            TransactionContract().validate_records(records)
        assert excinfo.value.args[1]["record_index"] == 1

    def test_to_serialisable(self):
        contract = TransactionContract()
        payload = contract.to_serialisable(
            [Transaction("A", date(2023, 1, 1), Decimal("99.50"), "renewal")]
        )
        assert payload == [
            {
                "customer_id": "A",
                "effective_date": "2023-01-01",
                "revenue_amount": "99.50",
                "kind": "renewal",
                "previous_revenue_amount": None,
            }
        ]

    def test_serialised_records_validate_back(self):
        contract = TransactionContract()
        original = [
            Transaction("A", date(2023, 1, 1), Decimal("100"), "new"),
            Transaction("A", date(2023, 3, 1), Decimal("0"), "churn", Decimal("100")),
        ]
        assert contract.validate_records(contract.to_serialisable(original)) == original


class TestSnapshots:
    """Test legacy snapshot records."""

    def test_validate_snapshots(self):
        snapshots = TransactionContract().validate_snapshots(
            [{"customer_id": "CUST-001", "close_date": "2023-01-15", "revenue_amount": "12000"}]
        )
        assert snapshots == [CustomerSnapshot("CUST-001", date(2023, 1, 15), Decimal("12000"))]

    def test_validate_snapshots_rejects_missing_close_date(self):
        with pytest.raises(ValueError, match="snapshot fields"):
            TransactionContract().validate_snapshots(
                [{"customer_id": "CUST-001", "revenue_amount": "12000"}]
            )

    def test_snapshots_become_new_transactions(self):
        transactions = snapshots_to_transactions(
            [
                CustomerSnapshot("B", date(2023, 2, 1), Decimal("5")),
                CustomerSnapshot("A", date(2023, 1, 1), Decimal("7")),
            ]
        )
        assert [t.customer_id for t in transactions] == ["B", "A"]
        assert all(t.kind is TransactionKind.NEW for t in transactions)
        assert transactions[1].revenue_amount == Decimal("7")
