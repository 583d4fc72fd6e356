"""Pandas DataFrame adapters for revenue transactions."""

from __future__ import annotations

from typing import Sequence

import pandas as pd  # type: ignore

from revenue_cohorts.foundation.transactions import Transaction, TransactionKind
from ._utils import decimal_to_float, float_to_decimal

TRANSACTION_COLUMNS = [
    "customer_id",
    "effective_date",
    "revenue_amount",
    "kind",
    "previous_revenue_amount",
]


def transactions_to_dataframe(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Convert transactions to a DataFrame with one row per transaction.

    Args:
        transactions: Transactions to convert

    Returns:
        DataFrame with columns customer_id, effective_date (datetime64),
        revenue_amount, kind and previous_revenue_amount (NaN when unknown)

    Example:
        >>> df = transactions_to_dataframe(transactions)
        >>> df.groupby("kind")["revenue_amount"].sum()
    """
    df = pd.DataFrame(
        [
            {
                "customer_id": txn.customer_id,
                "effective_date": txn.effective_date,
                "revenue_amount": decimal_to_float(txn.revenue_amount),
                "kind": txn.kind.value,
                "previous_revenue_amount": decimal_to_float(
                    txn.previous_revenue_amount
                ),
            }
            for txn in transactions
        ],
        columns=TRANSACTION_COLUMNS,
    )
    df["effective_date"] = pd.to_datetime(df["effective_date"])
    return df


def dataframe_to_transactions(df: pd.DataFrame) -> list[Transaction]:
    """Convert a transactions DataFrame back to Transaction objects.

    ``kind`` and ``previous_revenue_amount`` columns are optional; a missing
    kind defaults to ``new``.

    Args:
        df: DataFrame with at least customer_id, effective_date and
            revenue_amount columns

    Returns:
        List of Transaction objects in row order

    Raises:
        ValueError: If required columns are missing
    """
    required = TRANSACTION_COLUMNS[:3]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"DataFrame missing required columns: {missing}")

    effective_dates = pd.to_datetime(df["effective_date"])
    transactions: list[Transaction] = []
    for idx, (_, row) in enumerate(df.iterrows()):
        kind = row.get("kind")
        previous = row.get("previous_revenue_amount")
        transactions.append(
            Transaction(
                customer_id=str(row["customer_id"]),
                effective_date=effective_dates.iloc[idx].date(),
                revenue_amount=float_to_decimal(float(row["revenue_amount"])),
                kind=TransactionKind(kind) if pd.notna(kind) else TransactionKind.NEW,
                previous_revenue_amount=(
                    float_to_decimal(float(previous)) if pd.notna(previous) else None
                ),
            )
        )
    return transactions
