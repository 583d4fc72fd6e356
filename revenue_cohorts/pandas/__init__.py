"""Pandas DataFrame adapters for cohort revenue analysis components."""

from .transactions import (
    transactions_to_dataframe,
    dataframe_to_transactions,
)
from .retention import (
    report_to_dataframe,
    analyze_df,
)

__all__ = [
    # Transaction adapters
    "transactions_to_dataframe",
    "dataframe_to_transactions",
    # Retention adapters
    "report_to_dataframe",
    "analyze_df",
]
