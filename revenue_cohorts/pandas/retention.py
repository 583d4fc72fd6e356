"""Pandas DataFrame adapters for cohort retention reports."""

from __future__ import annotations

from typing import Literal

import pandas as pd  # type: ignore

from revenue_cohorts.analyses.retention import (
    AnalysisReport,
    AnalysisSettings,
    analyze,
    nrr_percentage,
)
from revenue_cohorts.foundation.periods import PeriodGranularity
from .transactions import dataframe_to_transactions
from ._utils import decimal_to_float


def report_to_dataframe(
    report: AnalysisReport,
    value: Literal["revenue", "nrr"] = "revenue",
) -> pd.DataFrame:
    """Convert an AnalysisReport to a cohort × month matrix.

    Args:
        report: Report from ``analyze``
        value: ``"revenue"`` for retained revenue, ``"nrr"`` for NRR
            percentages (NaN where the cohort has no initial revenue)

    Returns:
        DataFrame with one row per cohort (in report order) and columns
        cohort, bucket_start, customer_count, initial_revenue and
        month_0 through month_<max_months>

    Example:
        >>> report = analyze(transactions, "quarter")
        >>> heatmap = report_to_dataframe(report, value="nrr")
        >>> heatmap.set_index("cohort").filter(like="month_")
    """
    if value not in ("revenue", "nrr"):
        raise ValueError(f"value must be 'revenue' or 'nrr', got {value!r}")

    month_columns = [f"month_{month}" for month in range(report.max_months + 1)]
    rows = []
    for cohort in report.cohorts:
        row = {
            "cohort": cohort.label,
            "bucket_start": pd.Timestamp(cohort.bucket_start),
            "customer_count": cohort.customer_count,
            "initial_revenue": decimal_to_float(cohort.initial_revenue),
        }
        for month, column in enumerate(month_columns):
            if value == "nrr":
                row[column] = decimal_to_float(nrr_percentage(cohort, month))
            else:
                row[column] = decimal_to_float(cohort.retention_by_month[month])
        rows.append(row)

    return pd.DataFrame(
        rows,
        columns=["cohort", "bucket_start", "customer_count", "initial_revenue"]
        + month_columns,
    )


def analyze_df(
    transactions_df: pd.DataFrame,
    granularity: PeriodGranularity | str = PeriodGranularity.QUARTER,
    settings: AnalysisSettings | None = None,
    value: Literal["revenue", "nrr"] = "revenue",
) -> pd.DataFrame:
    """Run the cohort retention analysis on a transactions DataFrame.

    Convenience function combining conversion and analysis.

    Example:
        >>> matrix = analyze_df(transactions_df, "month")
        >>> matrix.to_csv("cohort_retention.csv", index=False)
    """
    report = analyze(dataframe_to_transactions(transactions_df), granularity, settings)
    return report_to_dataframe(report, value=value)
