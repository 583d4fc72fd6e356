"""Export cohort retention reports to various formats.

This module provides utilities for saving analysis reports as CSV (the
spreadsheet layout used by the cohort heatmap download) or structured JSON
for dashboards and long-term storage.
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

import pandas as pd

from revenue_cohorts.analyses.retention import AnalysisReport, Cohort, quantize_half_up

logger = logging.getLogger(__name__)


def _nrr_label(report: AnalysisReport) -> str:
    return "Adjusted NRR" if report.settings.is_adjusted else "NRR"


def _export_percentage(cohort: Cohort, month: int) -> str:
    if month == 0:
        return "100.0"
    if cohort.initial_revenue == 0:
        return ""
    pct = cohort.retention_by_month[month] / cohort.initial_revenue * Decimal("100")
    return str(quantize_half_up(pct, Decimal("0.1")))


def _money(value: Decimal) -> str:
    return str(quantize_half_up(value, Decimal("0.01")))


def report_to_export_frame(report: AnalysisReport) -> pd.DataFrame:
    """Build the CSV export table for ``report``.

    Columns are ``Cohort``, ``Customer Count``, ``Initial Revenue`` and, for
    each month 0..max_months, ``Month m <NRR|Adjusted NRR> (%)`` followed by
    ``Month m Revenue ($)``. Percentages carry one decimal place and revenue
    two; percentages are blank for cohorts without initial revenue.
    """
    nrr_label = _nrr_label(report)
    columns = ["Cohort", "Customer Count", "Initial Revenue"]
    for month in range(report.max_months + 1):
        columns.append(f"Month {month} {nrr_label} (%)")
        columns.append(f"Month {month} Revenue ($)")

    rows = []
    for cohort in report.cohorts:
        row = [cohort.label, str(cohort.customer_count), _money(cohort.initial_revenue)]
        for month in range(report.max_months + 1):
            row.append(_export_percentage(cohort, month))
            row.append(_money(cohort.retention_by_month[month]))
        rows.append(row)

    return pd.DataFrame(rows, columns=columns)


def export_report_csv(report: AnalysisReport, output_path: str | Path) -> None:
    """Export a cohort retention report to CSV.

    Parameters
    ----------
    report:
        Report from :func:`~revenue_cohorts.analyses.retention.analyze`.
    output_path:
        Path where the CSV file will be saved.

    Raises
    ------
    ValueError
        If the report has no cohorts.

    Examples
    --------
    >>> report = analyze(transactions, "quarter")
    >>> export_report_csv(report, default_export_filename(report))
    """
    if not report.cohorts:
        raise ValueError("No cohorts to export")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = report_to_export_frame(report)
    df.to_csv(output_path, index=False, quoting=csv.QUOTE_ALL)

    logger.info(f"Cohort report exported to {output_path} ({len(df)} cohorts)")


def report_to_serialisable(report: AnalysisReport) -> dict[str, Any]:
    """Convert a report into a JSON-serialisable dictionary.

    Revenue values are rendered as strings to keep Decimal precision.
    """
    return {
        "granularity": report.granularity.value,
        "settings": {
            "include_expansion_revenue": report.settings.include_expansion_revenue,
            "exclude_churned_accounts": report.settings.exclude_churned_accounts,
            "is_adjusted": report.settings.is_adjusted,
        },
        "max_months": report.max_months,
        "cohorts": [
            {
                "label": cohort.label,
                "bucket_start": cohort.bucket_start.isoformat(),
                "initial_revenue": str(cohort.initial_revenue),
                "customer_count": cohort.customer_count,
                "customers": [
                    {
                        "customer_id": customer.customer_id,
                        "first_transaction_date": customer.first_transaction_date.isoformat(),
                        "current_revenue": str(customer.current_revenue),
                        "is_active": customer.is_active,
                    }
                    for customer in cohort.customers
                ],
                "retention_by_month": {
                    str(month): str(value)
                    for month, value in sorted(cohort.retention_by_month.items())
                },
            }
            for cohort in report.cohorts
        ],
    }


def export_report_json(
    report: AnalysisReport,
    output_path: str | Path,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Export a cohort retention report to JSON.

    Parameters
    ----------
    report:
        Report to export.
    output_path:
        Path where the JSON file will be saved.
    metadata:
        Optional metadata to include in the report (e.g. data source).
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "metadata": metadata or {},
        "timestamp": datetime.now().isoformat(),
        **report_to_serialisable(report),
    }
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(f"Cohort report exported to {output_path}")


def default_export_filename(report: AnalysisReport, today: date | None = None) -> str:
    """Return the conventional CSV filename for ``report``.

    >>> default_export_filename(report, date(2024, 1, 15))  # doctest: +SKIP
    'cohort-nrr-analysis-2024-01-15.csv'
    """
    today = today or date.today()
    prefix = "adjusted-nrr" if report.settings.is_adjusted else "nrr"
    return f"cohort-{prefix}-analysis-{today.isoformat()}.csv"
