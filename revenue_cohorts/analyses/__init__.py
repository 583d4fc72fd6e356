"""Cohort revenue retention analyses.

Given a customer transaction history, these analyses group customers into
acquisition cohorts and follow each cohort's recurring revenue month by
month, producing the net revenue retention (NRR) table behind cohort
heatmaps and exports.
"""

from .retention import (
    RETENTION_HORIZON_MONTHS,
    AnalysisReport,
    AnalysisSettings,
    Cohort,
    analyze,
    analyze_snapshots,
    build_report,
    calculate_cohort_retention,
    calculate_nrr_curve,
    customer_revenue_at,
    initial_revenue,
    nrr_percentage,
    quantize_half_up,
    retention_band,
)

__all__ = [
    "RETENTION_HORIZON_MONTHS",
    "AnalysisReport",
    "AnalysisSettings",
    "Cohort",
    "analyze",
    "analyze_snapshots",
    "build_report",
    "calculate_cohort_retention",
    "calculate_nrr_curve",
    "customer_revenue_at",
    "initial_revenue",
    "nrr_percentage",
    "quantize_half_up",
    "retention_band",
]
