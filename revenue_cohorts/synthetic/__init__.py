"""Synthetic data generation utilities.

This package produces realistic-but-fake subscription revenue histories
to exercise the cohort retention pipeline without accessing production
data.
"""

from .generator import (
    BASELINE_SUBSCRIPTION_SCENARIO,
    EXPANSION_HEAVY_SUBSCRIPTION_SCENARIO,
    HIGH_CHURN_SUBSCRIPTION_SCENARIO,
    SubscriptionScenario,
    generate_subscription_transactions,
    sample_snapshot_records,
)

__all__ = [
    "BASELINE_SUBSCRIPTION_SCENARIO",
    "EXPANSION_HEAVY_SUBSCRIPTION_SCENARIO",
    "HIGH_CHURN_SUBSCRIPTION_SCENARIO",
    "SubscriptionScenario",
    "generate_subscription_transactions",
    "sample_snapshot_records",
]
