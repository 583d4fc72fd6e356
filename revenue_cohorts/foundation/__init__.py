"""Foundational building blocks for cohort revenue analysis.

This package exposes the transaction contract, calendar period helpers,
customer aggregation and acquisition cohort grouping used by the
retention analyses.
"""

from .cohorts import CohortMembers, assign_cohort_labels, group_into_cohorts
from .customers import CustomerSummary, aggregate_customers, summarise_customer
from .periods import (
    InvalidGranularityError,
    PeriodGranularity,
    add_months,
    as_date,
    bucket_start,
    coerce_granularity,
    month_offset,
    period_label,
)
from .transactions import (
    CustomerSnapshot,
    Transaction,
    TransactionContract,
    TransactionKind,
    snapshots_to_transactions,
)

__all__ = [
    "CohortMembers",
    "assign_cohort_labels",
    "group_into_cohorts",
    "CustomerSummary",
    "aggregate_customers",
    "summarise_customer",
    "InvalidGranularityError",
    "PeriodGranularity",
    "add_months",
    "as_date",
    "bucket_start",
    "coerce_granularity",
    "month_offset",
    "period_label",
    "CustomerSnapshot",
    "Transaction",
    "TransactionContract",
    "TransactionKind",
    "snapshots_to_transactions",
]
