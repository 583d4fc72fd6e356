"""Cohort assignment utilities for customer segmentation.

Customers are grouped into acquisition cohorts by the calendar period
(month, quarter or year) containing their first transaction. Membership is
fixed for the run: later transactions never move a customer to a different
cohort.

Quick Start
-----------
>>> from datetime import date
>>> from decimal import Decimal
>>> from revenue_cohorts.foundation.transactions import Transaction
>>> from revenue_cohorts.foundation.customers import aggregate_customers
>>> from revenue_cohorts.foundation.cohorts import group_into_cohorts
>>>
>>> customers = aggregate_customers([
...     Transaction("C1", date(2023, 1, 15), Decimal("100")),
...     Transaction("C2", date(2023, 2, 20), Decimal("200")),
... ])
>>> cohorts = group_into_cohorts(customers, "quarter")
>>> list(cohorts)
['Q1 2023']
>>> [c.customer_id for c in cohorts["Q1 2023"].customers]
['C1', 'C2']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Sequence

from revenue_cohorts.foundation.customers import CustomerSummary
from revenue_cohorts.foundation.periods import (
    PeriodGranularity,
    bucket_start,
    coerce_granularity,
    period_label,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CohortMembers:
    """Customers acquired within one cohort period.

    Attributes
    ----------
    label:
        Display label of the period (e.g. ``"2023-01"``, ``"Q1 2023"``).
    bucket_start:
        First day of the acquisition period.
    customers:
        Member summaries, each carrying ``cohort_label == label``, in order
        of first appearance.
    """

    label: str
    bucket_start: date
    customers: tuple[CustomerSummary, ...]


def assign_cohort_labels(
    customers: Sequence[CustomerSummary],
    granularity: PeriodGranularity | str,
) -> list[CustomerSummary]:
    """Return copies of ``customers`` with ``cohort_label`` populated.

    The input summaries are not modified.

    Raises
    ------
    InvalidGranularityError
        If ``granularity`` is not a supported value.
    """
    granularity = coerce_granularity(granularity)
    labelled: list[CustomerSummary] = []
    for customer in customers:
        start = bucket_start(customer.first_transaction_date, granularity)
        labelled.append(replace(customer, cohort_label=period_label(start, granularity)))
    return labelled


def group_into_cohorts(
    customers: Sequence[CustomerSummary],
    granularity: PeriodGranularity | str,
) -> dict[str, CohortMembers]:
    """Partition customers into acquisition cohorts.

    Parameters
    ----------
    customers:
        Customer summaries, typically from
        :func:`~revenue_cohorts.foundation.customers.aggregate_customers`.
    granularity:
        Cohort period size.

    Returns
    -------
    dict[str, CohortMembers]
        Mapping of cohort label to members. Cohorts appear in the order in
        which their first member was encountered; every customer belongs to
        exactly one cohort.

    Raises
    ------
    InvalidGranularityError
        If ``granularity`` is not a supported value.
    """
    granularity = coerce_granularity(granularity)

    starts: dict[str, date] = {}
    members: dict[str, list[CustomerSummary]] = {}
    for customer in assign_cohort_labels(customers, granularity):
        label = customer.cohort_label
        if label not in members:
            starts[label] = bucket_start(customer.first_transaction_date, granularity)
            members[label] = []
        members[label].append(customer)

    logger.debug(
        f"Grouped {len(customers)} customers into {len(members)} "
        f"{granularity.value} cohorts"
    )
    return {
        label: CohortMembers(
            label=label, bucket_start=starts[label], customers=tuple(cohort_customers)
        )
        for label, cohort_customers in members.items()
    }
