"""Cohort net revenue retention (NRR) analysis.

This module tracks how much recurring revenue each acquisition cohort keeps
over the months following acquisition. For every cohort and every month
offset up to a fixed horizon it reports the revenue the cohort's customers
are paying as of the first day of that month, optionally excluding expansion
above each customer's original contract value.

Quick Start
-----------
>>> from datetime import date
>>> from decimal import Decimal
>>> from revenue_cohorts.foundation.transactions import Transaction
>>> from revenue_cohorts.analyses.retention import AnalysisSettings, analyze
>>>
>>> transactions = [
...     Transaction("A", date(2023, 1, 1), Decimal("1000"), "new"),
...     Transaction("A", date(2023, 4, 1), Decimal("1500"), "expansion"),
... ]
>>> report = analyze(transactions, "quarter", AnalysisSettings())
>>> cohort = report.cohorts[0]
>>> cohort.label, cohort.retention_by_month[2], cohort.retention_by_month[3]
('Q1 2023', Decimal('1000'), Decimal('1500'))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Iterable, Mapping

from revenue_cohorts.foundation.cohorts import CohortMembers, group_into_cohorts
from revenue_cohorts.foundation.customers import CustomerSummary, aggregate_customers
from revenue_cohorts.foundation.periods import (
    PeriodGranularity,
    add_months,
    coerce_granularity,
)
from revenue_cohorts.foundation.transactions import (
    CustomerSnapshot,
    Transaction,
    TransactionKind,
    snapshots_to_transactions,
)

logger = logging.getLogger(__name__)

#: Last month offset tracked for every cohort.
RETENTION_HORIZON_MONTHS = 24

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def quantize_half_up(value: Decimal, exponent: Decimal) -> Decimal:
    """Round ``value`` half-up to the places of ``exponent``.

    The working precision grows with the magnitude of ``value`` so very large
    ratios round instead of raising ``decimal.InvalidOperation``.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - exponent.as_tuple().exponent + 2)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class AnalysisSettings:
    """Toggles controlling how retained revenue is counted.

    Attributes
    ----------
    include_expansion_revenue:
        When False, a customer's revenue is capped at their original
        acquisition amount so the curve shows gross retention only.
    exclude_churned_accounts:
        Drop churned accounts from retained revenue. Churned customers
        already contribute zero in the transaction-driven calculation, so
        this has no additional effect on them there.
    """

    include_expansion_revenue: bool = True
    exclude_churned_accounts: bool = False

    @property
    def is_adjusted(self) -> bool:
        """True when the settings deviate from standard NRR."""
        return not self.include_expansion_revenue or self.exclude_churned_accounts


@dataclass(frozen=True)
class Cohort:
    """Retention results for one acquisition cohort.

    Attributes
    ----------
    label:
        Cohort label (e.g. ``"Q1 2023"``).
    bucket_start:
        First day of the acquisition period.
    initial_revenue:
        Sum of each member's first ``new`` transaction revenue.
    customers:
        Member customer summaries.
    retention_by_month:
        Revenue retained by the cohort at each month offset, 0 through the
        horizon inclusive. Offset 0 always equals ``initial_revenue``.
    """

    label: str
    bucket_start: date
    initial_revenue: Decimal
    customers: tuple[CustomerSummary, ...]
    retention_by_month: Mapping[int, Decimal]

    def __post_init__(self) -> None:
        """Validate cohort retention constraints."""
        if self.retention_by_month.get(0) != self.initial_revenue:
            raise ValueError(
                f"retention_by_month[0] must equal initial_revenue for cohort "
                f"{self.label}: got {self.retention_by_month.get(0)} vs "
                f"{self.initial_revenue}"
            )
        negative = [m for m, value in self.retention_by_month.items() if value < 0]
        if negative:
            raise ValueError(
                f"retention_by_month must be >= 0, cohort {self.label} is negative "
                f"at offsets {sorted(negative)}"
            )

    @property
    def customer_count(self) -> int:
        return len(self.customers)


@dataclass(frozen=True)
class AnalysisReport:
    """Cohort retention table produced by :func:`analyze`.

    Attributes
    ----------
    cohorts:
        Cohorts ordered by ascending ``bucket_start``.
    max_months:
        Largest month offset at which any cohort retained revenue, capped at
        the horizon. 0 when no cohort has revenue after acquisition.
    granularity:
        Cohort granularity used to build the report.
    settings:
        Analysis settings used to build the report.
    """

    cohorts: tuple[Cohort, ...]
    max_months: int
    granularity: PeriodGranularity = PeriodGranularity.QUARTER
    settings: AnalysisSettings = field(default_factory=AnalysisSettings)

    def __post_init__(self) -> None:
        """Validate report constraints."""
        if not 0 <= self.max_months <= RETENTION_HORIZON_MONTHS:
            raise ValueError(
                f"max_months must be between 0 and {RETENTION_HORIZON_MONTHS}, "
                f"got {self.max_months}"
            )
        starts = [cohort.bucket_start for cohort in self.cohorts]
        if starts != sorted(starts):
            raise ValueError("cohorts must be ordered by bucket_start")

    def cohort(self, label: str) -> Cohort:
        """Return the cohort named ``label``."""
        for cohort in self.cohorts:
            if cohort.label == label:
                return cohort
        raise KeyError(label)


def initial_revenue(customers: Iterable[CustomerSummary]) -> Decimal:
    """Sum each customer's first ``new`` transaction revenue.

    Customers without a ``new`` transaction contribute 0.
    """
    total = _ZERO
    for customer in customers:
        first_new = customer.first_new_transaction()
        if first_new is not None:
            total += first_new.revenue_amount
    return total


def customer_revenue_at(
    customer: CustomerSummary,
    target_date: date,
    settings: AnalysisSettings,
) -> Decimal:
    """Revenue a customer contributes as of ``target_date``.

    The latest transaction effective on or before ``target_date`` sets the
    revenue level. A churn zeroes the contribution whichever way
    ``settings.exclude_churned_accounts`` is set. With expansion excluded,
    revenue above the customer's first positive ``new`` amount is clipped.
    The result is never negative.
    """
    latest = customer.latest_transaction_on_or_before(target_date)
    if latest is None:
        return _ZERO

    if latest.kind is TransactionKind.CHURN:
        # TODO: confirm with product whether exclude_churned_accounts should
        # also remove churned members from the cohort base.
        return _ZERO

    revenue = latest.revenue_amount
    if not settings.include_expansion_revenue:
        original = customer.first_new_transaction(positive_only=True)
        if original is not None:
            revenue = min(revenue, original.revenue_amount)

    return max(revenue, _ZERO)


def calculate_cohort_retention(
    members: CohortMembers,
    settings: AnalysisSettings,
    horizon: int = RETENTION_HORIZON_MONTHS,
) -> dict[int, Decimal]:
    """Compute retained revenue for offsets 0 through ``horizon``.

    Offset ``m`` is evaluated on the first day of the month ``m`` months
    after the cohort's bucket start. Offset 0 is the cohort's initial
    revenue.
    """
    retention = {0: initial_revenue(members.customers)}
    for offset in range(1, horizon + 1):
        target_date = add_months(members.bucket_start, offset)
        retention[offset] = sum(
            (
                customer_revenue_at(customer, target_date, settings)
                for customer in members.customers
            ),
            _ZERO,
        )
    return retention


def _last_revenue_month(retention: Mapping[int, Decimal]) -> int:
    months = [offset for offset, value in retention.items() if offset > 0 and value > 0]
    return max(months, default=0)


def build_report(
    cohort_members: Iterable[CohortMembers],
    granularity: PeriodGranularity | str,
    settings: AnalysisSettings,
) -> AnalysisReport:
    """Compute retention for each cohort and assemble the sorted report."""
    granularity = coerce_granularity(granularity)

    cohorts: list[Cohort] = []
    max_months = 0
    for members in cohort_members:
        retention = calculate_cohort_retention(members, settings)
        max_months = max(max_months, _last_revenue_month(retention))

        if retention[0] == 0:
            logger.warning(
                f"Cohort {members.label} has no initial revenue "
                f"({len(members.customers)} customers without a 'new' transaction)"
            )

        cohorts.append(
            Cohort(
                label=members.label,
                bucket_start=members.bucket_start,
                initial_revenue=retention[0],
                customers=members.customers,
                retention_by_month=retention,
            )
        )

    cohorts.sort(key=lambda cohort: cohort.bucket_start)
    return AnalysisReport(
        cohorts=tuple(cohorts),
        max_months=min(max_months, RETENTION_HORIZON_MONTHS),
        granularity=granularity,
        settings=settings,
    )


def analyze(
    transactions: Iterable[Transaction],
    granularity: PeriodGranularity | str = PeriodGranularity.QUARTER,
    settings: AnalysisSettings | None = None,
) -> AnalysisReport:
    """Run the cohort NRR analysis over a transaction history.

    Parameters
    ----------
    transactions:
        Validated transactions for any number of customers, in any order.
    granularity:
        Cohort period size (``"month"``, ``"quarter"`` or ``"year"``).
    settings:
        Counting toggles. Defaults to standard NRR (expansion included,
        churned accounts not excluded).

    Returns
    -------
    AnalysisReport
        Cohorts ordered by acquisition period with retention by month.
        An empty input yields an empty report with ``max_months == 0``.

    Raises
    ------
    InvalidGranularityError
        If ``granularity`` is not a supported value.

    Notes
    -----
    The calculation is a pure function of its arguments: the same inputs
    always produce equal reports.
    """
    granularity = coerce_granularity(granularity)
    settings = settings or AnalysisSettings()

    customers = aggregate_customers(transactions)
    cohort_members = group_into_cohorts(customers, granularity)
    report = build_report(cohort_members.values(), granularity, settings)

    logger.info(
        f"Analyzed {len(customers)} customers in {len(report.cohorts)} "
        f"{granularity.value} cohorts (max_months={report.max_months}, "
        f"adjusted={settings.is_adjusted})"
    )
    return report


def analyze_snapshots(
    snapshots: Iterable[CustomerSnapshot],
    granularity: PeriodGranularity | str = PeriodGranularity.QUARTER,
    settings: AnalysisSettings | None = None,
) -> AnalysisReport:
    """Run :func:`analyze` over legacy snapshot records.

    Each snapshot becomes a single ``new`` transaction, so customers retain
    their snapshot revenue for every month after acquisition.
    """
    return analyze(snapshots_to_transactions(snapshots), granularity, settings)


def nrr_percentage(cohort: Cohort, month: int) -> Decimal | None:
    """Retained revenue at ``month`` as a percentage of initial revenue.

    Month 0 is 100 by definition. Returns None for later months when the
    cohort has no initial revenue to compare against.

    Examples
    --------
    >>> # cohort with initial revenue 1000 and 1500 retained at month 3
    >>> nrr_percentage(cohort, 3)  # doctest: +SKIP
    Decimal('150.00')
    """
    if month == 0:
        return Decimal("100.00")
    if cohort.initial_revenue == 0:
        return None
    value = cohort.retention_by_month.get(month, _ZERO)
    return quantize_half_up(value / cohort.initial_revenue * _HUNDRED, Decimal("0.01"))


def calculate_nrr_curve(cohort: Cohort, max_months: int) -> dict[int, Decimal | None]:
    """Map each month offset 0..``max_months`` to its NRR percentage."""
    return {month: nrr_percentage(cohort, month) for month in range(max_months + 1)}


def retention_band(percentage: Decimal | float | None) -> str:
    """Bucket an NRR percentage into a qualitative band for display."""
    if percentage is None:
        return "none"
    if percentage >= 100:
        return "expansion"
    if percentage >= 80:
        return "strong"
    if percentage >= 60:
        return "moderate"
    if percentage >= 40:
        return "weak"
    if percentage >= 20:
        return "poor"
    if percentage > 0:
        return "critical"
    return "none"
