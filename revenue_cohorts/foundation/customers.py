"""Customer-level aggregation of revenue transactions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from revenue_cohorts.foundation.periods import as_date
from revenue_cohorts.foundation.transactions import Transaction, TransactionKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerSummary:
    """Derived view of one customer's revenue history.

    Attributes
    ----------
    customer_id:
        Customer identifier shared by all of ``transactions``.
    first_transaction_date:
        Date of the earliest transaction; determines cohort membership.
    transactions:
        The customer's transactions in ascending ``effective_date`` order.
        Transactions sharing a date keep their input order.
    current_revenue:
        Revenue of the latest transaction, or 0 when the customer is inactive.
    is_active:
        False when the latest transaction is a churn or carries zero revenue.
    cohort_label:
        Label of the cohort the customer was assigned to, if any.
    """

    customer_id: str
    first_transaction_date: date
    transactions: tuple[Transaction, ...]
    current_revenue: Decimal
    is_active: bool
    cohort_label: str | None = None

    def first_new_transaction(self, *, positive_only: bool = False) -> Transaction | None:
        """Return the earliest ``new`` transaction, optionally requiring revenue > 0."""
        for txn in self.transactions:
            if txn.kind is not TransactionKind.NEW:
                continue
            if positive_only and txn.revenue_amount <= 0:
                continue
            return txn
        return None

    def latest_transaction_on_or_before(self, target: date) -> Transaction | None:
        """Return the last transaction effective on or before ``target``.

        A ``datetime`` target is compared by its calendar date.
        """
        target = as_date(target)
        latest = None
        for txn in self.transactions:
            if txn.effective_date > target:
                break
            latest = txn
        return latest


def summarise_customer(customer_id: str, transactions: Sequence[Transaction]) -> CustomerSummary:
    """Build a :class:`CustomerSummary` from one customer's transactions.

    ``transactions`` must be non-empty. They are sorted by effective date with
    a stable sort, so same-day events stay in the order they were supplied.
    """
    if not transactions:
        raise ValueError(f"Customer {customer_id} has no transactions")

    ordered = tuple(sorted(transactions, key=lambda txn: txn.effective_date))
    latest = ordered[-1]

    is_active = latest.kind is not TransactionKind.CHURN and latest.revenue_amount > 0
    current_revenue = latest.revenue_amount if is_active else Decimal("0")

    return CustomerSummary(
        customer_id=customer_id,
        first_transaction_date=ordered[0].effective_date,
        transactions=ordered,
        current_revenue=current_revenue,
        is_active=is_active,
    )


def aggregate_customers(transactions: Iterable[Transaction]) -> list[CustomerSummary]:
    """Group transactions by customer and derive each customer's status.

    Parameters
    ----------
    transactions:
        Validated transactions in any order.

    Returns
    -------
    list[CustomerSummary]
        One summary per distinct ``customer_id``, in order of first
        appearance in ``transactions``.

    Examples
    --------
    >>> from datetime import date
    >>> from decimal import Decimal
    >>> summaries = aggregate_customers([
    ...     Transaction("A", date(2023, 4, 1), Decimal("1500"), "expansion"),
    ...     Transaction("A", date(2023, 1, 1), Decimal("1000"), "new"),
    ... ])
    >>> summaries[0].first_transaction_date, summaries[0].current_revenue
    (datetime.date(2023, 1, 1), Decimal('1500'))
    """
    grouped: dict[str, list[Transaction]] = {}
    for txn in transactions:
        grouped.setdefault(txn.customer_id, []).append(txn)

    summaries = [
        summarise_customer(customer_id, customer_transactions)
        for customer_id, customer_transactions in grouped.items()
    ]

    active = sum(1 for summary in summaries if summary.is_active)
    logger.debug(
        f"Aggregated {sum(len(s.transactions) for s in summaries)} transactions into "
        f"{len(summaries)} customers ({active} active)"
    )
    return summaries
