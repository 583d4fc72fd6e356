"""Seeded generator for demo subscription revenue histories.

The generated transactions are fake and exist only to exercise the
retention pipeline without production data. They are inputs to the
analysis; nothing here produces retention values directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
import random
from typing import List, Optional

from revenue_cohorts.foundation.periods import add_months, month_offset
from revenue_cohorts.foundation.transactions import (
    CustomerSnapshot,
    Transaction,
    TransactionKind,
)


@dataclass(frozen=True)
class SubscriptionScenario:
    """Configuration for the subscription history generator.

    Attributes
    ----------
    churn_hazard: Monthly probability that an active customer churns.
    expansion_probability: Monthly probability of an upsell.
    contraction_probability: Monthly probability of a downgrade.
    expansion_range: Min/max fractional increase applied on expansion.
    contraction_range: Min/max fractional decrease applied on contraction.
    min_initial_revenue: Lower bound of the acquisition contract value.
    max_initial_revenue: Upper bound of the acquisition contract value.
    renew_annually: Emit a renewal event on each contract anniversary.
    seed: Optional RNG seed for reproducibility.
    """

    churn_hazard: float = 0.03
    expansion_probability: float = 0.05
    contraction_probability: float = 0.02
    expansion_range: tuple[float, float] = (0.10, 0.50)
    contraction_range: tuple[float, float] = (0.10, 0.30)
    min_initial_revenue: float = 5_000.0
    max_initial_revenue: float = 25_000.0
    renew_annually: bool = True
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("churn_hazard", "expansion_probability", "contraction_probability"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if self.min_initial_revenue <= 0 or self.min_initial_revenue > self.max_initial_revenue:
            raise ValueError(
                "initial revenue bounds must satisfy 0 < min_initial_revenue <= max_initial_revenue"
            )


BASELINE_SUBSCRIPTION_SCENARIO = SubscriptionScenario(seed=42)
HIGH_CHURN_SUBSCRIPTION_SCENARIO = SubscriptionScenario(
    churn_hazard=0.12, expansion_probability=0.02, seed=42
)
EXPANSION_HEAVY_SUBSCRIPTION_SCENARIO = SubscriptionScenario(
    churn_hazard=0.02, expansion_probability=0.15, expansion_range=(0.2, 0.8), seed=42
)


def _money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def generate_subscription_transactions(
    n_customers: int,
    start: date,
    end: date,
    *,
    scenario: Optional[SubscriptionScenario] = None,
) -> List[Transaction]:
    """Generate revenue histories for ``n_customers`` between ``start`` and ``end``.

    Each customer gets a ``new`` transaction on an acquisition date drawn
    uniformly from the window, then one lifecycle draw per following month:
    churn ends the history, otherwise the customer may expand, contract or
    (on contract anniversaries) renew at the current revenue.

    The same scenario seed always yields the same transactions, sorted by
    customer and date.
    """
    if start > end:
        raise ValueError("start date must be <= end date")
    if n_customers <= 0:
        return []

    scenario = scenario or SubscriptionScenario()
    rng = random.Random(scenario.seed)
    total_days = (end - start).days + 1

    transactions: List[Transaction] = []
    for i in range(n_customers):
        customer_id = f"CUST-{i + 1:04d}"
        acquired = start + timedelta(days=rng.randrange(total_days))
        revenue = _money(
            rng.uniform(scenario.min_initial_revenue, scenario.max_initial_revenue)
        )
        transactions.append(
            Transaction(customer_id, acquired, revenue, TransactionKind.NEW)
        )

        for months_after in range(1, month_offset(acquired, end) + 1):
            event_date = add_months(acquired, months_after)
            if event_date > end:
                break

            draw = rng.random()
            if draw < scenario.churn_hazard:
                transactions.append(
                    Transaction(
                        customer_id,
                        event_date,
                        Decimal("0"),
                        TransactionKind.CHURN,
                        previous_revenue_amount=revenue,
                    )
                )
                break

            previous = revenue
            draw -= scenario.churn_hazard
            if draw < scenario.expansion_probability:
                revenue = _money(float(revenue) * (1 + rng.uniform(*scenario.expansion_range)))
                kind = TransactionKind.EXPANSION
            elif draw < scenario.expansion_probability + scenario.contraction_probability:
                revenue = _money(
                    float(revenue) * (1 - rng.uniform(*scenario.contraction_range))
                )
                kind = TransactionKind.CONTRACTION
            elif scenario.renew_annually and months_after % 12 == 0:
                kind = TransactionKind.RENEWAL
            else:
                continue

            transactions.append(
                Transaction(
                    customer_id,
                    event_date,
                    revenue,
                    kind,
                    previous_revenue_amount=previous,
                )
            )

    transactions.sort(key=lambda t: (t.customer_id, t.effective_date))
    return transactions


def sample_snapshot_records() -> List[CustomerSnapshot]:
    """Small fixed snapshot dataset (account, close date, ARR) for demos."""
    rows = [
        ("CUST-001", date(2023, 1, 15), "12000"),
        ("CUST-002", date(2023, 1, 28), "8500"),
        ("CUST-003", date(2023, 2, 10), "15000"),
        ("CUST-004", date(2023, 2, 22), "6000"),
        ("CUST-005", date(2023, 3, 5), "22000"),
        ("CUST-006", date(2023, 4, 12), "9500"),
        ("CUST-007", date(2023, 4, 25), "18000"),
        ("CUST-008", date(2023, 5, 8), "11000"),
        ("CUST-009", date(2023, 6, 15), "7500"),
        ("CUST-010", date(2023, 7, 2), "13500"),
    ]
    return [
        CustomerSnapshot(customer_id, close_date, Decimal(amount))
        for customer_id, close_date, amount in rows
    ]
