"""Tests for the synthetic subscription history generator."""

from datetime import date

import pytest

from revenue_cohorts.foundation.customers import aggregate_customers
from revenue_cohorts.foundation.transactions import TransactionKind
from revenue_cohorts.synthetic import (
    BASELINE_SUBSCRIPTION_SCENARIO,
    HIGH_CHURN_SUBSCRIPTION_SCENARIO,
    SubscriptionScenario,
    generate_subscription_transactions,
    sample_snapshot_records,
)

START = date(2022, 1, 1)
END = date(2023, 12, 31)


def test_same_seed_is_reproducible():
    first = generate_subscription_transactions(50, START, END, scenario=BASELINE_SUBSCRIPTION_SCENARIO)
    second = generate_subscription_transactions(50, START, END, scenario=BASELINE_SUBSCRIPTION_SCENARIO)
    assert first == second


def test_different_seeds_differ():
    first = generate_subscription_transactions(50, START, END, scenario=SubscriptionScenario(seed=1))
    second = generate_subscription_transactions(50, START, END, scenario=SubscriptionScenario(seed=2))
    assert first != second


def test_each_customer_starts_with_new_transaction():
    transactions = generate_subscription_transactions(
        40, START, END, scenario=BASELINE_SUBSCRIPTION_SCENARIO
    )
    customers = aggregate_customers(transactions)
    assert len(customers) == 40
    for customer in customers:
        assert customer.transactions[0].kind is TransactionKind.NEW
        assert customer.transactions[0].revenue_amount > 0
        new_count = sum(1 for t in customer.transactions if t.kind is TransactionKind.NEW)
        assert new_count == 1


def test_dates_stay_in_window_and_amounts_non_negative():
    transactions = generate_subscription_transactions(
        60, START, END, scenario=HIGH_CHURN_SUBSCRIPTION_SCENARIO
    )
    assert all(START <= t.effective_date <= END for t in transactions)
    assert all(t.revenue_amount >= 0 for t in transactions)


def test_churn_ends_history():
    transactions = generate_subscription_transactions(
        80, START, END, scenario=HIGH_CHURN_SUBSCRIPTION_SCENARIO
    )
    customers = aggregate_customers(transactions)
    churned = 0
    for customer in customers:
        kinds = [t.kind for t in customer.transactions]
        if TransactionKind.CHURN in kinds:
            churned += 1
            assert kinds.index(TransactionKind.CHURN) == len(kinds) - 1
            assert customer.transactions[-1].revenue_amount == 0
    assert churned > 0


def test_no_customers():
    assert generate_subscription_transactions(0, START, END) == []


def test_invalid_window():
    with pytest.raises(ValueError, match="start date must be <= end date"):
        generate_subscription_transactions(5, END, START)


def test_invalid_scenario():
    with pytest.raises(ValueError, match="churn_hazard"):
        SubscriptionScenario(churn_hazard=1.5)
    with pytest.raises(ValueError, match="initial revenue bounds"):
        SubscriptionScenario(min_initial_revenue=100, max_initial_revenue=10)


def test_sample_snapshot_records():
    snapshots = sample_snapshot_records()
    assert len(snapshots) == 10
    assert snapshots[0].customer_id == "CUST-001"
    assert len({s.customer_id for s in snapshots}) == 10
