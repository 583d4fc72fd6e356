"""Cohort net revenue retention demo with synthetic subscription data.

This example demonstrates the full retention pipeline:
1. Generate synthetic subscription transactions
2. Run the cohort NRR analysis with standard and adjusted settings
3. Print a quarterly NRR heatmap as a DataFrame
4. Export the adjusted report to CSV
"""

from datetime import date

from revenue_cohorts.analyses.retention import (
    AnalysisSettings,
    analyze,
    calculate_nrr_curve,
    retention_band,
)
from revenue_cohorts.pandas import report_to_dataframe
from revenue_cohorts.reporting import default_export_filename, export_report_csv
from revenue_cohorts.synthetic import (
    BASELINE_SUBSCRIPTION_SCENARIO,
    generate_subscription_transactions,
)


def main():
    """Demonstrate the cohort NRR pipeline."""
    print("=" * 80)
    print("Cohort Net Revenue Retention Demo")
    print("=" * 80)

    print("\n📊 Step 1: Generating synthetic subscription histories...")
    transactions = generate_subscription_transactions(
        300,
        date(2022, 1, 1),
        date(2023, 12, 31),
        scenario=BASELINE_SUBSCRIPTION_SCENARIO,
    )
    print(f"✓ Generated {len(transactions):,} transactions")

    print("\n📈 Step 2: Running standard NRR analysis...")
    standard = analyze(transactions, "quarter", AnalysisSettings())
    print(f"✓ {len(standard.cohorts)} cohorts, tracked up to month {standard.max_months}")

    for cohort in standard.cohorts:
        curve = calculate_nrr_curve(cohort, min(12, standard.max_months))
        month_12 = curve.get(12)
        print(
            f"  {cohort.label:<8} customers={cohort.customer_count:>3} "
            f"initial=${cohort.initial_revenue:>12,.2f} "
            f"month 12 NRR={month_12 if month_12 is not None else 'n/a'}% "
            f"({retention_band(month_12)})"
        )

    print("\n🔥 Step 3: NRR heatmap (first 12 months)...")
    heatmap = report_to_dataframe(standard, value="nrr").set_index("cohort")
    print(heatmap.filter(like="month_").iloc[:, :13].round(1).to_string())

    print("\n💾 Step 4: Exporting adjusted NRR (expansion excluded)...")
    adjusted = analyze(
        transactions, "quarter", AnalysisSettings(include_expansion_revenue=False)
    )
    filename = default_export_filename(adjusted)
    export_report_csv(adjusted, filename)
    print(f"✓ Wrote {filename}")


if __name__ == "__main__":
    main()
