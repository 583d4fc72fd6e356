"""Command line entry points for the revenue cohorts toolkit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any

from revenue_cohorts.analyses.retention import (
    AnalysisSettings,
    analyze,
    analyze_snapshots,
)
from revenue_cohorts.foundation import PeriodGranularity, TransactionContract
from revenue_cohorts.reporting.exports import (
    export_report_csv,
    export_report_json,
    report_to_serialisable,
)
from revenue_cohorts.synthetic import (
    SubscriptionScenario,
    generate_subscription_transactions,
)

logger = logging.getLogger(__name__)


MAX_INPUT_BYTES = 25 * 1024 * 1024  # 25 MiB cap to avoid accidental OOM


def _load_records(path: Path) -> list[dict[str, Any]]:
    resolved = path.resolve()
    size = resolved.stat().st_size
    if size > MAX_INPUT_BYTES:
        raise ValueError(
            f"Input file {resolved} is {size} bytes; exceeds limit of {MAX_INPUT_BYTES} bytes"
        )
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if not isinstance(payload, list):
        raise ValueError("Expected a list of records in the input file")
    return payload


def _resolve_output(path: Path) -> Path:
    output_path = path.resolve()
    cwd = Path.cwd().resolve()
    try:
        output_path.relative_to(cwd)
    except ValueError:
        raise ValueError(
            f"Output path {output_path} must reside within the current working directory"
        )
    return output_path


def analyze_cohorts_cli(argv: list[str] | None = None) -> int:
    """Compute cohort net revenue retention from a JSON file of records.

    The input is a JSON list of transaction objects (customer_id,
    effective_date, revenue_amount, kind) or, with ``--snapshots``, of
    snapshot objects (customer_id, close_date, revenue_amount).

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        description="Compute cohort net revenue retention from revenue records"
    )
    parser.add_argument("input", type=Path, help="Path to JSON file with records")
    parser.add_argument(
        "--granularity",
        choices=[item.value for item in PeriodGranularity],
        default=PeriodGranularity.QUARTER.value,
        help="Cohort granularity (default: quarter)",
    )
    parser.add_argument(
        "--exclude-expansion",
        action="store_true",
        help="Cap each customer's revenue at their original acquisition amount",
    )
    parser.add_argument(
        "--exclude-churned",
        action="store_true",
        help="Exclude churned accounts from retained revenue",
    )
    parser.add_argument(
        "--snapshots",
        action="store_true",
        help="Treat input records as point-in-time customer snapshots",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Output path inside the current directory; .csv writes the spreadsheet "
        "export, anything else JSON. Defaults to JSON on stdout.",
    )

    args = parser.parse_args(argv)
    output = _resolve_output(args.output) if args.output is not None else None
    settings = AnalysisSettings(
        include_expansion_revenue=not args.exclude_expansion,
        exclude_churned_accounts=args.exclude_churned,
    )

    logger.info(f"Loading records from {args.input}")
    records = _load_records(args.input)
    if not records:
        logger.error("No records found in input file")
        return 1

    contract = TransactionContract()
    if args.snapshots:
        snapshots = contract.validate_snapshots(records)
        logger.info(f"Validated {len(snapshots)} snapshot records")
        report = analyze_snapshots(snapshots, args.granularity, settings)
    else:
        transactions = contract.validate_records(records)
        logger.info(f"Validated {len(transactions)} transactions")
        report = analyze(transactions, args.granularity, settings)

    if output is None:  # stdout fallback enables piping in shell usage.
        json.dump(report_to_serialisable(report), fp=sys.stdout, indent=2)
        print()
    elif output.suffix.lower() == ".csv":
        export_report_csv(report, output)
    else:
        export_report_json(report, output, metadata={"source": str(args.input)})

    logger.info(
        f"Report covers {len(report.cohorts)} cohorts, max_months={report.max_months}"
    )
    return 0


def generate_demo_data_cli(argv: list[str] | None = None) -> int:
    """Write synthetic subscription transactions to a JSON file."""

    parser = argparse.ArgumentParser(description=generate_demo_data_cli.__doc__)
    parser.add_argument("output", type=Path, help="Path of the JSON file to write")
    parser.add_argument("--customers", type=int, default=200)
    parser.add_argument("--start", type=date.fromisoformat, default=date(2022, 1, 1))
    parser.add_argument("--end", type=date.fromisoformat, default=date(2023, 12, 31))
    parser.add_argument("--churn-hazard", type=float, default=0.03)
    parser.add_argument("--seed", type=int, default=42)

    args = parser.parse_args(argv)
    output = _resolve_output(args.output)
    scenario = SubscriptionScenario(churn_hazard=args.churn_hazard, seed=args.seed)
    transactions = generate_subscription_transactions(
        args.customers, args.start, args.end, scenario=scenario
    )

    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as fh:
        json.dump(TransactionContract().to_serialisable(transactions), fh, indent=2)

    logger.info(f"Wrote {len(transactions)} synthetic transactions to {output}")
    return 0


def main() -> None:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    raise SystemExit(analyze_cohorts_cli())


def demo_data_main() -> None:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    raise SystemExit(generate_demo_data_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
