"""
Command line interface for the A/B test decision engine.

Usage:
    python -m abadvisor.cli decide --metric ctr --variant A:1000:50 --variant B:1100:66
    python -m abadvisor.cli decide --csv variants.csv --json
    python -m abadvisor.cli report --csv variants.csv --template brief --format text
    python -m abadvisor.cli qa
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from abadvisor.core.logging import configure_logging
from abadvisor.models.schemas import DecisionRequest
from abadvisor.services.experiments.decision import DecisionResult, Metric, decide
from abadvisor.services.experiments.formatting import (
    format_counts,
    format_lift_signed,
    format_p,
    format_pct_smart,
    format_pp,
)
from abadvisor.services.experiments.qa import run_qa_checks
from abadvisor.services.reports.generator import OUTPUT_FORMATS, get_report_generator
from abadvisor.services.reports.templates import TEMPLATES

CSV_COLUMNS = ("name", "traffic", "successes")


def parse_variant_spec(spec: str) -> Dict[str, object]:
    """Parse ``NAME:TRAFFIC:SUCCESSES``; the name itself may contain colons."""
    parts = spec.rsplit(":", 2)
    if len(parts) != 3:
        raise ValueError(f"Invalid variant '{spec}', expected NAME:TRAFFIC:SUCCESSES")

    name, traffic, successes = parts
    try:
        return {"name": name, "traffic": int(traffic), "successes": int(successes)}
    except ValueError:
        raise ValueError(f"Invalid counts in variant '{spec}', expected integers")


def load_variants_csv(path: Path) -> List[Dict[str, object]]:
    # Read as text: names like "NA" or "1" must survive untouched
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    missing = [col for col in CSV_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"CSV {path} is missing required columns: {missing}")

    df = df[list(CSV_COLUMNS)]
    if any(df[col].str.strip().eq("").any() for col in CSV_COLUMNS):
        raise ValueError(f"CSV {path} has empty cells in {list(CSV_COLUMNS)}")

    try:
        return [
            {"name": row.name, "traffic": int(row.traffic), "successes": int(row.successes)}
            for row in df.itertuples(index=False)
        ]
    except ValueError:
        raise ValueError(f"CSV {path} has non-integer traffic or successes")


def build_request(args: argparse.Namespace) -> DecisionRequest:
    if args.csv:
        variants = load_variants_csv(Path(args.csv))
    else:
        variants = [parse_variant_spec(spec) for spec in args.variant or []]

    # Same validation layer the HTTP API uses
    return DecisionRequest(metric=args.metric, variants=variants)


def print_result(result: DecisionResult) -> None:
    print(f"\n{result.summary.text}\n")
    print(f"Test:        {result.test_name}")
    print(f"Why:         {result.test_why}")
    print(f"P-value:     {format_p(result.p_value)}")
    print(f"Significant: {'yes' if result.significant else 'no'}")
    print(f"Winner:      {result.winner or '-'}")
    print(f"Leader:      {result.leader or '-'}")
    if result.df is not None:
        print(f"DF:          {result.df}")
    if result.note:
        print(f"Note:        {result.note}")
    if result.two_variant is not None:
        print(
            f"Diff CI:     [{format_pp(result.two_variant.ci_low)}, "
            f"{format_pp(result.two_variant.ci_high)}]"
        )

    print()
    print(f"{'Variant':<12} {'Rate':>8} {'Count':>16} {'95% CI':>20} {'Lift':>10}")
    print("-" * 70)
    for v in result.variants:
        ci = f"{format_pct_smart(v.ci_low)} - {format_pct_smart(v.ci_high)}"
        print(
            f"{v.name:<12} {format_pct_smart(v.rate):>8} "
            f"{format_counts(v.successes, v.traffic):>16} {ci:>20} "
            f"{format_lift_signed(v.lift_rel):>10}"
        )
    print()


def cmd_decide(args: argparse.Namespace) -> int:
    """Run the decision engine on the given variants."""
    request = build_request(args)
    result = decide(request.to_input())

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_result(result)
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """Generate a report for the given variants."""
    request = build_request(args)
    result = decide(request.to_input())

    report = get_report_generator().generate(
        result, request.metric, template_type=args.template, output_format=args.format
    )
    print(report.content, end="")
    return 0


def cmd_qa(args: argparse.Namespace) -> int:
    """Run the built-in QA scenarios."""
    report = run_qa_checks()

    print("\nQA Scenarios")
    print("============\n")
    for case in report.results:
        status = "PASS" if case.passed else "FAIL"
        print(f"  [{status}] {case.case_name}")
        if case.result is not None:
            print(f"         {case.result.test_name}, p = {format_p(case.result.p_value)}")
        if case.error:
            print(f"         error: {case.error}")
        for check in case.checks:
            if not check.passed:
                print(f"         failed check: {check.name}")

    print(f"\nPassed: {report.passed}  Failed: {report.failed}\n")
    return 0 if report.ok else 1


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--metric",
        choices=[m.value for m in Metric],
        default=Metric.CONVERSION.value,
        help="Metric label (default: conversion)",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--variant",
        action="append",
        metavar="NAME:TRAFFIC:SUCCESSES",
        help="Variant counts; repeat per variant, control first",
    )
    source.add_argument(
        "--csv",
        type=str,
        help="CSV file with name,traffic,successes columns (control first)",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="A/B Test Advisor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Two variants:
    python -m abadvisor.cli decide --variant A:10000:500 --variant B:10000:560

  Three variants from a CSV, as JSON:
    python -m abadvisor.cli decide --csv variants.csv --json

  Plain text report:
    python -m abadvisor.cli report --variant A:100:5 --variant B:120:9 --format text

  Run QA scenarios:
    python -m abadvisor.cli qa
        """,
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    decide_parser = subparsers.add_parser("decide", help="Decide which variant wins")
    _add_input_arguments(decide_parser)
    decide_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    decide_parser.set_defaults(func=cmd_decide)

    report_parser = subparsers.add_parser("report", help="Generate a results report")
    _add_input_arguments(report_parser)
    report_parser.add_argument(
        "--template",
        choices=list(TEMPLATES.keys()),
        default="full",
        help="Report template (default: full)",
    )
    report_parser.add_argument(
        "--format",
        choices=list(OUTPUT_FORMATS),
        default="markdown",
        help="Output format (default: markdown)",
    )
    report_parser.set_defaults(func=cmd_report)

    qa_parser = subparsers.add_parser("qa", help="Run built-in QA scenarios")
    qa_parser.set_defaults(func=cmd_qa)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        configure_logging(args.log_level)
        return args.func(args)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
