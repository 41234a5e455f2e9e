"""Ad report generator entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

from adreport.application.reporting.metrics import fmt_count, fmt_krw, fmt_pct
from adreport.application.report_service import generate_report, summarize_totals
from adreport.domain.errors import AdReportError
from adreport.domain.models import AggregateTotals, DocumentOutcome, DocumentRole, ReportFamily
from adreport.infrastructure.gemini_client import GeminiReportClient
from adreport.infrastructure.report_exporter import save_report_json, save_report_workbook
from adreport.ingestion import read_texts
from adreport.settings import Settings

FAMILY_ARGUMENTS: Dict[ReportFamily, List[DocumentRole]] = {
    ReportFamily.SEARCH: [DocumentRole.CAMPAIGN, DocumentRole.DEVICE, DocumentRole.KEYWORD],
    ReportFamily.DISPLAY: [DocumentRole.CAMPAIGN, DocumentRole.CREATIVE, DocumentRole.AUDIENCE],
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate an ad performance report from platform CSV exports.")
    parser.add_argument("--output-dir", default="output", help="Directory for report.json / report.xlsx")
    parser.add_argument("--totals-only", action="store_true", help="Print local totals without calling Gemini")
    parser.add_argument("--log-level", default="INFO")
    subparsers = parser.add_subparsers(dest="family", required=True)
    for family, roles in FAMILY_ARGUMENTS.items():
        sub = subparsers.add_parser(family.value, help=f"{family.value} ads report")
        for role in roles:
            sub.add_argument(f"--{role.value}", required=True, help=f"{role.value} report CSV export")
    return parser


def _print_totals(totals: AggregateTotals, outcomes: Dict[DocumentRole, DocumentOutcome]) -> None:
    print(f"Total Cost: {fmt_krw(totals.total_cost)}")
    print(f"Total Revenue: {fmt_krw(totals.total_revenue)}")
    print(f"Total Conversions: {fmt_count(totals.total_conversions)}")
    print(f"Total ROAS: {fmt_pct(totals.roas)}")
    coverage = totals.coverage
    print(
        f"Rows: used={coverage.used_rows} malformed={coverage.malformed_rows} "
        f"summary={coverage.summary_rows} defaulted_cells={coverage.defaulted_cells}"
    )
    for role, outcome in outcomes.items():
        if outcome.error is not None:
            print(f"[{role.value}] totals unavailable: {outcome.error}")


def run(args: argparse.Namespace) -> int:
    family = ReportFamily(args.family)
    paths = {role: Path(getattr(args, role.value)) for role in FAMILY_ARGUMENTS[family]}
    texts = read_texts(paths)

    if args.totals_only:
        totals, outcomes = summarize_totals(family, texts)
        print(json.dumps(totals.to_dict(), indent=2, ensure_ascii=False))
        _print_totals(totals, outcomes)
        return 0

    settings = Settings.from_env()
    client = GeminiReportClient.from_settings(settings)
    result = generate_report(family, texts, client, settings=settings)

    output_dir = Path(args.output_dir)
    output_json_path = output_dir / f"{family.value}_report.json"
    output_excel_path = output_dir / f"{family.value}_report.xlsx"
    save_report_json(output_json_path, result)
    excel_saved, excel_error_message = save_report_workbook(output_excel_path, result)

    _print_totals(result.totals, result.outcomes)
    timing_text = ", ".join(f"{name}={seconds:.3f}s" for name, seconds in result.stage_timings)
    print(f"Stage Timing: {timing_text}")
    print(f"Attempts: {result.attempts}")
    print(f"Saved JSON: {output_json_path}")
    if excel_saved:
        print(f"Saved Excel: {output_excel_path}")
    else:
        print(f"Excel save skipped (file may be open/locked): {excel_error_message}")
    return 0


def main(argv: List[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="[%(levelname)s] %(name)s: %(message)s")
    try:
        return run(args)
    except AdReportError as exc:
        print(f"{exc.user_message} ({exc})", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
