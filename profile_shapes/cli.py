# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to run the report.
#   This is how operators interact with the system.
#
# COMMANDS:
# ---------
# 1. Ranked report of inefficient query shapes:
#    python -m profile_shapes.cli report
#    python -m profile_shapes.cli report --timespan 3600 --limit 20
#    python -m profile_shapes.cli report --all --json
#
# 2. List every flagged record individually:
#    python -m profile_shapes.cli scan --mode mismatch
#
# 3. Show profiler settings and active filters:
#    python -m profile_shapes.cli status
#
# EXIT CODES:
# -----------
#   0 → report produced (an empty report is still a success)
#   1 → connection or stream failure, nothing reported
#
# ==============================================

import argparse
import contextlib
import sys
from dataclasses import replace
from typing import Optional

from pymongo.errors import PyMongoError

from profile_shapes.analysis.decision import AnalyzableMode
from profile_shapes.config import AppConfig, get_config
from profile_shapes.errors import ProfileStreamError
from profile_shapes.pipeline import ReportPipeline
from profile_shapes.report.summary import render_json, render_table, summarize


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="profile-shapes",
        description="Rank MongoDB query shapes that examine far more documents than they return"
    )
    parser.add_argument("--database", default=None, help="Database to read system.profile from")
    parser.add_argument(
        "--timespan", type=int, default=None,
        help="Only read profiler records from the last N seconds (0 = all)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    report_parser = sub.add_parser("report", help="Ranked report of inefficient query shapes")
    report_parser.add_argument(
        "--all", action="store_true",
        help="Include perfectly selective shapes (average score 0)"
    )
    report_parser.add_argument("--limit", type=int, default=None, help="Show at most N shapes")
    report_parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    scan_parser = sub.add_parser("scan", help="List every flagged profiler record")
    scan_parser.add_argument(
        "--mode",
        choices=[mode.value for mode in AnalyzableMode],
        default=AnalyzableMode.OVER_EXAMINED.value,
        help="Which examined/returned relationship to flag"
    )

    sub.add_parser("status", help="Show profiler level and active filters")

    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a copy of config with command-line overrides applied."""
    mongo = config.mongo
    profile = config.profile
    report = config.report

    if args.database and args.database != mongo.database:
        # Keep the default "skip our own profiler namespace" filter pointed at the new database
        if profile.excluded_namespace == f"{mongo.database}.system.profile":
            profile = replace(profile, excluded_namespace=f"{args.database}.system.profile")
        mongo = replace(mongo, database=args.database)
    if args.timespan is not None:
        profile = replace(profile, timespan_seconds=args.timespan)
    if getattr(args, "all", False):
        report = replace(report, problems_only=False)
    if getattr(args, "limit", None) is not None:
        report = replace(report, limit=args.limit)

    return replace(config, mongo=mongo, profile=profile, report=report)


def _run_report(pipeline: ReportPipeline, as_json: bool) -> int:
    if as_json:
        # Keep stdout clean for the JSON document
        with contextlib.redirect_stdout(sys.stderr):
            result = pipeline.run_report()
        print(render_json(summarize(result.cohorts), result.to_dict()))
        return 0

    result = pipeline.run_report()
    print()
    print(render_table(summarize(result.cohorts)))
    return 0


def _run_scan(pipeline: ReportPipeline, mode: str) -> int:
    flagged = 0
    for entry in pipeline.scan(AnalyzableMode(mode)):
        print(entry)
        print()
        flagged += 1
    print(f"📊 {flagged} records flagged ({mode})")
    return 0


def _run_status(pipeline: ReportPipeline) -> int:
    status = pipeline.get_status()
    for key, value in status.items():
        print(f"   → {key}: {value}")
    return 0


def main(argv: Optional[list] = None, pipeline: Optional[ReportPipeline] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if pipeline is None:
        pipeline = ReportPipeline(apply_overrides(get_config(), args))

    try:
        with pipeline:
            if args.command == "report":
                return _run_report(pipeline, args.json)
            if args.command == "scan":
                return _run_scan(pipeline, args.mode)
            if args.command == "status":
                return _run_status(pipeline)
    except ProfileStreamError as e:
        print(f"✗ Report aborted, profiler stream failed: {e}", file=sys.stderr)
        return 1
    except PyMongoError as e:
        print(f"✗ MongoDB error: {e}", file=sys.stderr)
        return 1

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
