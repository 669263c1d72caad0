#!/usr/bin/env python3
# services/journal/main.py
"""Print a JSON performance report for a file of journal trades."""

import argparse
import json
import sys
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from pathlib import Path

# ------------------------------------------------------------
# 1) Ensure repo root is on sys.path
# ------------------------------------------------------------
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# ------------------------------------------------------------
# 2) Imports
# ------------------------------------------------------------
from shared.config import load_journal_config
from shared.logutil import LogUtil

from services.journal.intel.performance_core import AnalyticsConfig, TradeJournal, ViewMode

SERVICE_NAME = "journal"


def _json_default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"not JSON serializable: {type(value).__name__}")


def load_records(path: Path) -> list:
    """Trades file: a JSON list of records, or an object with a 'trades' list."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of trade records")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute journal performance analytics from a JSON trade file"
    )
    parser.add_argument(
        "--trades",
        required=True,
        help="Path to a JSON file of trade records",
    )
    parser.add_argument(
        "--view",
        choices=[m.value for m in ViewMode],
        default=ViewMode.ALL.value,
        help="Reporting view (default: all)",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Anchor date for the view, YYYY-MM-DD",
    )
    parser.add_argument(
        "--month",
        default=None,
        help="Also emit the calendar grid for this month, YYYY-MM",
    )
    parser.add_argument(
        "--balance",
        type=float,
        default=None,
        help="Account balance for the equity curve (default: JOURNAL_ACCOUNT_BALANCE)",
    )
    parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        default=None,
        help="Reference time for trade frequency (default: now, UTC)",
    )
    return parser


def run(args, logger) -> dict:
    config = load_journal_config(
        overrides={"JOURNAL_ACCOUNT_BALANCE": args.balance},
        logger=logger,
    )
    logger.configure_from_config(config)
    analytics_config = AnalyticsConfig.from_config(config)

    journal = TradeJournal.from_records(
        load_records(Path(args.trades)), analytics_config, logger
    )

    output = {
        "report": asdict(journal.report(args.view, args.date)),
        "dashboard": asdict(journal.dashboard(args.as_of)),
    }
    if args.month:
        output["calendar"] = asdict(journal.calendar(f"{args.month}-01"))
    return output


def main(argv=None) -> int:
    logger = LogUtil(SERVICE_NAME, stream=sys.stderr)
    args = build_parser().parse_args(argv)

    try:
        output = run(args, logger)
    except (OSError, ValueError) as e:
        logger.error(f"report failed: {e}")
        return 1

    print(json.dumps(output, indent=2, default=_json_default))
    logger.ok("report complete", emoji="📊")
    return 0


if __name__ == "__main__":
    sys.exit(main())
