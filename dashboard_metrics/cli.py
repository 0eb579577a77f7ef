"""Rebase an exported dashboard document from the command line."""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import DEFAULT_DATA_PATH
from .errors import InsufficientDataError, InvalidDataError
from .loader import get_available_years, load_dashboard_data
from .rebase import rebase_dashboard_data

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rebase a backtest dashboard dataset to a start year.")
    parser.add_argument(
        "--data",
        type=Path,
        default=DEFAULT_DATA_PATH,
        help="Dashboard JSON produced by the export pipeline.",
    )
    parser.add_argument(
        "--start-year",
        type=int,
        help="Calendar year to start from. Omit for the full history.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the rebased JSON here instead of stdout.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Only emit the statistics block.",
    )
    parser.add_argument(
        "--list-years",
        action="store_true",
        help="Print the selectable start years and exit.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        data = load_dashboard_data(args.data)
    except (FileNotFoundError, InvalidDataError, InsufficientDataError) as exc:
        logger.error(str(exc))
        return 1

    if args.list_years:
        for year in get_available_years(data.equity_curve.dates):
            print(year)
        return 0

    rebased = rebase_dashboard_data(data, args.start_year)
    payload = rebased.statistics.to_dict() if args.summary else rebased.to_dict()
    text = json.dumps(payload, indent=2)

    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
