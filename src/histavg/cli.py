# connects input (cities + days -> queries) to the service and prints one line per city.

from __future__ import annotations
import argparse
import sys
from datetime import date
from typing import List, Optional
from .client import JsonFetcher
from .config import Settings
from .errors import InvalidInputError
from .logs import configure_logging
from .schemas import MAX_DAYS, parse_location_query
from .service import compute_all


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="histavg",
        description="Average daily mean temperature over the past N days for one or more cities.",
    )
    parser.add_argument("cities", nargs="+", metavar="CITY", help="place names, quote names with spaces")
    parser.add_argument("-d", "--days", default="7", help=f"days to average, 1 to {MAX_DAYS} (default: 7)")
    parser.add_argument("-w", "--workers", type=int, default=4, help="cities fetched in parallel")
    return parser


def main(argv: Optional[List[str]] = None, today: Optional[date] = None, fetcher: Optional[JsonFetcher] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    try:
        queries = [parse_location_query({"city": c, "days": args.days}) for c in args.cities]
    except InvalidInputError as exc:
        for field, messages in exc.details.items():
            print(f"invalid {field}: {'; '.join(messages)}", file=sys.stderr)
        return 2

    outcomes = compute_all(queries, today or date.today(), settings=settings, fetcher=fetcher, max_workers=max(1, args.workers))
    failed = False
    for o in outcomes:
        if o.error is not None:
            failed = True
            print(f"{o.city}: {o.error}", file=sys.stderr)
            continue
        s = o.summary
        # fixed two-decimal output to match the api's precision
        print(
            f"{s.fetched_location_name} Average Temp ({s.start_date}..{s.end_date}, n={s.days_fetched}): "
            f"{s.overall_average_temperature:.2f}"
        )
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
