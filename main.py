"""
Sun Ledger: Collection Runner

Collects sunrise/sunset/day-length data for a place over a date range from
every configured provider, appends the results to the record store, then
prints the derived statistics for everything stored so far.

Sources: sunrise-sunset.org + sunrisesunset.io
Policy: one provider answering is enough; a date with no answers is a
warning, never a stop.
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import date, datetime

from colorama import Fore, Style, init

from sun_ledger import config
from sun_ledger.acquisition import AcquisitionCoordinator
from sun_ledger.analytics import DaylightStatistics, compute_statistics
from sun_ledger.errors import GeocodingError
from sun_ledger.models import RecordFilter
from sun_ledger.store import AstronomicalStore

init()

# Ensure logs directory exists
os.makedirs("logs", exist_ok=True)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler("logs/sun_ledger.log", mode='a', encoding='utf-8'),
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Sun Ledger - multi-source sunrise/sunset collection'
    )
    parser.add_argument('place', nargs='?', help='Place name, e.g. "Oslo"')
    parser.add_argument('--start', type=date.fromisoformat, default=date.today(),
                        help='First date (YYYY-MM-DD), default today')
    parser.add_argument('--end', type=date.fromisoformat, default=None,
                        help='Last date (YYYY-MM-DD), default same as --start')
    parser.add_argument('--db', default=config.DB_PATH, help='SQLite database path')
    parser.add_argument('--filter', dest='location_filter', default=None,
                        help='Only include locations containing this text in the statistics')
    parser.add_argument('--from', dest='stats_from', type=date.fromisoformat, default=None,
                        help='Only include records on or after this date (YYYY-MM-DD) in the statistics')
    parser.add_argument('--to', dest='stats_to', type=date.fromisoformat, default=None,
                        help='Only include records on or before this date (YYYY-MM-DD) in the statistics')
    parser.add_argument('--stats-only', action='store_true',
                        help='Skip collection and print statistics for stored records')
    return parser.parse_args(argv)


def print_banner():
    """Print the system banner."""
    print(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}   SUN LEDGER: MULTI-SOURCE DAYLIGHT COLLECTION{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.WHITE}   [SOURCES] sunrise-sunset.org + sunrisesunset.io{Style.RESET_ALL}")
    print(f"{Fore.WHITE}   [LIMIT]   {config.MAX_DATES_PER_REQUEST} dates per request{Style.RESET_ALL}")
    print()


def print_progress(completed: int, total: int):
    print(f"      {Fore.GREEN}{completed}/{total}{Style.RESET_ALL} dates settled")


def print_statistics(stats: DaylightStatistics):
    """Print the derived statistics."""
    print(f"\n{Fore.CYAN}{'=' * 50}{Style.RESET_ALL}")
    print(f"{Fore.WHITE}DAYLIGHT STATISTICS{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'=' * 50}{Style.RESET_ALL}")

    if stats.summary is None:
        print(f"{Fore.YELLOW}No records stored yet{Style.RESET_ALL}")
        return

    s = stats.summary
    print(f"Records: {s.record_count}   Avg: {s.avg_minutes} min   "
          f"Max: {s.max_minutes} min   Min: {s.min_minutes} min")

    print(f"\n{'Source':<22} {'Records'}")
    print("-" * 50)
    for dist in stats.source_distribution:
        print(f"{dist.source:<22} {dist.count:>7}")

    corr = stats.latitude_correlation
    print(f"\nLatitude vs day length: r = {corr.coefficient:+.3f} ({corr.label})")

    if stats.trends:
        print(f"\n{'Location':<22} {'Trend':<12} {'Min/day'}")
        print("-" * 50)
        for trend in stats.trends:
            color = Fore.GREEN if trend.direction == "increasing" else (
                Fore.RED if trend.direction == "decreasing" else Fore.WHITE)
            print(f"{trend.location:<22} {color}{trend.direction:<12}{Style.RESET_ALL} "
                  f"{trend.change_rate_minutes_per_day:>+7.2f}")

    if stats.seasonal_patterns:
        print(f"\n{'Season':<10} {'Avg (min)':<10} {'Longest days'}")
        print("-" * 50)
        for pattern in stats.seasonal_patterns:
            print(f"{pattern.season:<10} {pattern.avg_day_length_minutes:>9} "
                  f"{', '.join(pattern.top_locations)}")

    if stats.location_ranking:
        best = stats.location_ranking[0]
        print(f"\nMost daylight: {Fore.GREEN}{best.location}{Style.RESET_ALL} "
              f"({best.avg_day_length_minutes} min over {best.samples} samples)")


async def main(args=None):
    """Main entry point for the Sun Ledger collection runner."""
    args = args or parse_args()
    start_time = datetime.now()

    print_banner()
    store = AstronomicalStore(args.db)

    try:
        exit_code = 0

        if not args.stats_only:
            if not args.place:
                print(f"{Fore.RED}ERROR: a place name is required unless --stats-only is given{Style.RESET_ALL}")
                return 1

            print(f"{Fore.WHITE}STEP 1: Collecting '{args.place}'{Style.RESET_ALL}")
            print("-" * 40)
            coordinator = AcquisitionCoordinator(store=store)

            try:
                report = await coordinator.collect(args.place, args.start, args.end, on_progress=print_progress)
            except GeocodingError as e:
                print(f"{Fore.RED}ERROR: {e}{Style.RESET_ALL}")
                logger.error(f"[main] {e}")
                return 1

            for warning in report.warnings:
                print(f"      {Fore.YELLOW}WARNING{Style.RESET_ALL} - {warning}")

            color = Fore.GREEN if report.succeeded else Fore.RED
            print(f"   {color}{report.dates_succeeded}/{report.requested_dates} dates collected, "
                  f"{report.records_saved} records saved{Style.RESET_ALL}")
            if not report.succeeded:
                exit_code = 1

        print(f"\n{Fore.WHITE}STEP 2: Statistics{Style.RESET_ALL}")
        print("-" * 40)
        filters = RecordFilter(
            location=args.location_filter,
            start_date=args.stats_from,
            end_date=args.stats_to,
        )
        stats = compute_statistics(store.read_all(filters))
        print_statistics(stats)

        duration = (datetime.now() - start_time).total_seconds()
        print(f"\n   Duration: {duration:.2f} seconds\n")
        return exit_code

    finally:
        store.close()


if __name__ == "__main__":
    exit_code = asyncio.run(main(parse_args()))
    sys.exit(exit_code)
