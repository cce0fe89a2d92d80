"""Command-line entry point for the sunnah.com hadith scraper."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import COLLECTIONS, ScraperSettings, UnknownCollectionError
from .scraper import open_tracker, run_rescrape, run_scrape

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser_obj = argparse.ArgumentParser(description="Scrape hadith collections from sunnah.com")
    parser_obj.add_argument(
        "--data-dir",
        type=Path,
        help="Output directory (defaults to $HADITH_SCRAPER_DATA_DIR or ./data).",
    )
    parser_obj.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    subparsers = parser_obj.add_subparsers(dest="command", required=True)

    scrape = subparsers.add_parser("scrape", help="Scrape pending collections, resuming where the last run stopped.")
    scrape.add_argument(
        "collections",
        nargs="*",
        metavar="collection",
        help=f"Collection ids to scrape (default: all). Known ids: {', '.join(COLLECTIONS)}",
    )
    scrape.add_argument("--save-html", action="store_true", help="Keep a copy of every fetched page.")

    subparsers.add_parser("status", help="Show scrape progress and the most recent errors.")

    reset = subparsers.add_parser("reset", help="Forget all scrape progress.")
    reset.add_argument("--yes", action="store_true", help="Do not ask for confirmation.")

    rescrape = subparsers.add_parser("rescrape", help="Scrape one collection again, ignoring saved progress.")
    rescrape.add_argument("collection")
    rescrape.add_argument("--save-html", action="store_true", help="Keep a copy of every fetched page.")
    return parser_obj.parse_args(argv)


def show_status(settings: ScraperSettings) -> None:
    tracker = open_tracker(settings)
    for line in tracker.summary_lines():
        print(line)


def reset_state(settings: ScraperSettings, *, confirmed: bool) -> bool:
    if not confirmed:
        answer = input(f"Reset progress stored in {settings.state_path}? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            LOGGER.info("Reset cancelled")
            return False
    open_tracker(settings).reset()
    LOGGER.info("State reset")
    return True


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = ScraperSettings.from_env(
        data_dir=args.data_dir,
        save_html=getattr(args, "save_html", None),
    )

    try:
        if args.command == "scrape":
            run_scrape(settings, args.collections or None)
        elif args.command == "status":
            show_status(settings)
        elif args.command == "reset":
            reset_state(settings, confirmed=args.yes)
        elif args.command == "rescrape":
            run_rescrape(settings, args.collection)
    except UnknownCollectionError as exc:
        LOGGER.error("Unknown collection %s (known: %s)", exc.args[0], ", ".join(COLLECTIONS))
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
