"""Command-line entry point: one-shot search or the web API server."""

import argparse
import asyncio
import logging
import sys

from property_browser.browser import ListingBrowser
from property_browser.config import Settings
from property_browser.filters.tags import active_filter_tags
from property_browser.logging import configure_logging, get_logger
from property_browser.models import KNOWN_PROPERTY_TYPES, FilterCriteria, Property
from property_browser.repositories import RepositoryError, create_repositories

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Property Browser - search real-estate listings and saved properties"
    )
    parser.add_argument("--serve", action="store_true", help="Start the JSON web API")
    parser.add_argument(
        "--no-refresh",
        action="store_true",
        help="With --serve: skip the background listing refresh",
    )
    parser.add_argument("--search", default="", help="Match address, city, state or zip code")
    parser.add_argument("--price-min", help="Minimum price")
    parser.add_argument("--price-max", help="Maximum price")
    parser.add_argument(
        "--type",
        dest="property_types",
        action="append",
        default=[],
        metavar="TYPE",
        help=f"Property type, repeatable (e.g. {', '.join(KNOWN_PROPERTY_TYPES)})",
    )
    parser.add_argument("--bedrooms-min", help="Minimum bedrooms")
    parser.add_argument("--bathrooms-min", help="Minimum bathrooms (0.5 steps)")
    parser.add_argument("--square-feet-min", help="Minimum square footage")
    parser.add_argument("--keywords", help="Match description or features")
    parser.add_argument("--saved", action="store_true", help="List saved properties instead")
    parser.add_argument(
        "--backend",
        choices=("memory", "remote", "sqlite"),
        default=None,
        help="Override PROPERTY_BROWSER_DATA_BACKEND",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging for troubleshooting",
    )
    return parser


def criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    """Build criteria from CLI flags; unusable numbers are ignored."""
    return FilterCriteria.model_validate(
        {
            "price_min": args.price_min,
            "price_max": args.price_max,
            "property_types": args.property_types,
            "bedrooms_min": args.bedrooms_min,
            "bathrooms_min": args.bathrooms_min,
            "square_feet_min": args.square_feet_min,
            "keywords": args.keywords,
        }
    )


def format_property(prop: Property) -> str:
    """One-line summary of a listing."""
    kind = prop.property_type or "-"
    return (
        f"#{prop.id:<4} ${prop.price:>12,.0f}  {kind:<10} "
        f"{prop.bedrooms}bd/{prop.bathrooms:g}ba  {prop.square_feet:>6,} sq ft  "
        f"{prop.location}  [{prop.status}]"
    )


async def run_search(
    settings: Settings,
    search_term: str,
    criteria: FilterCriteria,
    *,
    saved_only: bool = False,
) -> int:
    """Load listings, print the matches and return a process exit code."""
    repos = await create_repositories(settings)
    try:
        browser = ListingBrowser(
            repos.properties, repos.saved, cache_size=settings.result_cache_size
        )
        try:
            await browser.load()
        except RepositoryError:
            logger.error("listing_load_failed", backend=repos.backend, exc_info=True)
            print("Error: Failed to load properties. Please try again.")
            return 1

        if saved_only:
            saved = browser.saved_listings()
            noun = "property" if len(saved) == 1 else "properties"
            print(f"{len(saved)} {noun} saved")
            for item in saved:
                print(f"{format_property(item.listing)}  saved {item.saved_date:%b %d, %Y}")
            return 0

        results = browser.search(search_term, criteria)
        tags = active_filter_tags(criteria)
        if tags:
            print("Active filters: " + ", ".join(tag.label for tag in tags))
        print(f"{len(results)} of {len(browser.properties)} properties")
        saved_ids = browser.saved_property_ids
        for prop in results:
            marker = "*" if prop.id in saved_ids else " "
            print(f"{marker} {format_property(prop)}")
        return 0
    finally:
        await repos.close()


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()

    log_level = logging.DEBUG if args.debug else logging.INFO
    configure_logging(json_output=args.json_logs, level=log_level)

    try:
        settings = Settings()
        if args.backend:
            settings = settings.model_copy(update={"data_backend": args.backend})
        if args.json_logs:
            settings = settings.model_copy(update={"log_json": True})
        settings.validate_backend()
    except ValueError as e:
        logger.error("failed_to_load_settings", error=str(e))
        print(f"Error: Failed to load settings. {e}")
        print("Set PROPERTY_BROWSER_* variables in the environment or a .env file.")
        sys.exit(1)

    logger.info("starting_property_browser", backend=settings.data_backend, serve=args.serve)

    if args.serve:
        import uvicorn

        from property_browser.web.app import create_app

        app = create_app(settings, run_refresh=not args.no_refresh, log_level=log_level)
        uvicorn.run(
            app,
            host=settings.web_host,
            port=settings.web_port,
            log_level="debug" if args.debug else "info",
        )
        return

    sys.exit(
        asyncio.run(
            run_search(settings, args.search, criteria_from_args(args), saved_only=args.saved)
        )
    )


if __name__ == "__main__":
    main()
