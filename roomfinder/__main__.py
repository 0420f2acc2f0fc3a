"""Command-line entry point.

Usage:
    python -m roomfinder serve    # JSON API (uvicorn)
    python -m roomfinder bot      # Discord bot

Both commands load the calendar feed once before starting; if that first
load fails the process exits with status 1.
"""

import argparse
import logging
import sys
from functools import partial

from .config import get_settings
from .feed_client import IngestError, ingest
from .sync import DirectorySync

logger = logging.getLogger("roomfinder")


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s [%(name)s] %(message)s")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="roomfinder", description="Find free rooms from a calendar feed.")
    parser.add_argument("command", choices=("serve", "bot"), help="run the HTTP API or the Discord bot")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    ingest_fn = partial(
        ingest,
        timeout=settings.fetch_timeout_seconds,
        max_retries=settings.fetch_max_retries,
        location_prefix=settings.location_prefix,
    )
    try:
        sync = DirectorySync.initialize(settings.feed_url, ingest_fn)
    except IngestError as exc:
        logger.critical("Room directory initialization failed: %s", exc)
        return 1

    if args.command == "serve":
        import uvicorn

        from .main import create_app

        uvicorn.run(create_app(sync), host=settings.host, port=settings.port)
        return 0

    if not settings.discord_token:
        logger.critical("DISCORD_TOKEN is not set")
        return 1

    from .discord_bot import run_bot

    run_bot(sync, settings.discord_token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
