"""
Daemon that runs the daily rollover on a fixed interval for self-hosted
deployments (Cloud Scheduler drives it when deployed as Cloud Functions).
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.dependencies import get_db_client
from tracker.rollover import run_daily_rollover

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Daily rollover daemon")
    parser.add_argument(
        "--interval-seconds",
        type=int,
        default=settings.rollover_interval_seconds,
        help="Seconds between rollover runs",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=settings.rollover_max_workers,
        help="Cap on concurrent users (default: one worker per user)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single rollover and exit",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    db = get_db_client()
    while True:
        try:
            run_daily_rollover(db, max_workers=args.max_workers)
        except Exception as exc:
            logger.exception("Rollover failed: %s", exc)

        if args.once:
            return 0

        logger.info("Sleeping for %ds", args.interval_seconds)
        time.sleep(args.interval_seconds)


if __name__ == "__main__":
    raise SystemExit(main())
