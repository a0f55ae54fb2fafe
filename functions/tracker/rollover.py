# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import concurrent.futures
import logging
from datetime import datetime, timezone
from typing import Optional

from backend.db import DbClient
from shared.dates import local_midnight, today_and_yesterday
from shared.types import DailyLog, RolloverSummary

logger = logging.getLogger(__name__)


def roll_user(db: DbClient, user_id: str, now: Optional[datetime] = None) -> bool:
    """
    Opens today's log for one user and updates the streak from yesterday.

    Returns False without touching anything when today's log already exists,
    so repeated runs within a day leave the streak alone.
    """
    today, yesterday = today_and_yesterday(now)
    if db.get_daily_log(user_id, today) is not None:
        return False

    db.create_daily_log(
        user_id,
        DailyLog(date_id=today, date=local_midnight(now), smoked_cigarettes=0),
    )

    previous = db.get_daily_log(user_id, yesterday)
    if previous is not None and previous.smoked_cigarettes == 0:
        db.increment_streak(user_id)
    else:
        db.set_streak(user_id, 0)
    return True


def run_daily_rollover(
    db: DbClient, now: Optional[datetime] = None, max_workers: Optional[int] = None
) -> RolloverSummary:
    """
    Runs `roll_user` for every user concurrently and waits for all of them.

    A failing user is logged and counted; it never stops the others.
    """
    summary = RolloverSummary()
    # One instant for the whole batch so every user rolls to the same day.
    now = now or datetime.now(timezone.utc)
    user_ids = db.list_user_ids()
    if not user_ids:
        return summary

    workers = max_workers or len(user_ids)
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(roll_user, db, user_id, now): user_id
            for user_id in user_ids
        }
        for future in concurrent.futures.as_completed(futures):
            user_id = futures[future]
            try:
                if future.result():
                    summary.processed += 1
                else:
                    summary.skipped += 1
            except Exception as e:
                summary.failed += 1
                logger.error(f"Daily rollover failed for user {user_id}: {e}")

    logger.info(
        "Daily rollover complete: %d processed, %d skipped, %d failed",
        summary.processed,
        summary.skipped,
        summary.failed,
    )
    return summary
