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

import logging
from datetime import datetime
from typing import Iterable, Optional

from backend.db import DbClient
from shared.constants import CIGARETTE_PRICE, CIGARETTES_PER_PACK, CURRENCY_SUFFIX
from shared.dates import window_start
from shared.errors import ErrorKind, TrackerError
from shared.types import DailyLog, DashboardStats, DashboardWindow

logger = logging.getLogger(__name__)


def format_money(amount: float) -> str:
    return f"{amount:.2f} {CURRENCY_SUFFIX}"


def money_saved(logs: Iterable[DailyLog]) -> float:
    """Price of the cigarettes not smoked, counting one pack per day."""
    return sum(
        (CIGARETTES_PER_PACK - log.smoked_cigarettes) * CIGARETTE_PRICE
        for log in logs
    )


def get_dashboard(
    db: DbClient,
    caller_id: Optional[str],
    window: Optional[str] = DashboardWindow.YEAR,
    now: Optional[datetime] = None,
) -> DashboardStats:
    """
    Summarizes the caller's daily logs since the start of `window`.

    Streak and achievements come from the profile, not from the window.
    """
    if not caller_id:
        raise TrackerError(
            ErrorKind.UNAUTHENTICATED, "The function must be called while authenticated."
        )

    start = window_start(window or DashboardWindow.YEAR, now)
    try:
        logs = db.list_daily_logs_since(caller_id, start)
        profile = db.get_user(caller_id)
    except Exception as e:
        logger.error(f"Failed to load dashboard data for {caller_id}: {e}")
        raise TrackerError(ErrorKind.INTERNAL, f"Failed to load dashboard: {e}")

    if profile is None:
        raise TrackerError(ErrorKind.NOT_FOUND, "Your user record was not found.")

    return DashboardStats(
        total_smoked_cigarettes=sum(log.smoked_cigarettes for log in logs),
        total_smoke_free_days=sum(1 for log in logs if log.smoked_cigarettes == 0),
        money_saved=format_money(money_saved(logs)),
        streak=profile.streak,
        achievements=list(profile.achievements),
    )
