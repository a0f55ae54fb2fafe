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

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from shared.constants import TIME_ZONE
from shared.types import DashboardWindow

LOCAL_ZONE = ZoneInfo(TIME_ZONE)


def local_now(now: Optional[datetime] = None) -> datetime:
    """Returns `now` (default: the current instant) in the local time zone."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(LOCAL_ZONE)


def local_midnight(now: Optional[datetime] = None) -> datetime:
    """Returns the start of the current local calendar day as an aware datetime."""
    return datetime.combine(local_now(now).date(), time.min, tzinfo=LOCAL_ZONE)


def iso_date(moment: datetime) -> str:
    """Returns the local calendar date of `moment` as YYYY-MM-DD."""
    return local_now(moment).date().isoformat()


def today_and_yesterday(now: Optional[datetime] = None) -> Tuple[str, str]:
    today = local_now(now).date()
    return today.isoformat(), (today - timedelta(days=1)).isoformat()


def _minus_months(day: date, months: int) -> date:
    month_index = day.year * 12 + day.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def window_start(window: str, now: Optional[datetime] = None) -> datetime:
    """
    Returns the first instant included in a dashboard window.

    The window is counted back from local midnight today: one year, one
    calendar month or seven days. Unrecognized values fall back to one year.
    Month and year steps clamp to the last day of a shorter month.
    """
    today = local_midnight(now).date()
    if window == DashboardWindow.WEEK:
        start = today - timedelta(days=7)
    elif window == DashboardWindow.MONTH:
        start = _minus_months(today, 1)
    else:
        start = _minus_months(today, 12)
    return datetime.combine(start, time.min, tzinfo=LOCAL_ZONE)
