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
from typing import Optional, Tuple

from backend.db import DbClient
from shared.constants import DEFAULT_DISPLAY_NAME, INITIAL_ACHIEVEMENT
from shared.dates import iso_date, local_midnight
from shared.types import DailyLog, NewUser, UserProfile

logger = logging.getLogger(__name__)


def build_profile(new_user: NewUser) -> UserProfile:
    """Returns the default profile for a freshly created account."""
    return UserProfile(
        uid=new_user.uid,
        email=new_user.email,
        name=new_user.display_name or DEFAULT_DISPLAY_NAME,
        photo_url=new_user.photo_url,
        achievements=[INITIAL_ACHIEVEMENT],
    )


def initialize_user(
    db: DbClient, new_user: NewUser, now: Optional[datetime] = None
) -> Tuple[bool, bool]:
    """
    Creates the profile document and the day-zero daily log for a new user.

    The two writes are independent: a failure in one is logged and does not
    undo or prevent the other. Nothing is retried; the rollover job fills in
    a missing daily log on its next run.

    Returns:
        (profile_created, log_created)
    """
    day_zero = local_midnight(now)

    profile_created = False
    try:
        db.create_user(build_profile(new_user))
        profile_created = True
        logger.info(f"Created user document for {new_user.uid} ({new_user.email})")
    except Exception as e:
        logger.error(f"Error creating user document for {new_user.uid}: {e}")

    log_created = False
    try:
        db.create_daily_log(
            new_user.uid,
            DailyLog(date_id=iso_date(day_zero), date=day_zero, smoked_cigarettes=0),
        )
        log_created = True
    except Exception as e:
        logger.error(f"Error creating day-zero log for {new_user.uid}: {e}")

    return profile_created, log_created
