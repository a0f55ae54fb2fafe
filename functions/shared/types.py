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

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import List, Optional

from shared.constants import DEFAULT_DISPLAY_NAME


class DashboardWindow(StrEnum):
    YEAR = "year"
    MONTH = "month"
    WEEK = "week"


@dataclass
class NewUser:
    """Identity attributes delivered by the account-creation trigger."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass
class UserProfile:
    """A user document in the users collection.

    `friends` holds user ids here; the Firestore client stores them as
    document references.
    """

    uid: str
    email: Optional[str] = None
    name: str = DEFAULT_DISPLAY_NAME
    photo_url: Optional[str] = None
    limit: int = 0
    money_saved: float = 0
    streak: int = 0
    achievements: List[str] = field(default_factory=list)
    friends: List[str] = field(default_factory=list)
    invitations: List[str] = field(default_factory=list)
    fcm_token: Optional[str] = None


@dataclass
class DailyLog:
    """One calendar day of a user's log, keyed by its ISO date."""

    date_id: str
    date: datetime
    smoked_cigarettes: int = 0


@dataclass
class InvitationResult:
    success: bool
    message: str


@dataclass
class DashboardStats:
    total_smoked_cigarettes: int
    total_smoke_free_days: int
    money_saved: str
    streak: int
    achievements: List[str]


@dataclass
class RolloverSummary:
    processed: int = 0
    skipped: int = 0
    failed: int = 0
