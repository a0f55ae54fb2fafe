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

import unittest
from datetime import datetime, timedelta, timezone

from backend.db import InMemoryDbClient
from shared.dates import local_midnight
from shared.types import DailyLog, UserProfile
from tracker import rollover

# 19:30 UTC is already the next calendar day in Almaty.
NOW = datetime(2026, 3, 9, 19, 30, tzinfo=timezone.utc)
TODAY = "2026-03-10"
YESTERDAY = "2026-03-09"


class FailingLogDb(InMemoryDbClient):
    """Raises for one user to simulate a per-user failure."""

    def __init__(self, broken_user_id):
        super().__init__()
        self.broken_user_id = broken_user_id

    def get_daily_log(self, user_id, date_id):
        if user_id == self.broken_user_id:
            raise RuntimeError("read failed")
        return super().get_daily_log(user_id, date_id)


class RolloverTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.midnight = local_midnight(NOW)

    def _add_user(self, uid, streak=0, db=None):
        (db or self.db).create_user(UserProfile(uid=uid, streak=streak))

    def _add_yesterday(self, uid, smoked, db=None):
        (db or self.db).create_daily_log(
            uid,
            DailyLog(
                date_id=YESTERDAY,
                date=self.midnight - timedelta(days=1),
                smoked_cigarettes=smoked,
            ),
        )

    def test_smoke_free_yesterday_increments_streak(self):
        self._add_user("alice", streak=3)
        self._add_yesterday("alice", smoked=0)

        summary = rollover.run_daily_rollover(self.db, now=NOW)

        self.assertEqual(self.db.get_user("alice").streak, 4)
        self.assertEqual(summary.processed, 1)
        today_log = self.db.get_daily_log("alice", TODAY)
        self.assertIsNotNone(today_log)
        self.assertEqual(today_log.smoked_cigarettes, 0)
        self.assertEqual(today_log.date, self.midnight)

    def test_smoking_yesterday_resets_streak(self):
        self._add_user("bob", streak=5)
        self._add_yesterday("bob", smoked=2)

        rollover.run_daily_rollover(self.db, now=NOW)

        self.assertEqual(self.db.get_user("bob").streak, 0)

    def test_missing_yesterday_resets_streak(self):
        self._add_user("carol", streak=7)

        rollover.run_daily_rollover(self.db, now=NOW)

        self.assertEqual(self.db.get_user("carol").streak, 0)
        self.assertIsNotNone(self.db.get_daily_log("carol", TODAY))

    def test_second_run_same_day_is_noop(self):
        self._add_user("alice", streak=1)
        self._add_yesterday("alice", smoked=0)

        rollover.run_daily_rollover(self.db, now=NOW)
        later = NOW + timedelta(hours=3)
        summary = rollover.run_daily_rollover(self.db, now=later)

        self.assertEqual(self.db.get_user("alice").streak, 2)
        self.assertEqual(summary.skipped, 1)
        self.assertEqual(summary.processed, 0)
        self.assertEqual(sorted(self.db.daily_logs["alice"]), [YESTERDAY, TODAY])

    def test_failing_user_does_not_stop_others(self):
        db = FailingLogDb("broken")
        for uid in ("alice", "broken", "bob"):
            self._add_user(uid, streak=1, db=db)
            self._add_yesterday(uid, smoked=0, db=db)

        summary = rollover.run_daily_rollover(db, now=NOW)

        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.processed, 2)
        self.assertEqual(db.get_user("alice").streak, 2)
        self.assertEqual(db.get_user("bob").streak, 2)
        self.assertEqual(db.get_user("broken").streak, 1)

    def test_capped_workers_process_every_user(self):
        for i in range(10):
            self._add_user(f"user{i}")

        summary = rollover.run_daily_rollover(self.db, now=NOW, max_workers=2)

        self.assertEqual(summary.processed, 10)
        for i in range(10):
            self.assertIsNotNone(self.db.get_daily_log(f"user{i}", TODAY))

    def test_no_users(self):
        summary = rollover.run_daily_rollover(self.db, now=NOW)
        self.assertEqual((summary.processed, summary.skipped, summary.failed), (0, 0, 0))


if __name__ == "__main__":
    unittest.main()
