import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from google.api_core import exceptions
from google.cloud.firestore_v1 import ArrayRemove, ArrayUnion, Increment

from backend.db import FirestoreDbClient, InMemoryDbClient
from shared.errors import ErrorKind, TrackerError
from shared.types import DailyLog, UserProfile

DAY = datetime(2026, 3, 10, tzinfo=timezone.utc)


def _snapshot(doc_id, data, exists=True):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = exists
    snapshot.to_dict.return_value = data
    return snapshot


def _passthrough_transactional(fn):
    return lambda transaction: fn(transaction)


class InMemoryDbClientTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.db.create_user(UserProfile(uid="alice", invitations=["bob"]))
        self.db.create_user(UserProfile(uid="bob"))

    def test_create_daily_log_rejects_duplicates(self):
        log = DailyLog(date_id="2026-03-10", date=DAY)
        self.db.create_daily_log("alice", log)
        with self.assertRaises(exceptions.AlreadyExists):
            self.db.create_daily_log("alice", log)

    def test_returned_profiles_are_copies(self):
        self.db.get_user("alice").friends.append("mallory")
        self.assertEqual(self.db.get_user("alice").friends, [])

    def test_transaction_commits_all_writes(self):
        def _body(transaction):
            transaction.remove_invitation("alice", "bob")
            transaction.add_friend("alice", "bob")
            transaction.add_friend("bob", "alice")
            return "done"

        self.assertEqual(self.db.run_transaction(_body), "done")
        self.assertEqual(self.db.get_user("alice").invitations, [])
        self.assertEqual(self.db.get_user("alice").friends, ["bob"])
        self.assertEqual(self.db.get_user("bob").friends, ["alice"])

    def test_transaction_discards_writes_on_error(self):
        def _body(transaction):
            transaction.add_friend("alice", "bob")
            raise TrackerError(ErrorKind.NOT_FOUND, "missing")

        with self.assertRaises(TrackerError):
            self.db.run_transaction(_body)
        self.assertEqual(self.db.get_user("alice").friends, [])

    def test_streak_updates_require_user(self):
        self.db.increment_streak("alice")
        self.db.increment_streak("alice")
        self.assertEqual(self.db.get_user("alice").streak, 2)
        self.db.set_streak("alice", 0)
        self.assertEqual(self.db.get_user("alice").streak, 0)
        with self.assertRaises(exceptions.NotFound):
            self.db.set_streak("ghost", 1)


class FirestoreDbClientTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.db = FirestoreDbClient(client=self.client)
        self.user_ref = self.client.collection.return_value.document.return_value

    def test_create_user_writes_camel_case_with_friend_refs(self):
        self.db.create_user(
            UserProfile(uid="alice", name="Alice", friends=["bob"], fcm_token="tok")
        )

        self.client.collection.assert_any_call("users")
        data = self.user_ref.set.call_args[0][0]
        self.assertEqual(data["uid"], "alice")
        self.assertEqual(data["fcmToken"], "tok")
        self.assertEqual(data["moneySaved"], 0)
        self.assertEqual(data["friends"], [self.user_ref])

    def test_get_user_maps_references_to_ids(self):
        friend_ref = MagicMock()
        friend_ref.id = "bob"
        self.user_ref.get.return_value = _snapshot(
            "alice",
            {
                "email": "alice@example.com",
                "name": "Alice",
                "photoUrl": None,
                "friends": [friend_ref],
                "invitations": ["carol"],
                "streak": 3,
                "achievements": ["first_step"],
            },
        )

        profile = self.db.get_user("alice")

        self.assertEqual(profile.uid, "alice")
        self.assertEqual(profile.friends, ["bob"])
        self.assertEqual(profile.invitations, ["carol"])
        self.assertEqual(profile.streak, 3)
        self.assertIsNone(profile.fcm_token)

    def test_get_user_missing(self):
        self.user_ref.get.return_value = _snapshot("ghost", None, exists=False)
        self.assertIsNone(self.db.get_user("ghost"))

    def test_create_daily_log_uses_create(self):
        log_ref = self.user_ref.collection.return_value.document.return_value

        self.db.create_daily_log("alice", DailyLog(date_id="2026-03-10", date=DAY))

        self.user_ref.collection.assert_called_with("dailyLogs")
        self.user_ref.collection.return_value.document.assert_called_with("2026-03-10")
        log_ref.create.assert_called_once_with({"date": DAY, "smokedCigarettes": 0})

    def test_counter_and_array_updates(self):
        self.db.increment_streak("alice")
        self.db.add_invitation("alice", "bob")

        streak_update = self.user_ref.update.call_args_list[0][0][0]
        invitation_update = self.user_ref.update.call_args_list[1][0][0]
        self.assertIsInstance(streak_update["streak"], Increment)
        self.assertIsInstance(invitation_update["invitations"], ArrayUnion)

    def test_list_daily_logs_since(self):
        query = self.user_ref.collection.return_value.where.return_value
        query.stream.return_value = [
            _snapshot("2026-03-10", {"date": DAY, "smokedCigarettes": 2})
        ]

        logs = self.db.list_daily_logs_since("alice", DAY)

        self.assertEqual(logs, [DailyLog(date_id="2026-03-10", date=DAY, smoked_cigarettes=2)])

    @patch("backend.db.firestore")
    def test_run_transaction_stages_writes(self, mock_firestore):
        mock_firestore.transactional = _passthrough_transactional
        transaction = self.client.transaction.return_value
        self.user_ref.get.return_value = _snapshot("bob", {"name": "Bob"})

        def _body(txn):
            profile = txn.get_user("bob")
            txn.remove_invitation("alice", "bob")
            txn.add_friend("alice", "bob")
            return profile.name

        self.assertEqual(self.db.run_transaction(_body), "Bob")
        self.user_ref.get.assert_called_with(transaction=transaction)
        updates = [call[0][1] for call in transaction.update.call_args_list]
        self.assertIsInstance(updates[0]["invitations"], ArrayRemove)
        self.assertIsInstance(updates[1]["friends"], ArrayUnion)


if __name__ == "__main__":
    unittest.main()
