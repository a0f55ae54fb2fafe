import unittest
from unittest.mock import patch

from backend.notifications import FcmNotifier, InMemoryNotifier, notify_best_effort


class NotificationTests(unittest.TestCase):
    def test_best_effort_sends_with_token(self):
        notifier = InMemoryNotifier()
        self.assertTrue(notify_best_effort(notifier, "tok", "Title", "Body"))
        self.assertEqual(notifier.sent[0].title, "Title")

    def test_best_effort_skips_without_token(self):
        notifier = InMemoryNotifier()
        self.assertFalse(notify_best_effort(notifier, None, "Title", "Body"))
        self.assertEqual(notifier.sent, [])

    def test_best_effort_swallows_failures(self):
        notifier = InMemoryNotifier(fail_with=RuntimeError("unavailable"))
        self.assertFalse(notify_best_effort(notifier, "tok", "Title", "Body"))

    @patch("backend.notifications.messaging")
    def test_fcm_notifier_builds_message(self, mock_messaging):
        FcmNotifier().send("tok", "Title", "Body")

        mock_messaging.Notification.assert_called_once_with(title="Title", body="Body")
        mock_messaging.Message.assert_called_once_with(
            notification=mock_messaging.Notification.return_value, token="tok"
        )
        mock_messaging.send.assert_called_once_with(mock_messaging.Message.return_value)


if __name__ == "__main__":
    unittest.main()
