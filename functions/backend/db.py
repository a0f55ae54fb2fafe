"""
Storage handle for user profiles and daily logs.

`FirestoreDbClient` talks to Cloud Firestore; `InMemoryDbClient` is the
test/dev double. Both expose the same `DbClient` interface, including an
all-or-nothing `run_transaction` used for friendship changes.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import asdict
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol, TypeVar

from dacite import Config, from_dict
from firebase_admin import firestore
from google.api_core import exceptions
from google.cloud.firestore_v1 import ArrayRemove, ArrayUnion, Increment
from google.cloud.firestore_v1.base_query import FieldFilter

from shared.constants import DAILY_LOGS_COLLECTION, USERS_COLLECTION
from shared.json_utils import convert_keys
from shared.types import DailyLog, UserProfile

T = TypeVar("T")


class UserTransaction(Protocol):
    """Reads and writes staged inside a single transaction."""

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        ...

    def remove_invitation(self, user_id: str, inviter_id: str) -> None:
        ...

    def add_friend(self, user_id: str, friend_id: str) -> None:
        ...


class DbClient(Protocol):
    """Interface for profile and daily log storage."""

    def create_user(self, profile: UserProfile) -> None:
        ...

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        ...

    def list_user_ids(self) -> List[str]:
        ...

    def get_daily_log(self, user_id: str, date_id: str) -> Optional[DailyLog]:
        ...

    def create_daily_log(self, user_id: str, log: DailyLog) -> None:
        ...

    def set_streak(self, user_id: str, streak: int) -> None:
        ...

    def increment_streak(self, user_id: str) -> None:
        ...

    def add_invitation(self, user_id: str, inviter_id: str) -> None:
        ...

    def list_daily_logs_since(self, user_id: str, start: datetime) -> List[DailyLog]:
        ...

    def run_transaction(self, fn: Callable[[UserTransaction], T]) -> T:
        ...


def _union(values: List[str], value: str) -> List[str]:
    return values if value in values else values + [value]


def _difference(values: List[str], value: str) -> List[str]:
    return [v for v in values if v != value]


class InMemoryTransaction:
    """Buffers writes until the owning client commits them."""

    def __init__(self, client: "InMemoryDbClient"):
        self._client = client
        self._writes: List[Callable[[], None]] = []

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        return self._client.get_user(user_id)

    def remove_invitation(self, user_id: str, inviter_id: str) -> None:
        def _apply():
            profile = self._client.users[user_id]
            profile.invitations = _difference(profile.invitations, inviter_id)

        self._writes.append(_apply)

    def add_friend(self, user_id: str, friend_id: str) -> None:
        def _apply():
            profile = self._client.users[user_id]
            profile.friends = _union(profile.friends, friend_id)

        self._writes.append(_apply)

    def commit(self) -> None:
        for write in self._writes:
            write()


class InMemoryDbClient:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserProfile] = {}
        self.daily_logs: Dict[str, Dict[str, DailyLog]] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.users.clear()
            self.daily_logs.clear()

    def create_user(self, profile: UserProfile) -> None:
        with self._lock:
            self.users[profile.uid] = copy.deepcopy(profile)

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        with self._lock:
            profile = self.users.get(user_id)
            return copy.deepcopy(profile) if profile else None

    def list_user_ids(self) -> List[str]:
        with self._lock:
            return list(self.users)

    def get_daily_log(self, user_id: str, date_id: str) -> Optional[DailyLog]:
        with self._lock:
            log = self.daily_logs.get(user_id, {}).get(date_id)
            return copy.deepcopy(log) if log else None

    def create_daily_log(self, user_id: str, log: DailyLog) -> None:
        with self._lock:
            logs = self.daily_logs.setdefault(user_id, {})
            if log.date_id in logs:
                raise exceptions.AlreadyExists(
                    f"Daily log {log.date_id} already exists for {user_id}"
                )
            logs[log.date_id] = copy.deepcopy(log)

    def set_streak(self, user_id: str, streak: int) -> None:
        with self._lock:
            self._require_user(user_id).streak = streak

    def increment_streak(self, user_id: str) -> None:
        with self._lock:
            self._require_user(user_id).streak += 1

    def add_invitation(self, user_id: str, inviter_id: str) -> None:
        with self._lock:
            profile = self._require_user(user_id)
            profile.invitations = _union(profile.invitations, inviter_id)

    def list_daily_logs_since(self, user_id: str, start: datetime) -> List[DailyLog]:
        with self._lock:
            logs = self.daily_logs.get(user_id, {}).values()
            return [copy.deepcopy(log) for log in logs if log.date >= start]

    def run_transaction(self, fn: Callable[[UserTransaction], T]) -> T:
        # Holding the lock for the whole body serializes transactions, so the
        # buffered writes land together or not at all.
        with self._lock:
            transaction = InMemoryTransaction(self)
            result = fn(transaction)
            transaction.commit()
            return result

    def _require_user(self, user_id: str) -> UserProfile:
        profile = self.users.get(user_id)
        if profile is None:
            raise exceptions.NotFound(f"No user document for {user_id}")
        return profile


def _friend_id(value) -> str:
    # Friends are stored as document references; tolerate bare ids too.
    return getattr(value, "id", value)


def _profile_from_snapshot(snapshot) -> UserProfile:
    data = snapshot.to_dict() or {}
    data.setdefault("uid", snapshot.id)
    data["friends"] = [_friend_id(f) for f in data.get("friends") or []]
    data["invitations"] = list(data.get("invitations") or [])
    data["achievements"] = list(data.get("achievements") or [])
    return from_dict(
        data_class=UserProfile,
        data=convert_keys(data, "camel_to_snake"),
        config=Config(check_types=False),
    )


def _daily_log_from_snapshot(snapshot) -> DailyLog:
    data = snapshot.to_dict() or {}
    return DailyLog(
        date_id=snapshot.id,
        date=data.get("date"),
        smoked_cigarettes=int(data.get("smokedCigarettes") or 0),
    )


class FirestoreTransaction:
    """Stages reads and writes on a Firestore transaction."""

    def __init__(self, db_client: "FirestoreDbClient", transaction):
        self._db = db_client
        self._transaction = transaction

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        snapshot = self._db.user_ref(user_id).get(transaction=self._transaction)
        if not snapshot.exists:
            return None
        return _profile_from_snapshot(snapshot)

    def remove_invitation(self, user_id: str, inviter_id: str) -> None:
        self._transaction.update(
            self._db.user_ref(user_id), {"invitations": ArrayRemove([inviter_id])}
        )

    def add_friend(self, user_id: str, friend_id: str) -> None:
        self._transaction.update(
            self._db.user_ref(user_id),
            {"friends": ArrayUnion([self._db.user_ref(friend_id)])},
        )


class FirestoreDbClient:
    """Cloud Firestore implementation of `DbClient`."""

    def __init__(self, client=None):
        self._client = client or firestore.client()

    def user_ref(self, user_id: str):
        return self._client.collection(USERS_COLLECTION).document(user_id)

    def _daily_log_ref(self, user_id: str, date_id: str):
        return self.user_ref(user_id).collection(DAILY_LOGS_COLLECTION).document(date_id)

    def create_user(self, profile: UserProfile) -> None:
        data = convert_keys(asdict(profile), "snake_to_camel")
        data["friends"] = [self.user_ref(f) for f in profile.friends]
        self.user_ref(profile.uid).set(data)

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        snapshot = self.user_ref(user_id).get()
        if not snapshot.exists:
            return None
        return _profile_from_snapshot(snapshot)

    def list_user_ids(self) -> List[str]:
        return [doc.id for doc in self._client.collection(USERS_COLLECTION).stream()]

    def get_daily_log(self, user_id: str, date_id: str) -> Optional[DailyLog]:
        snapshot = self._daily_log_ref(user_id, date_id).get()
        if not snapshot.exists:
            return None
        return _daily_log_from_snapshot(snapshot)

    def create_daily_log(self, user_id: str, log: DailyLog) -> None:
        # create() fails with AlreadyExists, so two overlapping runs cannot
        # both claim the same day.
        self._daily_log_ref(user_id, log.date_id).create(
            {"date": log.date, "smokedCigarettes": log.smoked_cigarettes}
        )

    def set_streak(self, user_id: str, streak: int) -> None:
        self.user_ref(user_id).update({"streak": streak})

    def increment_streak(self, user_id: str) -> None:
        self.user_ref(user_id).update({"streak": Increment(1)})

    def add_invitation(self, user_id: str, inviter_id: str) -> None:
        self.user_ref(user_id).update({"invitations": ArrayUnion([inviter_id])})

    def list_daily_logs_since(self, user_id: str, start: datetime) -> List[DailyLog]:
        query = (
            self.user_ref(user_id)
            .collection(DAILY_LOGS_COLLECTION)
            .where(filter=FieldFilter("date", ">=", start))
        )
        return [_daily_log_from_snapshot(doc) for doc in query.stream()]

    def run_transaction(self, fn: Callable[[UserTransaction], T]) -> T:
        transaction = self._client.transaction()

        @firestore.transactional
        def _run(transaction):
            return fn(FirestoreTransaction(self, transaction))

        return _run(transaction)
