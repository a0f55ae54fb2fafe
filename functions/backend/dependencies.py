"""
Process-wide wiring of the storage handle and notifier.

Each is constructed once on first use and then passed explicitly into the
tracker operations.
"""

from __future__ import annotations

import firebase_admin

from backend.config import get_settings
from backend.db import DbClient, FirestoreDbClient, InMemoryDbClient
from backend.notifications import FcmNotifier, InMemoryNotifier, Notifier

_db_client: DbClient | None = None
_notifier: Notifier | None = None


def ensure_firebase_app() -> None:
    """Initializes the default Firebase app unless the functions runtime already has."""
    if not firebase_admin._apps:
        firebase_admin.initialize_app()


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so the Firestore connection is reused across
    invocations served by the same instance.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _db_client = InMemoryDbClient()
    else:
        ensure_firebase_app()
        _db_client = FirestoreDbClient()
    return _db_client


def get_notifier() -> Notifier:
    global _notifier
    if _notifier:
        return _notifier

    settings = get_settings()
    if settings.use_in_memory_backends:
        _notifier = InMemoryNotifier()
    else:
        ensure_firebase_app()
        _notifier = FcmNotifier()
    return _notifier
