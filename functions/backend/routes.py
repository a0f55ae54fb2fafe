"""
HTTP routes mirroring the callable functions for self-hosted deployments.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.auth import get_caller_uid
from backend.db import DbClient
from backend.dependencies import get_db_client, get_notifier
from backend.notifications import Notifier
from backend.schemas import (
    DashboardResponse,
    HandleInvitationRequest,
    InvitationResponse,
    InviteFriendRequest,
)
from shared.errors import ErrorKind, TrackerError
from shared.types import DashboardWindow
from tracker import dashboard, invitations

logger = logging.getLogger(__name__)

router = APIRouter()

HTTP_STATUS = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
    ErrorKind.UNKNOWN: 500,
}


def _to_http_exception(error: TrackerError) -> HTTPException:
    return HTTPException(status_code=HTTP_STATUS[error.kind], detail=error.message)


@router.post("/invite_friend", response_model=InvitationResponse)
def invite_friend(
    payload: InviteFriendRequest,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: DbClient = Depends(get_db_client),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        result = invitations.send_invitation(
            db, notifier, invitee_id=payload.friend_id, caller_id=caller_uid
        )
    except TrackerError as e:
        raise _to_http_exception(e)
    return InvitationResponse(**asdict(result))


@router.post("/handle_invitation", response_model=InvitationResponse)
def handle_invitation(
    payload: HandleInvitationRequest,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: DbClient = Depends(get_db_client),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        result = invitations.respond_to_invitation(
            db,
            notifier,
            inviter_id=payload.friend_id,
            caller_id=caller_uid,
            accept=payload.accept,
        )
    except TrackerError as e:
        raise _to_http_exception(e)
    return InvitationResponse(**asdict(result))


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    window: str = Query(default=DashboardWindow.YEAR.value, alias="type"),
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: DbClient = Depends(get_db_client),
):
    try:
        stats = dashboard.get_dashboard(db, caller_id=caller_uid, window=window)
    except TrackerError as e:
        raise _to_http_exception(e)
    return DashboardResponse(**asdict(stats))
