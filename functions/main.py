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

# Cloud functions for the smoke-free tracker backend.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
from dataclasses import asdict
from typing import Optional

# Third-party library imports
from firebase_admin import initialize_app
from firebase_functions import (
    https_fn,
    identity_fn,
    logger,
    options,
    scheduler_fn,
)

# Local application imports
from backend.config import get_settings
from backend.dependencies import get_db_client, get_notifier
from shared.constants import TIME_ZONE
from shared.errors import ErrorKind, TrackerError
from shared.json_utils import convert_keys
from shared.types import DashboardWindow, NewUser
from tracker import dashboard as dashboard_service
from tracker import invitations, rollover, users

ROLLOVER_SCHEDULE = "every 5 minutes"
ROLLOVER_TIMEOUT_SEC = 300

ERROR_CODES = {
    ErrorKind.INVALID_ARGUMENT: https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    ErrorKind.UNAUTHENTICATED: https_fn.FunctionsErrorCode.UNAUTHENTICATED,
    ErrorKind.NOT_FOUND: https_fn.FunctionsErrorCode.NOT_FOUND,
    ErrorKind.INTERNAL: https_fn.FunctionsErrorCode.INTERNAL,
    ErrorKind.UNKNOWN: https_fn.FunctionsErrorCode.UNKNOWN,
}

initialize_app()


def _to_https_error(error: TrackerError) -> https_fn.HttpsError:
    return https_fn.HttpsError(ERROR_CODES[error.kind], error.message)


def _caller_uid(req: https_fn.CallableRequest) -> Optional[str]:
    """Returns the uid of the signed-in caller, or None."""
    if req.auth and getattr(req.auth, "uid", None):
        return req.auth.uid
    return None


@identity_fn.before_user_created()
def create_new_user(event: identity_fn.AuthBlockingEvent) -> None:
    """
    Creates the profile and day-zero log for a newly registered account.

    Failures are logged only; account creation is never blocked.
    """
    user = event.data
    logger.log(f"Creating new user with {user.email}")
    profile_created, log_created = users.initialize_user(
        get_db_client(),
        NewUser(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            photo_url=user.photo_url,
        ),
    )
    if profile_created and log_created:
        logger.log(f"Successfully created new user document for UID: {user.uid}")
    else:
        logger.error(
            f"Partially initialized user {user.uid}: "
            f"profile={profile_created}, log={log_created}"
        )


@scheduler_fn.on_schedule(
    schedule=ROLLOVER_SCHEDULE,
    timezone=scheduler_fn.Timezone(TIME_ZONE),
    timeout_sec=ROLLOVER_TIMEOUT_SEC,
    memory=options.MemoryOption.MB_512,
)
def daily_rollover(event: scheduler_fn.ScheduledEvent) -> None:
    """Opens today's log for every user and updates streaks."""
    summary = rollover.run_daily_rollover(
        get_db_client(), max_workers=get_settings().rollover_max_workers
    )
    if summary.failed:
        logger.warn(f"Daily rollover finished with {summary.failed} failed users")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def invite_friend(req: https_fn.CallableRequest) -> dict:
    """
    Sends a friend invitation from the caller to `friendId`.

    Returns:
        {"success": bool, "message": str}
    """
    data = req.data or {}
    try:
        result = invitations.send_invitation(
            get_db_client(),
            get_notifier(),
            invitee_id=data.get("friendId"),
            caller_id=_caller_uid(req),
        )
    except TrackerError as e:
        raise _to_https_error(e)
    return convert_keys(asdict(result), "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def handle_invitation(req: https_fn.CallableRequest) -> dict:
    """
    Accepts or rejects the invitation sent by `friendId`.

    Returns:
        {"success": bool, "message": str}
    """
    data = req.data or {}
    accept = data.get("accept")
    if not isinstance(accept, bool):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Must specify boolean accept parameter.",
        )

    try:
        result = invitations.respond_to_invitation(
            get_db_client(),
            get_notifier(),
            inviter_id=data.get("friendId"),
            caller_id=_caller_uid(req),
            accept=accept,
        )
    except TrackerError as e:
        raise _to_https_error(e)
    return convert_keys(asdict(result), "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def dashboard(req: https_fn.CallableRequest) -> dict:
    """
    Returns the caller's statistics for the `type` window (year/month/week).
    """
    data = req.data or {}
    try:
        stats = dashboard_service.get_dashboard(
            get_db_client(),
            caller_id=_caller_uid(req),
            window=data.get("type") or DashboardWindow.YEAR,
        )
    except TrackerError as e:
        raise _to_https_error(e)
    return convert_keys(asdict(stats), "snake_to_camel")
