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
from typing import Optional, Tuple

from backend.db import DbClient, UserTransaction
from backend.notifications import Notifier, notify_best_effort
from shared.constants import MAX_USER_ID_LENGTH
from shared.errors import ErrorKind, TrackerError
from shared.types import InvitationResult, UserProfile

logger = logging.getLogger(__name__)


def _validate_ids(friend_id: Optional[str], caller_id: Optional[str]) -> Tuple[str, str]:
    """Returns the stripped (friend_id, caller_id) or raises TrackerError."""
    friend_id = friend_id.strip() if isinstance(friend_id, str) else ""
    if not friend_id:
        raise TrackerError(
            ErrorKind.INVALID_ARGUMENT, "Must specify friendId parameter."
        )
    if len(friend_id) > MAX_USER_ID_LENGTH or "/" in friend_id:
        raise TrackerError(ErrorKind.INVALID_ARGUMENT, "Incorrect friendId.")

    caller_id = (caller_id or "").strip()
    if not caller_id:
        raise TrackerError(
            ErrorKind.UNAUTHENTICATED, "The function must be called while authenticated."
        )
    if friend_id == caller_id:
        raise TrackerError(
            ErrorKind.INVALID_ARGUMENT, "You cannot send an invitation to yourself."
        )
    return friend_id, caller_id


def send_invitation(
    db: DbClient,
    notifier: Notifier,
    invitee_id: Optional[str],
    caller_id: Optional[str],
) -> InvitationResult:
    """
    Adds the caller to the invitee's pending invitations.

    Repeated invitations are harmless: the pending list behaves as a set.
    If the two users are already friends nothing is written and an
    unsuccessful (but non-error) result is returned.

    Raises:
        TrackerError: INVALID_ARGUMENT / UNAUTHENTICATED on bad input,
            NOT_FOUND if either user is missing, UNKNOWN on any other failure.
    """
    invitee_id, caller_id = _validate_ids(invitee_id, caller_id)

    try:
        caller = db.get_user(caller_id)
        if caller is None:
            raise TrackerError(ErrorKind.NOT_FOUND, "Your user record was not found.")
        invitee = db.get_user(invitee_id)
        if invitee is None:
            raise TrackerError(
                ErrorKind.NOT_FOUND, "The invited user was not found."
            )

        if caller_id in invitee.friends:
            return InvitationResult(success=False, message="You are already friends.")

        db.add_invitation(invitee_id, caller_id)
    except TrackerError:
        raise
    except Exception as e:
        logger.error(f"Failed to invite {invitee_id} on behalf of {caller_id}: {e}")
        raise TrackerError(ErrorKind.UNKNOWN, f"Failed to send invitation: {e}")

    logger.info(f"User {caller_id} invited {invitee_id}")
    notify_best_effort(
        notifier,
        invitee.fcm_token,
        "New friend invitation",
        f"{caller.name} wants to be your friend.",
    )
    return InvitationResult(success=True, message="Invitation sent.")


def respond_to_invitation(
    db: DbClient,
    notifier: Notifier,
    inviter_id: Optional[str],
    caller_id: Optional[str],
    accept: bool,
) -> InvitationResult:
    """
    Accepts or rejects the invitation `inviter_id` sent to the caller.

    The pending invitation is removed and, on acceptance, both friends lists
    are extended inside one transaction, so a friendship is never visible on
    one side only. The acceptance notification is sent after the transaction
    commits, which keeps it out of transaction retries.

    Raises:
        TrackerError: INVALID_ARGUMENT / UNAUTHENTICATED on bad input,
            NOT_FOUND if either user is missing, INTERNAL if the transaction
            fails.
    """
    inviter_id, caller_id = _validate_ids(inviter_id, caller_id)

    def _apply(transaction: UserTransaction) -> Tuple[UserProfile, UserProfile]:
        caller = transaction.get_user(caller_id)
        inviter = transaction.get_user(inviter_id)
        if caller is None or inviter is None:
            raise TrackerError(ErrorKind.NOT_FOUND, "User record was not found.")

        if inviter_id in caller.invitations:
            transaction.remove_invitation(caller_id, inviter_id)
        if accept:
            transaction.add_friend(caller_id, inviter_id)
            transaction.add_friend(inviter_id, caller_id)
        return caller, inviter

    try:
        caller, inviter = db.run_transaction(_apply)
    except TrackerError:
        raise
    except Exception as e:
        logger.error(
            f"Transaction failed handling invitation {inviter_id} -> {caller_id}: {e}"
        )
        raise TrackerError(ErrorKind.INTERNAL, f"Failed to handle invitation: {e}")

    if not accept:
        logger.info(f"User {caller_id} rejected invitation from {inviter_id}")
        return InvitationResult(success=True, message="Invitation rejected.")

    logger.info(f"User {caller_id} accepted invitation from {inviter_id}")
    notify_best_effort(
        notifier,
        inviter.fcm_token,
        "Invitation accepted",
        f"{caller.name} accepted your friend invitation.",
    )
    return InvitationResult(success=True, message="Invitation accepted.")
