"""
Caller identity for the FastAPI backend, taken from Firebase ID tokens.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header, HTTPException
from firebase_admin import auth

from backend.dependencies import ensure_firebase_app

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_caller_uid(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    Returns the uid from a `Bearer <id token>` header, or None if no token
    was sent. A token that fails verification is rejected with 401.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None

    token = authorization[len(BEARER_PREFIX):].strip()
    ensure_firebase_app()
    try:
        decoded = auth.verify_id_token(token)
    except (ValueError, auth.InvalidIdTokenError) as e:
        logger.info("Rejected ID token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid ID token.")
    return decoded.get("uid")
