"""
Pydantic schemas for the tracker FastAPI backend.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class InviteFriendRequest(BaseModel):
    friend_id: Optional[str] = Field(default=None, max_length=128)


class HandleInvitationRequest(BaseModel):
    friend_id: Optional[str] = Field(default=None, max_length=128)
    accept: bool


class InvitationResponse(BaseModel):
    success: bool
    message: str


class DashboardResponse(BaseModel):
    total_smoked_cigarettes: int
    total_smoke_free_days: int
    money_saved: str
    streak: int
    achievements: List[str]
