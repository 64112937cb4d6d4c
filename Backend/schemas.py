"""
Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

# Integer columns are 32-bit; the float caps keep the weighted score finite
INT32_MIN = -2**31
INT32_MAX = 2**31 - 1
MAX_MONEY = 1e15
MAX_REPUTATION = 1e12


def _strip_name(value):
    if isinstance(value, str):
        value = value.strip()
    return value


# ── Request Schemas ──────────────────────────────────────────────

class CreatePlayerRequest(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=64)

    strip_display_name = field_validator("display_name", mode="before")(_strip_name)


class RecoverRequest(BaseModel):
    passphrase: str = Field(..., min_length=1, max_length=32)


class CredentialsRequest(BaseModel):
    """Body of both register and login."""

    username: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=8, max_length=128)


class UpdatePlayerRequest(BaseModel):
    """Partial profile update: omitted fields keep their stored value."""

    display_name: Optional[str] = Field(default=None, min_length=1, max_length=64)
    show_on_leaderboard: Optional[bool] = None

    strip_display_name = field_validator("display_name", mode="before")(_strip_name)


class ScoreSubmission(BaseModel):
    """The client's current progress; every field is merged upward only."""

    total_money_earned: float = Field(..., ge=0, le=MAX_MONEY, allow_inf_nan=False)
    reputation: float = Field(..., ge=0, le=MAX_REPUTATION, allow_inf_nan=False)
    skill_levels_sum: int = Field(..., ge=0, le=INT32_MAX)
    consultants_count: int = Field(..., ge=0, le=INT32_MAX)
    ai_tool_tiers_sum: int = Field(..., ge=0, le=INT32_MAX)
    manual_tasks_completed: int = Field(..., ge=0, le=INT32_MAX)


class SaveUpload(BaseModel):
    save_data: Any
    version: int = Field(..., ge=INT32_MIN, le=INT32_MAX)


# ── Response Schemas ─────────────────────────────────────────────

class CreatePlayerResponse(BaseModel):
    id: str
    passphrase: str
    token: str


class AuthResponse(BaseModel):
    id: str
    display_name: str
    token: str


class MessageResponse(BaseModel):
    message: str


class LeaderboardEntry(BaseModel):
    """A single entry in the leaderboard response."""

    rank: int
    display_name: str
    score: float
    total_money_earned: float
    reputation: float
    skill_levels_sum: int
    consultants_count: int
    ai_tool_tiers_sum: int
    manual_tasks_completed: int


class LeaderboardResponse(BaseModel):
    """Top players plus the caller's own standing when known."""

    entries: list[LeaderboardEntry]
    player_rank: Optional[int] = None
    player_score: Optional[float] = None


class SaveDownload(BaseModel):
    save_data: Any
    version: int
    updated_at: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
