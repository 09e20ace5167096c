"""Pydantic request/response models for the HTTP adapter (camelCase JSON)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ──


class CreateUserRequest(ApiModel):
    username: str = Field(min_length=1, max_length=64)


class CreateReferralRequest(ApiModel):
    referrer_id: int = Field(ge=1)
    referred_id: int = Field(ge=1)
    reward: int | None = Field(default=None, ge=0)


# ── Responses ──


class UserResponse(ApiModel):
    id: int
    username: str
    coins: int
    energy: int
    max_energy: int
    level: int
    total_taps: int
    coins_per_tap: int
    referral_count: int
    referral_earnings: int
    referred_by: int | None
    last_energy_update: datetime
    created_at: datetime


class RankedUserResponse(UserResponse):
    rank: int


class TaskResponse(ApiModel):
    id: int
    title: str
    description: str
    reward: int
    icon: str
    type: str
    target: int | None
    is_active: bool
    created_at: datetime


class TaskProgressResponse(TaskResponse):
    progress: int
    completed: bool


class ReferralResponse(ApiModel):
    id: int
    referrer_id: int
    referred_id: int
    reward: int
    created_at: datetime


class ReferredUserResponse(ApiModel):
    id: int
    username: str
    coins: int
    level: int


class ReferralWithUserResponse(ReferralResponse):
    referred_user: ReferredUserResponse | None


class RankResponse(ApiModel):
    rank: int


class HealthResponse(ApiModel):
    status: str
    timestamp: datetime
    users: int
    tasks: int


class ValidationIssue(ApiModel):
    loc: list[str | int]
    msg: str


class MessageResponse(ApiModel):
    """Body of every error response; `errors` only on validation failures."""

    message: str
    errors: list[ValidationIssue] | None = None
