# okcoin/core/models.py — forme des enregistrements du store (dicts simples)
from __future__ import annotations
from datetime import datetime
from typing import Optional, TypedDict


class User(TypedDict):
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
    referred_by: Optional[int]
    last_energy_update: datetime
    created_at: datetime


class Task(TypedDict):
    id: int
    title: str
    description: str
    reward: int
    icon: str
    type: str  # "tap" | "share" | "join"
    target: Optional[int]
    is_active: bool
    created_at: datetime


class UserTask(TypedDict):
    id: int
    user_id: int
    task_id: int
    progress: int
    completed: bool
    completed_at: Optional[datetime]
    created_at: datetime


class Referral(TypedDict):
    id: int
    referrer_id: int
    referred_id: int
    reward: int
    created_at: datetime


class ReferredSnapshot(TypedDict):
    id: int
    username: str
    coins: int
    level: int


class ReferralWithUser(Referral):
    referred_user: Optional[ReferredSnapshot]


class TaskWithProgress(Task):
    progress: int
    completed: bool


class RankedUser(User):
    rank: int
