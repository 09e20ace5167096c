# okcoin/core/engine.py — façade unique consommée par le bot et l'API HTTP
from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional, cast

from okcoin.core.config import Settings, settings as default_settings
from okcoin.core.db.base import Store
from okcoin.core.db.seed import seed_if_needed
from okcoin.core.models import RankedUser, Referral, ReferralWithUser, Task, TaskWithProgress, User, UserTask
from okcoin.domain import economy as d_economy
from okcoin.domain import players as d_players
from okcoin.domain import referrals as d_referrals
from okcoin.domain import tasks as d_tasks
from okcoin.domain.failures import Failure

log = logging.getLogger(__name__)


class GameEngine:
    # Les opérations qui peuvent échouer renvoient (valeur, None) ou (None, Failure).

    def __init__(self, store: Store, config: Settings | None = None):
        self.store = store
        self.config = config or default_settings

    @classmethod
    def open(cls, config: Settings | None = None) -> "GameEngine":
        """Store neuf + tâches par défaut. Un seul appel au boot du process."""
        store = Store()
        created = seed_if_needed(store)
        log.info("Store initialisé (%d tâches par défaut)", created)
        return cls(store, config)

    def close(self) -> None:
        self.store.clear()
        log.info("Store vidé")

    # Joueurs
    def create_or_get_user(self, username: str) -> User:
        return cast(User, d_players.create_or_get(self.store, username))

    def register_user(self, username: str) -> tuple[Optional[User], Optional[Failure]]:
        user, failure = d_players.register(self.store, username)
        return cast(Optional[User], user), failure

    def get_user(self, user_id: int, at: Optional[datetime] = None) -> Optional[User]:
        return cast(Optional[User], d_players.get(self.store, user_id, at))

    def update_user(self, user_id: int, **fields) -> Optional[User]:
        return cast(Optional[User], d_players.update(self.store, user_id, **fields))

    def count_users(self) -> int:
        return d_players.count(self.store)

    # Tap
    def tap(self, user_id: int, at: Optional[datetime] = None) -> tuple[Optional[User], Optional[Failure]]:
        user, failure = d_economy.tap(self.store, user_id, at)
        return cast(Optional[User], user), failure

    def tap_with_bonus(self, user_id: int,
                       at: Optional[datetime] = None) -> tuple[Optional[User], int, Optional[Failure]]:
        """Comme tap, plus la récompense de tâche "tap" créditée par ce tap (0 sinon)."""
        user, bonus, failure = d_economy.tap_with_bonus(self.store, user_id, at)
        return cast(Optional[User], user), bonus, failure

    # Tâches
    def list_active_tasks(self) -> list[Task]:
        return cast(list[Task], d_tasks.list_active(self.store))

    def count_tasks(self) -> int:
        return d_tasks.count(self.store)

    def get_task_progress(self, user_id: int, task_id: int) -> Optional[UserTask]:
        return cast(Optional[UserTask], d_tasks.get_progress(self.store, user_id, task_id))

    def update_task_progress(self, user_id: int, task_id: int, progress: int) -> UserTask:
        return cast(UserTask, d_tasks.update_progress(self.store, user_id, task_id, progress))

    def get_user_tasks_with_progress(self, user_id: int) -> list[TaskWithProgress]:
        return cast(list[TaskWithProgress], d_tasks.with_progress(self.store, user_id))

    def complete_task(self, user_id: int, task_id: int) -> tuple[Optional[User], Optional[Failure]]:
        user, failure = d_tasks.complete(self.store, user_id, task_id)
        return cast(Optional[User], user), failure

    def claim_task(self, user_id: int, task_id: int,
                   at: Optional[datetime] = None) -> tuple[Optional[User], Optional[Failure]]:
        user, failure = d_tasks.claim(self.store, user_id, task_id, at)
        return cast(Optional[User], user), failure

    # Parrainage
    def create_referral(self, referrer_id: int, referred_id: int,
                        reward: Optional[int] = None) -> tuple[Optional[Referral], Optional[Failure]]:
        referral, failure = d_referrals.create(
            self.store,
            referrer_id,
            referred_id,
            self.config.referral_reward if reward is None else int(reward),
            require_both=self.config.referral_require_both,
        )
        return cast(Optional[Referral], referral), failure

    def get_user_referrals(self, user_id: int) -> list[ReferralWithUser]:
        return cast(list[ReferralWithUser], d_referrals.list_for_user(self.store, user_id))

    # Classement
    def get_leaderboard(self, limit: int = d_economy.LEADERBOARD_DEFAULT) -> list[RankedUser]:
        return cast(list[RankedUser], d_economy.leaderboard(self.store, int(limit)))

    def get_user_rank(self, user_id: int) -> int:
        return d_economy.rank(self.store, user_id)
