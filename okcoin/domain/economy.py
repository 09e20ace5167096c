# okcoin/domain/economy.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from ..core.db.base import Store
from ..persistence import users as repo
from . import energy as d_energy
from . import tasks as d_tasks
from .failures import Failure

LEADERBOARD_DEFAULT = 10
RANK_SCAN_LIMIT = 1000   # "tout le monde", en pratique
RANK_UNRANKED = 999

def tap(store: Store, user_id: int, at: Optional[datetime] = None) -> tuple[Optional[dict], Optional[Failure]]:
    user, _, failure = tap_with_bonus(store, user_id, at)
    return user, failure

def tap_with_bonus(store: Store, user_id: int,
                   at: Optional[datetime] = None) -> tuple[Optional[dict], int, Optional[Failure]]:
    """
    Action centrale: +coins_per_tap, -1 énergie, +1 tap, puis la règle des
    tâches "tap". Joueur inconnu et énergie à 0 renvoient le même échec.
    Le bonus est la récompense de tâche créditée dans la même section critique.
    """
    with store.atomic(user_id):
        user = d_energy.reconcile(store, user_id, at)
        if user is None or user["energy"] <= 0:
            return None, 0, Failure.NO_ENERGY_OR_NOT_FOUND

        user = repo.update(
            store,
            user_id,
            coins=user["coins"] + user["coins_per_tap"],
            energy=max(0, user["energy"] - 1),
            total_taps=user["total_taps"] + 1,
        )
        user, bonus = d_tasks.apply_tap_progress(store, user)
    return user, bonus, None

def leaderboard(store: Store, limit: int = LEADERBOARD_DEFAULT) -> list[dict]:
    """Classement par coins décroissants; ex æquo dans l'ordre d'inscription."""
    if limit <= 0:
        return []
    rows = sorted(repo.all_users(store), key=lambda u: u["coins"], reverse=True)
    return [{**u, "rank": i} for i, u in enumerate(rows[:limit], start=1)]

def rank(store: Store, user_id: int) -> int:
    for row in leaderboard(store, RANK_SCAN_LIMIT):
        if row["id"] == int(user_id):
            return row["rank"]
    return RANK_UNRANKED
