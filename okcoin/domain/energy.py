# okcoin/domain/energy.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from ..core.db.base import Store
from ..persistence import users as repo
from .clock import now as clock_now, elapsed_seconds

REGEN_PER_SECOND = 1

def regenerated(energy: int, max_energy: int, last_update: datetime, at: datetime) -> int:
    """Énergie à rendre depuis last_update (1/s, plafonnée à max_energy)."""
    gained = elapsed_seconds(last_update, at) * REGEN_PER_SECOND
    return max(0, min(gained, int(max_energy) - int(energy)))

def reconcile(store: Store, user_id: int, at: Optional[datetime] = None) -> Optional[dict]:
    """
    Rattrape l'énergie du joueur à l'instant `at` (lazy, pas de ticker).
    Rien à ajouter => enregistrement inchangé, last_energy_update NON avancé
    (les fractions de seconde restent acquises pour le prochain appel).
    """
    at = at or clock_now()
    with store.atomic(user_id):
        user = repo.get(store, user_id)
        if user is None:
            return None
        add = regenerated(user["energy"], user["max_energy"], user["last_energy_update"], at)
        if add <= 0:
            return user
        return repo.update(
            store,
            user_id,
            energy=min(user["max_energy"], user["energy"] + add),
            last_energy_update=at,
        )
