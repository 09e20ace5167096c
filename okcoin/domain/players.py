import logging
from datetime import datetime
from typing import Optional

from ..core.db.base import Store
from ..persistence import users as repo
from . import energy as d_energy
from .failures import Failure

log = logging.getLogger(__name__)

def create_or_get(store: Store, username: str) -> dict:
    """Idempotent sur le username: renvoie l'existant tel quel, sinon crée."""
    with store.write():
        existing = repo.get_by_username(store, username)
        if existing is not None:
            return existing
        user = repo.create(store, username)
    log.info("Nouveau joueur #%s (%s)", user["id"], username)
    return user

def register(store: Store, username: str) -> tuple[Optional[dict], Optional[Failure]]:
    """Création stricte: un username déjà pris => DUPLICATE, l'existant n'est pas renvoyé."""
    with store.write():
        if repo.get_by_username(store, username) is not None:
            return None, Failure.DUPLICATE
        user = repo.create(store, username)
    log.info("Nouveau joueur #%s (%s)", user["id"], username)
    return user, None

def get(store: Store, user_id: int, at: Optional[datetime] = None) -> Optional[dict]:
    return d_energy.reconcile(store, user_id, at)

def update(store: Store, user_id: int, **fields) -> Optional[dict]:
    with store.atomic(user_id):
        return repo.update(store, user_id, **fields)

def add_coins(store: Store, user_id: int, amount: int) -> Optional[dict]:
    with store.atomic(user_id):
        cur = repo.get(store, user_id)
        if cur is None:
            return None
        return repo.update(store, user_id, coins=max(0, cur["coins"] + int(amount)))

def count(store: Store) -> int:
    return repo.count(store)
