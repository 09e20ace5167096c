# okcoin/domain/tasks.py
from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional

from ..core.db.base import Store
from ..persistence import tasks as repo_tasks
from ..persistence import user_tasks as repo_progress
from ..persistence import users as repo_users
from . import players as d_players
from .failures import Failure

log = logging.getLogger(__name__)

# Trois étapes distinctes, composées par les appelants:
#   progression (update_progress) → seuil (is_met) → récompense (complete)

def list_active(store: Store) -> list[dict]:
    return repo_tasks.list_active(store)

def get_active(store: Store, task_id: int) -> Optional[dict]:
    task = repo_tasks.get(store, task_id)
    return task if task and task["is_active"] else None

def get_progress(store: Store, user_id: int, task_id: int) -> Optional[dict]:
    """None = aucune progression enregistrée (différent d'une progression à 0)."""
    return repo_progress.get(store, user_id, task_id)

def update_progress(store: Store, user_id: int, task_id: int, progress: int) -> dict:
    with store.atomic(user_id):
        return repo_progress.upsert_progress(store, user_id, task_id, progress)

def with_progress(store: Store, user_id: int) -> list[dict]:
    rows = {r["task_id"]: r for r in repo_progress.for_user(store, user_id)}
    out: list[dict] = []
    for task in list_active(store):
        row = rows.get(task["id"])
        out.append({
            **task,
            "progress": row["progress"] if row else 0,
            "completed": row["completed"] if row else False,
        })
    return out

def measure(task: dict, user: dict) -> Optional[int]:
    """Progression observable selon le type; None pour une tâche binaire."""
    kind = task["type"]
    if kind == "tap":
        return int(user["coins"])
    if kind == "share":
        return int(user["referral_count"])
    return None

def is_met(task: dict, progress: Optional[int]) -> bool:
    target = task.get("target")
    if target is None:
        return True
    return progress is not None and progress >= int(target)

def complete(store: Store, user_id: int, task_id: int) -> tuple[Optional[dict], Optional[Failure]]:
    """
    Marque la tâche terminée et crédite task.reward. Transition à sens unique:
    un second appel renvoie ALREADY_COMPLETED sans double récompense.
    Ne vérifie PAS le seuil (voir claim).
    """
    with store.atomic(user_id):
        user = repo_users.get(store, user_id)
        task = get_active(store, task_id)
        if user is None or task is None:
            return None, Failure.NOT_FOUND

        row = repo_progress.get(store, user_id, task_id)
        if row and row["completed"]:
            return None, Failure.ALREADY_COMPLETED

        repo_progress.mark_completed(store, user_id, task_id)
        user = d_players.add_coins(store, user_id, task["reward"])
    log.info("Tâche #%s terminée par #%s (+%s)", task_id, user_id, task["reward"])
    return user, None

def claim(store: Store, user_id: int, task_id: int,
          at: Optional[datetime] = None) -> tuple[Optional[dict], Optional[Failure]]:
    """Flux complet: mesure → enregistre la progression → teste le seuil → complète."""
    with store.atomic(user_id):
        user = d_players.get(store, user_id, at)
        task = get_active(store, task_id)
        if user is None or task is None:
            return None, Failure.NOT_FOUND

        row = repo_progress.get(store, user_id, task_id)
        if row and row["completed"]:
            return None, Failure.ALREADY_COMPLETED

        progress = measure(task, user)
        if progress is not None:
            repo_progress.upsert_progress(store, user_id, task_id, progress)
        if not is_met(task, progress):
            return None, Failure.NOT_READY
        return complete(store, user_id, task_id)

def apply_tap_progress(store: Store, user: dict) -> tuple[dict, int]:
    """
    Après un tap réussi: la 1re tâche active de type "tap" prend les coins comme
    progression; seuil atteint et pas encore terminée => complétée + créditée.
    Renvoie (joueur, récompense créditée par ce tap, 0 sinon).
    """
    tap_task = next((t for t in list_active(store) if t["type"] == "tap"), None)
    if tap_task is None:
        return user, 0
    with store.atomic(user["id"]):
        repo_progress.upsert_progress(store, user["id"], tap_task["id"], user["coins"])
        if user["coins"] < int(tap_task["target"] or 0):
            return user, 0
        done, failure = complete(store, user["id"], tap_task["id"])
    if failure is not None or done is None:
        return user, 0
    return done, int(tap_task["reward"])

def count(store: Store) -> int:
    return repo_tasks.count(store)
