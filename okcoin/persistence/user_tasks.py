from __future__ import annotations
from typing import Optional

from ..core.db.base import Store
from ..domain.clock import now as clock_now

def get(store: Store, user_id: int, task_id: int) -> Optional[dict]:
    row = store.user_tasks.get(int(user_id), {}).get(int(task_id))
    return dict(row) if row is not None else None

def for_user(store: Store, user_id: int) -> list[dict]:
    return [dict(r) for r in list(store.user_tasks.get(int(user_id), {}).values())]

def _get_or_create(store: Store, user_id: int, task_id: int) -> dict:
    per_user = store.user_tasks.setdefault(int(user_id), {})
    row = per_user.get(int(task_id))
    if row is None:
        row = {
            "id": store.next_id("user_tasks"),
            "user_id": int(user_id),
            "task_id": int(task_id),
            "progress": 0,
            "completed": False,
            "completed_at": None,
            "created_at": clock_now(),
        }
        per_user[int(task_id)] = row
    return row

def upsert_progress(store: Store, user_id: int, task_id: int, progress: int) -> dict:
    with store.write():
        row = _get_or_create(store, user_id, task_id)
        row["progress"] = int(progress)
    return dict(row)

def mark_completed(store: Store, user_id: int, task_id: int) -> dict:
    with store.write():
        row = _get_or_create(store, user_id, task_id)
        row["completed"] = True
        row["completed_at"] = clock_now()
    return dict(row)
