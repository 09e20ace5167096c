from __future__ import annotations
from typing import Optional

from ..core.db.base import Store
from ..domain.clock import now as clock_now

def create(store: Store, *, title: str, description: str, reward: int, icon: str,
           type: str, target: Optional[int] = None, is_active: bool = True) -> dict:
    with store.write():
        tid = store.next_id("tasks")
        row = {
            "id": tid,
            "title": title,
            "description": description,
            "reward": int(reward),
            "icon": icon,
            "type": type,
            "target": None if target is None else int(target),
            "is_active": bool(is_active),
            "created_at": clock_now(),
        }
        store.tasks[tid] = row
    return dict(row)

def get(store: Store, task_id: int) -> Optional[dict]:
    row = store.tasks.get(int(task_id))
    return dict(row) if row is not None else None

def list_active(store: Store) -> list[dict]:
    # ordre d'insertion (dict)
    return [dict(t) for t in list(store.tasks.values()) if t["is_active"]]

def count(store: Store) -> int:
    return len(store.tasks)
