from __future__ import annotations
from typing import Optional

from ..core.db.base import Store
from ..domain.clock import now as clock_now

def create(store: Store, username: str, **fields) -> dict:
    ts = clock_now()
    with store.write():
        uid = store.next_id("users")
        row = {
            "coins": 0,
            "energy": 1000,
            "max_energy": 1000,
            "level": 1,
            "total_taps": 0,
            "coins_per_tap": 1,
            "referral_count": 0,
            "referral_earnings": 0,
            "referred_by": None,
            "last_energy_update": ts,
            "created_at": ts,
            **fields,
            "id": uid,
            "username": username,
        }
        store.users[uid] = row
        store.usernames[username] = uid
    return dict(row)

def get(store: Store, user_id: int) -> Optional[dict]:
    row = store.users.get(int(user_id))
    return dict(row) if row is not None else None

def get_by_username(store: Store, username: str) -> Optional[dict]:
    uid = store.usernames.get(username)
    return get(store, uid) if uid is not None else None

def update(store: Store, user_id: int, **fields) -> Optional[dict]:
    # id / username / created_at immuables
    for k in ("id", "username", "created_at"):
        fields.pop(k, None)
    with store.write():
        cur = store.users.get(int(user_id))
        if cur is None:
            return None
        row = {**cur, **fields}
        store.users[int(user_id)] = row
    return dict(row)

def all_users(store: Store) -> list[dict]:
    return [dict(r) for r in list(store.users.values())]

def count(store: Store) -> int:
    return len(store.users)
