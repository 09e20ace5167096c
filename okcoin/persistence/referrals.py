from __future__ import annotations

from ..core.db.base import Store
from ..domain.clock import now as clock_now

def exists(store: Store, referrer_id: int, referred_id: int) -> bool:
    return (int(referrer_id), int(referred_id)) in store.referral_pairs

def add_once(store: Store, referrer_id: int, referred_id: int, reward: int) -> dict | None:
    """Insère la paire une seule fois. None si elle existe déjà."""
    key = (int(referrer_id), int(referred_id))
    with store.write():
        if key in store.referral_pairs:
            return None
        rid = store.next_id("referrals")
        row = {
            "id": rid,
            "referrer_id": key[0],
            "referred_id": key[1],
            "reward": int(reward),
            "created_at": clock_now(),
        }
        store.referrals[rid] = row
        store.referral_pairs[key] = rid
    return dict(row)

def for_referrer(store: Store, referrer_id: int) -> list[dict]:
    return [dict(r) for r in list(store.referrals.values()) if r["referrer_id"] == int(referrer_id)]
