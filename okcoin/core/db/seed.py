# okcoin/core/db/seed.py — tâches par défaut, posées une fois au boot
from __future__ import annotations

from okcoin.core.db.base import Store
from okcoin.persistence import tasks as repo_tasks

DEFAULT_TASKS = (
    {
        "title": "Share with 5 friends",
        "description": "Invite friends to earn bonus coins",
        "reward": 500,
        "icon": "fas fa-share",
        "type": "share",
        "target": 5,
        "is_active": True,
    },
    {
        "title": "Reach 1000 coins",
        "description": "Tap your way to 1000 coins",
        "reward": 200,
        "icon": "fas fa-check",
        "type": "tap",
        "target": 1000,
        "is_active": True,
    },
    {
        "title": "Join the community",
        "description": "Stay updated with latest news",
        "reward": 300,
        "icon": "fab fa-discord",
        "type": "join",
        "target": None,
        "is_active": True,
    },
)

def seed_if_needed(store: Store) -> int:
    """Pose les tâches par défaut si la table est vide. Renvoie le nombre créé."""
    if store.tasks:
        return 0
    for t in DEFAULT_TASKS:
        repo_tasks.create(store, **t)
    return len(DEFAULT_TASKS)
