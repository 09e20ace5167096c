# okcoin/modules/common/identity.py — id Discord → id joueur interne
from __future__ import annotations
import threading
from typing import Optional


class IdentityMap:
    """
    Table d'association côté bot uniquement (le moteur ne voit jamais d'id Discord).
    Non propriétaire: oublier une entrée ne supprime pas le joueur.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_discord: dict[int, int] = {}

    def get(self, discord_id: int) -> Optional[int]:
        return self._by_discord.get(int(discord_id))

    def bind(self, discord_id: int, user_id: int) -> None:
        with self._lock:
            self._by_discord[int(discord_id)] = int(user_id)

    def forget(self, discord_id: int) -> None:
        with self._lock:
            self._by_discord.pop(int(discord_id), None)

    def __len__(self) -> int:
        return len(self._by_discord)
