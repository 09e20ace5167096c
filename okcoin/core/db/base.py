# okcoin/core/db/base.py — store mémoire (volatile, un seul propriétaire par process)
from __future__ import annotations
import itertools, threading
from contextlib import contextmanager, ExitStack
from typing import Any, Iterator


class Store:
    """
    Tables en mémoire, une par type d'entité, ids entiers croissants à partir de 1.
    Pas de règle métier ici: les repos de okcoin.persistence lisent/écrivent,
    le domaine valide.
    """

    # Pool fixe de verrous: un joueur = une bande (user_id % LOCK_STRIPES).
    LOCK_STRIPES = 64

    def __init__(self) -> None:
        self._guard = threading.RLock()
        self._stripes = tuple(threading.RLock() for _ in range(self.LOCK_STRIPES))
        self.clear()

    def clear(self) -> None:
        with self._guard:
            self.users: dict[int, dict[str, Any]] = {}
            self.usernames: dict[str, int] = {}
            self.tasks: dict[int, dict[str, Any]] = {}
            # user_id -> task_id -> ligne de progression
            self.user_tasks: dict[int, dict[int, dict[str, Any]]] = {}
            self.referrals: dict[int, dict[str, Any]] = {}
            # (referrer_id, referred_id) -> referral_id
            self.referral_pairs: dict[tuple[int, int], int] = {}
            self._ids = {
                "users": itertools.count(1),
                "tasks": itertools.count(1),
                "user_tasks": itertools.count(1),
                "referrals": itertools.count(1),
            }

    def next_id(self, table: str) -> int:
        with self._guard:
            return next(self._ids[table])

    @contextmanager
    def write(self) -> Iterator["Store"]:
        """Section critique courte sur les tables (index + ligne)."""
        with self._guard:
            yield self

    def _stripe_of(self, user_id: int) -> int:
        return int(user_id) % self.LOCK_STRIPES

    @contextmanager
    def atomic(self, *user_ids: int) -> Iterator["Store"]:
        """
        Exclusion mutuelle par joueur pour un read-modify-write composé.
        Bandes prises dans l'ordre croissant (pas d'interblocage à deux joueurs),
        ré-entrantes pour qu'une opération puisse en appeler une autre.
        Nombre de verrous borné quel que soit l'id demandé, joueur existant ou non.
        """
        with ExitStack() as stack:
            for stripe in sorted({self._stripe_of(u) for u in user_ids}):
                stack.enter_context(self._stripes[stripe])
            yield self
