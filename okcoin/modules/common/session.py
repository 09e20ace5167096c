# okcoin/modules/common/session.py — accès moteur/identités depuis une Interaction
from __future__ import annotations
from typing import TYPE_CHECKING, Optional

from discord import Interaction

if TYPE_CHECKING:
    from okcoin.core.engine import GameEngine
    from okcoin.modules.common.identity import IdentityMap

NOT_STARTED_MSG = "🛑 Lance **/start** d’abord."

def engine_of(inter: Interaction) -> "GameEngine":
    return inter.client.engine  # type: ignore[attr-defined]

def identities_of(inter: Interaction) -> "IdentityMap":
    return inter.client.identities  # type: ignore[attr-defined]

def user_id_of(inter: Interaction) -> Optional[int]:
    return identities_of(inter).get(inter.user.id)

def current_user(inter: Interaction) -> Optional[dict]:
    """Joueur lié à l'auteur de l'interaction, énergie rattrapée. None si pas de /start."""
    uid = user_id_of(inter)
    if uid is None:
        return None
    return engine_of(inter).get_user(uid)
