import logging
from typing import Optional

from ..core.db.base import Store
from ..persistence import referrals as repo
from ..persistence import users as repo_users
from .failures import Failure

log = logging.getLogger(__name__)

REFERRED_BONUS = 500  # cadeau fixe pour le filleul

def create(store: Store, referrer_id: int, referred_id: int, reward: int, *,
           require_both: bool = False) -> tuple[Optional[dict], Optional[Failure]]:
    """
    Enregistre le parrainage (une seule fois par paire) puis crédite les deux côtés.

    Politique d'échec partiel: par défaut un côté absent est simplement sauté
    (warning) et le parrainage reste enregistré. Avec require_both=True, un
    côté absent => NOT_FOUND et rien n'est écrit.
    """
    if reward < 0:
        raise ValueError("reward must be >= 0")

    with store.atomic(referrer_id, referred_id):
        referrer = repo_users.get(store, referrer_id)
        referred = repo_users.get(store, referred_id)
        if require_both and (referrer is None or referred is None):
            return None, Failure.NOT_FOUND

        referral = repo.add_once(store, referrer_id, referred_id, reward)
        if referral is None:
            return None, Failure.DUPLICATE

        if referrer is not None:
            repo_users.update(
                store,
                referrer_id,
                coins=referrer["coins"] + reward,
                referral_count=referrer["referral_count"] + 1,
                referral_earnings=referrer["referral_earnings"] + reward,
            )
        else:
            log.warning("Parrainage #%s: parrain #%s introuvable, crédit sauté", referral["id"], referrer_id)

        # relu après le crédit parrain (même ligne si referrer_id == referred_id)
        referred = repo_users.get(store, referred_id)
        if referred is not None:
            repo_users.update(
                store,
                referred_id,
                coins=referred["coins"] + REFERRED_BONUS,
                referred_by=int(referrer_id),
            )
        else:
            log.warning("Parrainage #%s: filleul #%s introuvable, bonus sauté", referral["id"], referred_id)

    log.info("Parrainage #%s: #%s → #%s (+%s / +%s)",
             referral["id"], referrer_id, referred_id, reward, REFERRED_BONUS)
    return referral, None

def _snapshot(user: Optional[dict]) -> Optional[dict]:
    if user is None:
        return None
    return {k: user[k] for k in ("id", "username", "coins", "level")}

def list_for_user(store: Store, user_id: int) -> list[dict]:
    """Parrainages faits par le joueur, avec un instantané du filleul lu maintenant."""
    return [
        {**r, "referred_user": _snapshot(repo_users.get(store, r["referred_id"]))}
        for r in repo.for_referrer(store, user_id)
    ]
