from __future__ import annotations
import logging

import discord
from discord import app_commands, Interaction

from okcoin.domain.failures import Failure
from okcoin.domain.referrals import REFERRED_BONUS
from okcoin.modules.common.format import fmt_coins
from okcoin.modules.common.session import NOT_STARTED_MSG, engine_of, current_user

log = logging.getLogger(__name__)

MAX_LISTED = 10

def apply_code(engine, user: dict, code: int | None) -> str | None:
    """
    Applique un code parrain (= id joueur du parrain) à un nouveau joueur.
    Validation côté bot: pas d'auto-parrainage, parrain existant, filleul pas déjà parrainé.
    Renvoie un message à afficher, ou None si aucun code.
    """
    if code is None:
        return None
    if int(code) == user["id"]:
        return "😅 Tu peux pas être ton propre parrain."
    if user.get("referred_by") is not None:
        return "ℹ️ Tu as déjà un parrain."
    if engine.get_user(int(code)) is None:
        return "❓ Code parrain inconnu."

    _, failure = engine.create_referral(int(code), user["id"])
    if failure is Failure.DUPLICATE:
        return "ℹ️ Ce parrainage existe déjà."
    if failure is not None:
        log.warning("Parrainage refusé (%s): code=%s user=%s", failure, code, user["id"])
        return "⚠️ Parrainage impossible."
    return f"🎁 Parrainage validé: **+{fmt_coins(REFERRED_BONUS)}** pour toi !"

def referral_embed(user: dict, referrals: list[dict], reward: int) -> discord.Embed:
    e = discord.Embed(title="👥 Parrainage", color=discord.Color.blurple())
    e.description = (
        f"Ton code parrain: **`{user['id']}`**\n"
        f"Tes amis le passent à `/start code:{user['id']}`.\n\n"
        f"💰 Par ami: **+{fmt_coins(reward)}**\n"
        f"🎁 Ton ami reçoit: **+{fmt_coins(REFERRED_BONUS)}**"
    )
    e.add_field(name="Invités", value=str(user["referral_count"]), inline=True)
    e.add_field(name="Gagné", value=fmt_coins(user["referral_earnings"]), inline=True)
    if referrals:
        lines = []
        for r in referrals[:MAX_LISTED]:
            ru = r.get("referred_user")
            lines.append(f"• **{ru['username']}** — {fmt_coins(ru['coins'])}" if ru else f"• #{r['referred_id']}")
        e.add_field(name="Tes filleuls", value="\n".join(lines), inline=False)
    return e

async def show_referrals(inter: Interaction) -> bool:
    user = current_user(inter)
    if user is None:
        await inter.response.send_message(NOT_STARTED_MSG, ephemeral=True)
        return False
    engine = engine_of(inter)
    referrals = engine.get_user_referrals(user["id"])
    await inter.response.send_message(
        embed=referral_embed(user, referrals, engine.config.referral_reward), ephemeral=True
    )
    return True

def register(tree: app_commands.CommandTree, guild_obj: discord.Object | None, client: discord.Client | None = None):
    @tree.command(name="parrainage", description="Invite des amis et gagnez des coins tous les deux")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def cmd_parrainage(inter: Interaction):
        await show_referrals(inter)
