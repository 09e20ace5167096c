# okcoin/modules/game/start.py
from __future__ import annotations
import logging
from typing import Optional

import discord
from discord import app_commands, Interaction, Embed

from okcoin.modules.common.format import fmt_coins, fmt_energy
from okcoin.modules.common.session import NOT_STARTED_MSG, engine_of, identities_of, current_user
from okcoin.modules.game.economy import panel_embed, play_tap, show_balance, show_leaderboard
from okcoin.modules.game.referral import apply_code, show_referrals
from okcoin.modules.game.tasks import show_tasks

log = logging.getLogger(__name__)

PANEL_TIMEOUT_S = 300

WELCOME_INTRO = (
    "🎮 **Bienvenue dans OK Coin**, {mention} !\n"
    "💰 Solde: **{coins}**\n"
    "{energy}\n"
    "🏆 Niveau: **{level}**"
)

WELCOME_RULES = (
    "💎 /tap — gagne des coins (1 énergie)\n"
    "💰 /solde — ton capital\n"
    "👥 /parrainage — invite tes amis\n"
    "📋 /taches — objectifs bonus\n"
    "🏆 /classement — les plus riches"
)

NAME_TAKEN_MSG = "🛑 Impossible de créer ton joueur: pseudo déjà pris. Réessaie plus tard."

def _usernames_for(member: discord.abc.User) -> list[str]:
    base = member.name or f"user{member.id}"
    return [base, f"{base}#{member.id}"]

def register_player(inter: Interaction) -> tuple[dict | None, bool]:
    """
    Lie l'auteur à un joueur. Un compte Discord n'est jamais lié à un joueur
    qu'il n'a pas créé: pseudo pris => variante suffixée par l'id Discord.
    Renvoie (joueur, nouveau_lien); (None, False) si aucun pseudo n'est libre.
    """
    engine = engine_of(inter)
    identities = identities_of(inter)
    uid = identities.get(inter.user.id)
    if uid is not None:
        user = engine.get_user(uid)
        if user is not None:
            return user, False
    for name in _usernames_for(inter.user):
        user, failure = engine.register_user(name)
        if failure is None:
            break
    else:
        log.warning("Discord %s: aucun pseudo libre", inter.user.id)
        return None, False
    identities.bind(inter.user.id, user["id"])
    log.info("Lien Discord %s → joueur #%s", inter.user.id, user["id"])
    return user, True

# ─────────────────────────────
# Panneau de jeu
# ─────────────────────────────
class GameView(discord.ui.View):
    def __init__(self, owner_id: int):
        super().__init__(timeout=PANEL_TIMEOUT_S)
        self.owner_id = owner_id
        self.message: discord.Message | None = None

    async def _guard(self, inter: Interaction) -> bool:
        if inter.user.id != self.owner_id:
            await inter.response.send_message("🛑 Ce panneau n’est pas à toi. Fais **/jouer**.", ephemeral=True)
            return False
        return True

    async def on_timeout(self) -> None:
        if not self.message:
            return
        try:
            expired = discord.Embed(
                description="⏳ Panneau expiré. Relance **/jouer**.",
                color=discord.Color.dark_grey()
            )
            await self.message.edit(embed=expired, view=None)
        except discord.NotFound:
            pass

    @discord.ui.button(label="✅ OK (+1)", style=discord.ButtonStyle.success, custom_id="okcoin_tap", row=0)
    async def btn_tap(self, inter: Interaction, _: discord.ui.Button):
        if not await self._guard(inter):
            return
        await play_tap(inter, edit_panel=True)

    @discord.ui.button(label="💰 Solde", style=discord.ButtonStyle.secondary, custom_id="okcoin_balance", row=1)
    async def btn_balance(self, inter: Interaction, _: discord.ui.Button):
        if not await self._guard(inter):
            return
        await show_balance(inter)

    @discord.ui.button(label="👥 Parrainage", style=discord.ButtonStyle.secondary, custom_id="okcoin_referrals", row=1)
    async def btn_referrals(self, inter: Interaction, _: discord.ui.Button):
        if not await self._guard(inter):
            return
        await show_referrals(inter)

    @discord.ui.button(label="📋 Tâches", style=discord.ButtonStyle.secondary, custom_id="okcoin_tasks", row=2)
    async def btn_tasks(self, inter: Interaction, _: discord.ui.Button):
        if not await self._guard(inter):
            return
        await show_tasks(inter)

    @discord.ui.button(label="🏆 Classement", style=discord.ButtonStyle.secondary, custom_id="okcoin_leaderboard", row=2)
    async def btn_leaderboard(self, inter: Interaction, _: discord.ui.Button):
        if not await self._guard(inter):
            return
        await show_leaderboard(inter)

    @discord.ui.button(label="🔄 Actualiser", style=discord.ButtonStyle.primary, custom_id="okcoin_refresh", row=3)
    async def btn_refresh(self, inter: Interaction, _: discord.ui.Button):
        if not await self._guard(inter):
            return
        user = current_user(inter)
        if user is None:
            await inter.response.send_message(NOT_STARTED_MSG, ephemeral=True)
            return
        await inter.response.edit_message(embed=panel_embed(user), view=self)

async def open_panel(inter: Interaction) -> bool:
    user = current_user(inter)
    if user is None:
        await inter.response.send_message(NOT_STARTED_MSG, ephemeral=True)
        return False
    view = GameView(inter.user.id)
    await inter.response.send_message(embed=panel_embed(user), view=view, ephemeral=False)
    view.message = await inter.original_response()
    return True

async def play_start(inter: Interaction, code: Optional[int] = None) -> bool:
    user, linked = register_player(inter)
    if user is None:
        await inter.response.send_message(NAME_TAKEN_MSG, ephemeral=True)
        return False
    # le code parrain ne compte qu'au tout premier /start
    referral_msg = apply_code(engine_of(inter), user, code) if linked else None
    if referral_msg:
        user = engine_of(inter).get_user(user["id"]) or user

    embed = Embed(title="🎮 OK Coin", color=discord.Color.dark_gold())
    embed.add_field(
        name="Introduction",
        value=WELCOME_INTRO.format(
            mention=inter.user.mention,
            coins=fmt_coins(user["coins"]),
            energy=fmt_energy(user["energy"], user["max_energy"]),
            level=user["level"],
        ),
        inline=False
    )
    embed.add_field(name="Commandes", value=WELCOME_RULES, inline=False)
    if referral_msg:
        embed.add_field(name="Parrainage", value=referral_msg, inline=False)
    embed.set_footer(text="Appuie sur OK pour commencer • OK Coin")

    view = GameView(inter.user.id)
    await inter.response.send_message(embed=embed, view=view, ephemeral=False)
    view.message = await inter.original_response()
    return True

# ─────────────────────────────
# Commandes /start et /jouer
# ─────────────────────────────
def register(tree: app_commands.CommandTree, guild_obj: discord.Object | None, client: discord.Client | None = None):
    @tree.command(name="start", description="Commence à jouer à OK Coin")
    @app_commands.describe(code="Code parrain d’un ami (optionnel)")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def start(inter: Interaction, code: Optional[app_commands.Range[int, 1]] = None):
        await play_start(inter, code)

    @tree.command(name="jouer", description="Ouvre ton panneau de jeu")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def jouer(inter: Interaction):
        await open_panel(inter)
