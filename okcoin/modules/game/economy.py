from __future__ import annotations

import discord
from discord import app_commands, Interaction

from okcoin.modules.common.format import fmt_coins, fmt_energy, energy_bar, medal
from okcoin.modules.common.session import NOT_STARTED_MSG, engine_of, current_user, user_id_of

LEADERBOARD_SIZE = 10
PANEL_FOOTER = "Appuie sur OK pour gagner des coins • OK Coin"

# ───────── Embeds ─────────
def panel_embed(user: dict) -> discord.Embed:
    e = discord.Embed(title="🎮 OK Coin — Panneau de jeu", color=discord.Color.dark_gold())
    e.add_field(name="💰 Solde", value=f"**{fmt_coins(user['coins'])}**", inline=True)
    e.add_field(
        name="⚡ Énergie",
        value=f"{fmt_energy(user['energy'], user['max_energy'])}\n`{energy_bar(user['energy'], user['max_energy'])}`",
        inline=True,
    )
    e.add_field(name="🏆 Niveau", value=str(user["level"]), inline=True)
    e.add_field(name="📊 Taps", value=str(user["total_taps"]), inline=True)
    e.set_footer(text=PANEL_FOOTER)
    return e

def tap_embed(user: dict, bonus: int = 0) -> discord.Embed:
    e = discord.Embed(
        description=f"💰 **+{user['coins_per_tap']}** !\n"
                    f"Solde: **{fmt_coins(user['coins'])}** • {fmt_energy(user['energy'], user['max_energy'])}",
        color=discord.Color.green(),
    )
    if bonus > 0:
        e.add_field(name="🎯 Tâche terminée", value=f"+{fmt_coins(bonus)}", inline=False)
    e.set_footer(text=f"Taps: {user['total_taps']}")
    return e

def balance_embed(user: dict, rank: int) -> discord.Embed:
    e = discord.Embed(title="💰 Ton solde", color=discord.Color.dark_gold())
    e.add_field(name="Coins", value=f"**{fmt_coins(user['coins'])}**", inline=True)
    e.add_field(name="Énergie", value=fmt_energy(user["energy"], user["max_energy"]), inline=True)
    e.add_field(name="Taps", value=str(user["total_taps"]), inline=True)
    e.add_field(name="Filleuls", value=str(user["referral_count"]), inline=True)
    e.add_field(name="Rang", value=f"#{rank}", inline=True)
    return e

def no_energy_message(user: dict | None) -> str:
    energy = user["energy"] if user else 0
    max_energy = user["max_energy"] if user else 1000
    return (f"⚡ Plus assez d’énergie ! ({energy}/{max_energy})\n"
            "💡 L’énergie remonte de 1 par seconde.")

def _format_leaderboard(rows: list[dict]) -> str:
    return "\n".join(
        f"{medal(r['rank'])} **{r['username']}** — {fmt_coins(r['coins'])}" for r in rows
    )

def leaderboard_embed(rows: list[dict]) -> discord.Embed:
    e = discord.Embed(
        title="🏆 Classement OK Coin",
        description=_format_leaderboard(rows) if rows else "Personne pour l’instant. Sois le premier !",
        color=discord.Color.dark_gold(),
    )
    e.set_footer(text=f"Top {LEADERBOARD_SIZE}")
    return e

# ───────── Flows publics ─────────
async def play_tap(inter: Interaction, *, edit_panel: bool = False) -> bool:
    engine = engine_of(inter)
    uid = user_id_of(inter)
    if uid is None:
        await inter.response.send_message(NOT_STARTED_MSG, ephemeral=True)
        return False

    user, bonus, failure = engine.tap_with_bonus(uid)
    if failure is not None or user is None:
        await inter.response.send_message(no_energy_message(engine.get_user(uid)), ephemeral=True)
        return False

    if edit_panel:
        await inter.response.edit_message(embed=panel_embed(user))
    else:
        await inter.response.send_message(embed=tap_embed(user, bonus), ephemeral=True)
    return True

async def show_balance(inter: Interaction) -> bool:
    user = current_user(inter)
    if user is None:
        await inter.response.send_message(NOT_STARTED_MSG, ephemeral=True)
        return False
    rank = engine_of(inter).get_user_rank(user["id"])
    await inter.response.send_message(embed=balance_embed(user, rank), ephemeral=True)
    return True

async def show_leaderboard(inter: Interaction) -> bool:
    rows = engine_of(inter).get_leaderboard(LEADERBOARD_SIZE)
    await inter.response.send_message(embed=leaderboard_embed(rows), ephemeral=False)
    return True

# ───────── Slash ─────────
def register(tree: app_commands.CommandTree, guild_obj: discord.Object | None, client: discord.Client | None = None):
    @tree.command(name="tap", description="Gagne des coins (coûte 1 énergie)")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def cmd_tap(inter: Interaction):
        await play_tap(inter)

    @tree.command(name="solde", description="Ton solde, ton énergie et ton rang")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def cmd_solde(inter: Interaction):
        await show_balance(inter)

    @tree.command(name="classement", description="Top 10 des joueurs")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def cmd_classement(inter: Interaction):
        await show_leaderboard(inter)
