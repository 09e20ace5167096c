from __future__ import annotations

import discord
from discord import app_commands, Interaction

from okcoin.domain.failures import Failure
from okcoin.modules.common.format import fmt_coins
from okcoin.modules.common.session import NOT_STARTED_MSG, engine_of, user_id_of

CLAIM_MSGS = {
    Failure.NOT_FOUND: "❓ Tâche introuvable.",
    Failure.ALREADY_COMPLETED: "✅ Tâche déjà terminée.",
    Failure.NOT_READY: "⏳ Pas encore: objectif non atteint.",
}

def _task_line(t: dict) -> str:
    if t["completed"]:
        state = "✅"
    elif t.get("target"):
        state = f"`{min(t['progress'], t['target'])}/{t['target']}`"
    else:
        state = "▫️"
    return f"{state} **#{t['id']} {t['title']}** — +{fmt_coins(t['reward'])}\n{t['description']}"

def tasks_embed(rows: list[dict]) -> discord.Embed:
    e = discord.Embed(title="📋 Tâches", color=discord.Color.dark_teal())
    e.description = "\n\n".join(_task_line(t) for t in rows) if rows else "Aucune tâche active."
    e.set_footer(text="Récupère une récompense avec /reclamer")
    return e

async def show_tasks(inter: Interaction) -> bool:
    uid = user_id_of(inter)
    if uid is None:
        await inter.response.send_message(NOT_STARTED_MSG, ephemeral=True)
        return False
    rows = engine_of(inter).get_user_tasks_with_progress(uid)
    await inter.response.send_message(embed=tasks_embed(rows), ephemeral=True)
    return True

async def play_claim(inter: Interaction, task_id: int) -> bool:
    uid = user_id_of(inter)
    if uid is None:
        await inter.response.send_message(NOT_STARTED_MSG, ephemeral=True)
        return False

    engine = engine_of(inter)
    user, failure = engine.claim_task(uid, task_id)
    if failure is not None or user is None:
        await inter.response.send_message(CLAIM_MSGS.get(failure, "⚠️ Impossible."), ephemeral=True)
        return False

    await inter.response.send_message(
        f"🎯 Tâche #{task_id} terminée ! Solde: **{fmt_coins(user['coins'])}**", ephemeral=True
    )
    return True

def register(tree: app_commands.CommandTree, guild_obj: discord.Object | None, client: discord.Client | None = None):
    @tree.command(name="taches", description="Tes tâches et leur progression")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def cmd_taches(inter: Interaction):
        await show_tasks(inter)

    @tree.command(name="reclamer", description="Réclame la récompense d’une tâche terminée")
    @app_commands.describe(tache="Numéro de la tâche (voir /taches)")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def cmd_reclamer(inter: Interaction, tache: app_commands.Range[int, 1]):
        await play_claim(inter, tache)
