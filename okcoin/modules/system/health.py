# okcoin/modules/system/health.py
from __future__ import annotations
import time, platform, importlib.util
import discord
from discord import app_commands, Interaction

from okcoin.modules.common.session import engine_of, identities_of

BOT_START_TIME = time.time()

def _fmt_uptime(seconds: int) -> str:
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h}h {m}m {s}s"

def debug_embed(inter: Interaction) -> discord.Embed:
    latency_ms = round(inter.client.latency * 1000) if inter.client.latency else 0
    uptime = _fmt_uptime(int(time.time() - BOT_START_TIME))

    # Mémoire (optionnel si psutil dispo)
    mem_text = "n/a"
    if importlib.util.find_spec("psutil"):
        import psutil  # type: ignore
        rss_mb = psutil.Process().memory_info().rss / 1024**2
        mem_text = f"{rss_mb:.1f} MB"

    engine = engine_of(inter)
    embed = discord.Embed(title="🛠️ Debug OK Coin", color=discord.Color.blurple())
    embed.add_field(name="📡 Latence", value=f"{latency_ms} ms", inline=True)
    embed.add_field(name="⏳ Uptime", value=uptime, inline=True)
    embed.add_field(name="💾 Mémoire", value=mem_text, inline=True)
    embed.add_field(name="👥 Joueurs", value=str(engine.count_users()), inline=True)
    embed.add_field(name="🔗 Liens Discord", value=str(len(identities_of(inter))), inline=True)
    embed.add_field(name="📋 Tâches", value=str(engine.count_tasks()), inline=True)
    embed.add_field(name="🐍 Python", value=platform.python_version(), inline=True)
    embed.add_field(name="🤖 discord.py", value=discord.__version__, inline=True)
    embed.add_field(name="📅 Maintenant", value=f"<t:{int(time.time())}:F>", inline=False)
    return embed

def register(tree: app_commands.CommandTree, guild_obj: discord.Object | None, client: discord.Client | None = None):
    """Expose /debug pour inspecter rapidement l'état du bot (test-only idéalement)."""

    @tree.command(name="debug", description="État du bot (latence, uptime, mémoire, store)")
    @app_commands.guilds(guild_obj) if guild_obj else (lambda f: f)
    async def debug_cmd(inter: Interaction):
        await inter.response.send_message(embed=debug_embed(inter), ephemeral=True)
