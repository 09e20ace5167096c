# okcoin/core/client.py
from __future__ import annotations
import asyncio, logging, importlib, inspect, os
import discord
import uvicorn
from discord import app_commands, Interaction

from .config import settings
from .engine import GameEngine
from okcoin.modules.common.identity import IdentityMap

# ── Logging
log = logging.getLogger("okcoin")
logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")

# ── Guilds de test (supporte 1..n guilds)
SYNC_SCOPE = settings.sync_scope

def _list_from_env(var: str) -> list[int]:
    raw = os.getenv(var, "").strip()
    if not raw:
        return []
    out: list[int] = []
    for part in raw.split(","):
        s = part.strip()
        if s.isdigit():
            out.append(int(s))
    return out

if SYNC_SCOPE in ("guild", "both"):
    env_ids = _list_from_env("TEST_GUILD_IDS")
    if env_ids:
        TEST_GUILD_IDS = env_ids
    elif getattr(settings, "guild_id", 0):
        TEST_GUILD_IDS = [int(settings.guild_id)]
    else:
        TEST_GUILD_IDS = []
else:
    TEST_GUILD_IDS = []

TEST_GUILDS = [discord.Object(id=g) for g in TEST_GUILD_IDS]

# ═══════════════════════════════════════════════════════════════════
# Où publier chaque module
MODULES_GLOBAL = [
    "okcoin.modules.game.start",
    "okcoin.modules.game.economy",
    "okcoin.modules.game.referral",
    "okcoin.modules.game.tasks",
]

MODULES_TEST_ONLY = [
    "okcoin.modules.system.health",
]

GENERIC_ERROR_MSG = "⚠️ Une erreur est survenue. Réessaie plus tard."


class OkCoinClient(discord.Client):
    """Client Discord qui porte le moteur de jeu et la table d'identités du bot."""

    def __init__(self, engine: GameEngine, identities: IdentityMap | None = None):
        intents = discord.Intents.default()
        super().__init__(intents=intents)
        self.engine = engine
        self.identities = identities or IdentityMap()
        self.tree = app_commands.CommandTree(self)
        self.tree.on_error = self._on_tree_error
        self._synced = False

    # Utilitaires d’enregistrement
    def _call_with_best_signature(self, fn, guild_obj_for_register: discord.Object | None):
        candidates = [
            (self.tree, guild_obj_for_register, self),   # register(tree, guild, client)
            (self.tree, guild_obj_for_register),         # register(tree, guild)
            (self.tree,),                                # register(tree)
        ]
        for params in candidates:
            try:
                return fn(*params)
            except TypeError:
                continue
        sig = inspect.signature(fn)
        log.warning("Impossible d'appeler %s avec une signature connue (sig=%s)", fn.__name__, sig)

    def _register_one_module(self, dotted: str, guild_obj_for_register: discord.Object | None):
        mod = importlib.import_module(dotted)
        if hasattr(mod, "register") and callable(mod.register):
            log.info("Register via register(): %s (guild=%s)", dotted, getattr(guild_obj_for_register, "id", None))
            return self._call_with_best_signature(mod.register, guild_obj_for_register)
        log.warning("Module %s: pas de register() — ignoré.", dotted)

    def register_modules(self, modules: list[str], guilds: list[discord.Object | None]):
        for dotted in modules:
            for g in guilds:
                try:
                    self._register_one_module(dotted, g)
                except Exception as e:
                    log.exception("Échec d'enregistrement du module %s sur %s: %s", dotted, getattr(g, "id", None), e)

    async def _on_tree_error(self, inter: Interaction, error: app_commands.AppCommandError):
        log.exception("Erreur commande /%s", getattr(inter.command, "name", "?"), exc_info=error)
        try:
            if inter.response.is_done():
                await inter.followup.send(GENERIC_ERROR_MSG, ephemeral=True)
            else:
                await inter.response.send_message(GENERIC_ERROR_MSG, ephemeral=True)
        except discord.HTTPException:
            log.warning("Impossible de notifier l'erreur à l'utilisateur")

    async def on_ready(self):
        log.info("Boot: SYNC_SCOPE=%s • TEST_GUILD_IDS=%s", SYNC_SCOPE, TEST_GUILD_IDS)
        if self._synced:
            return

        try:
            if SYNC_SCOPE == "guild":
                if not TEST_GUILDS:
                    raise RuntimeError("SYNC_SCOPE=guild mais aucune guild de test n’est définie.")
                self.register_modules(MODULES_GLOBAL + MODULES_TEST_ONLY, TEST_GUILDS)
                for g in TEST_GUILDS:
                    synced_g = await self.tree.sync(guild=g)
                    log.info("Synced %d commands on guild %s: %s", len(synced_g), g.id, [c.name for c in synced_g])
            else:  # "global" | "both"
                self.register_modules(MODULES_GLOBAL, [None])
                self.register_modules(MODULES_TEST_ONLY, TEST_GUILDS)
                g_synced = await self.tree.sync()
                log.info("Synced %d GLOBAL commands: %s", len(g_synced), [c.name for c in g_synced])
                if SYNC_SCOPE == "both":
                    for g in TEST_GUILDS:
                        self.tree.copy_global_to(guild=g)
                        y_synced = await self.tree.sync(guild=g)
                        log.info("Copied & synced %d commands to guild %s: %s",
                                 len(y_synced), g.id, [c.name for c in y_synced])
            self._synced = True

        except discord.Forbidden as e:
            log.error("403 Missing Access au sync. Invite le bot avec le scope applications.commands. %s", e)
        except Exception as e:
            log.exception("Sync error: %s", e)

        log.info("OK Coin connecté en %s", self.user)


async def _serve(client: OkCoinClient) -> None:
    async with client:
        jobs = [client.start(settings.token)]
        if settings.api_enabled:
            from okcoin.api.app import create_app
            config = uvicorn.Config(
                create_app(client.engine),
                host=settings.api_host,
                port=settings.api_port,
                log_level=settings.log_level.lower(),
            )
            jobs.append(uvicorn.Server(config).serve())
            log.info("API HTTP sur %s:%s", settings.api_host, settings.api_port)
        await asyncio.gather(*jobs)

def run():
    # 1) Store + tâches par défaut au boot
    engine = GameEngine.open(settings)

    # 2) Lancement du client (et de l'API, même moteur)
    try:
        asyncio.run(_serve(OkCoinClient(engine)))
    finally:
        engine.close()
