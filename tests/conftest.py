"""Shared fixtures: a fresh seeded engine per test."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from okcoin.core.config import Settings
from okcoin.core.db.base import Store
from okcoin.core.engine import GameEngine
from okcoin.modules.common.identity import IdentityMap


@pytest.fixture()
def config() -> Settings:
    return Settings(token="", referral_reward=1000, referral_require_both=False, api_enabled=False)


@pytest.fixture()
def engine(config: Settings):
    eng = GameEngine.open(config)
    yield eng
    eng.close()


@pytest.fixture()
def store(engine: GameEngine) -> Store:
    return engine.store


@pytest.fixture()
def now() -> datetime:
    return datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def make_user(engine: GameEngine, now: datetime):
    """Create a user and force some fields; energy clock pinned to `now`."""

    def _make(username: str, **fields):
        user = engine.create_or_get_user(username)
        fields.setdefault("last_energy_update", now)
        return engine.update_user(user["id"], **fields)

    return _make


@pytest.fixture()
def seconds_later(now: datetime):
    def _later(seconds: float) -> datetime:
        return now + timedelta(seconds=seconds)

    return _later


@pytest.fixture()
def identities() -> IdentityMap:
    return IdentityMap()


@pytest.fixture()
def make_inter(engine: GameEngine, identities: IdentityMap):
    """Minimal discord.Interaction double wired to the test engine."""

    def _make(discord_id: int = 4242, name: str = "alice"):
        inter = MagicMock()
        inter.user.id = discord_id
        inter.user.name = name
        inter.user.mention = f"<@{discord_id}>"
        inter.client.engine = engine
        inter.client.identities = identities
        inter.client.latency = 0.05
        inter.response.send_message = AsyncMock()
        inter.response.edit_message = AsyncMock()
        inter.original_response = AsyncMock(return_value=MagicMock())
        return inter

    return _make
