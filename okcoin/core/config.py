import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")

class Settings(BaseModel):
    token: str = Field(default_factory=lambda: os.getenv("DISCORD_TOKEN",""))
    guild_id: int = int(os.getenv("GUILD_ID","0"))
    sync_scope: str = os.getenv("SYNC_SCOPE", "both")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Économie
    referral_reward: int = int(os.getenv("REFERRAL_REWARD", "1000"))
    referral_require_both: bool = _flag("REFERRAL_REQUIRE_BOTH")

    # API HTTP (même process que le bot, même store)
    api_enabled: bool = _flag("API_ENABLED", "1")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))

settings = Settings()
