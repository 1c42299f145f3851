"""Server configuration with sensible defaults for LAN use."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from cubebattle.constants import DEFAULT_BOT_TIMEOUT_S


class Settings(BaseSettings):
    """Server settings, overridable via environment variables."""

    # Bots
    BOT_TIMEOUT_S: float = DEFAULT_BOT_TIMEOUT_S

    # Games
    MAX_GAMES: int = 32  # Finished games are evicted first once the table is full

    # SSE
    SSE_MAX_CLIENTS: int = 16
    SSE_KEEPALIVE_S: float = 15.0
    SSE_QUEUE_SIZE: int = 64  # Clients whose queue fills up are dropped

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8090

    model_config = SettingsConfigDict(env_prefix="CUBEBATTLE_", env_file=".env", extra="ignore")


settings = Settings()
