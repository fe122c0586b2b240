from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILES = [PROJECT_ROOT / ".env", ".env"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILES, extra="ignore")

    # DB
    DATABASE_URL: str = "sqlite:///./data/habitsync.db"
    LOCAL_DATABASE_URL: str = "sqlite:///./data/device.db"

    # App
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # API
    API_KEY: str | None = None
    API_KEY_SECRET: str | None = None

    # Sync (server side)
    SYNC_MAX_OPS: int = 500

    # Sync (device side)
    API_BASE_URL: str = "http://127.0.0.1:8000"
    SYNC_TIMEOUT_SEC: float = 15.0
    SYNC_BATCH_SIZE: int = 100

    # Outbox retry policy. 0 attempts = never dead-letter.
    OUTBOX_MAX_ATTEMPTS: int = 10
    OUTBOX_BACKOFF_BASE_SEC: float = 2.0
    OUTBOX_BACKOFF_MAX_SEC: float = 300.0


settings = Settings()
