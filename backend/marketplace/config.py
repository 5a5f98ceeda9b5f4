from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    RESET_DB: bool = False
    SKIP_SEED: bool = False

    # unpaid orders hold their products for this long before the sweep releases them
    RESERVATION_TTL_SECONDS: int = 900
    RESERVATION_SWEEP_SECONDS: int = 30
    RESERVATION_SWEEP_ENABLED: bool = True

    LOCK_TIMEOUT_SECONDS: float = 10.0
    LOCK_DIR: str = ""


settings = Settings()
