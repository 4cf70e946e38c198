from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    APP_NAME: str = "Shared Expenses Backend"
    DATABASE_URL: str = "sqlite+aiosqlite:///./ledger.db"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Used when an imported document carries an unknown currency
    DEFAULT_CURRENCY: str = "USD"
    TOP_N: int = Field(default=5, ge=1)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
