from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# apps/backend/db.sqlite3 as an absolute path so the CWD does not matter
DEFAULT_DB_PATH = Path(__file__).resolve().parents[2] / "db.sqlite3"


class Settings(BaseSettings):
    APP_NAME: str = "Finance Manager Backend"
    ENV: str = "dev"

    DATABASE_URL: str = f"sqlite:///{DEFAULT_DB_PATH}"

    SECRET_KEY: str = "change-me"
    TOKEN_MAX_AGE_SECONDS: int = 7 * 24 * 3600
    RESET_TOKEN_TTL_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12

    CORS_ORIGINS: list[str] = ["*"]
    TIMEZONE: str = "UTC"
    LOG_LEVEL: str = "INFO"
    # create tables on startup (alembic owns the schema in deployed envs)
    CREATE_TABLES: bool = True
    SEED_DEFAULTS: bool = True

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="FINAPP_", case_sensitive=False)


@lru_cache
def get_settings() -> Settings:
    return Settings()
