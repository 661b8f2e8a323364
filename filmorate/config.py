from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DB_URL: str = "sqlite+aiosqlite:///./filmorate.db"
    # memory - данные живут только в процессе, database - SQLAlchemy
    STORAGE: Literal["memory", "database"] = "database"
    LOG_LEVEL: str = "INFO"
    POPULAR_DEFAULT_COUNT: int = 10

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()

database_url = settings.DB_URL
