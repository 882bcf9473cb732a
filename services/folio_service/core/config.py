"""
Folio Service — Configuration
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SERVICE_NAME: str = "folio-service"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    FOLIO_DB_PATH: str = "/app/data/opera.json"
    DEFAULT_TRANSACTION_CODE: str = "ROOM_SERVICE"
    SEED_ENABLED: bool = True

    METRICS_ENABLED: bool = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
