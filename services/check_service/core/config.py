"""
Check Service — Configuration
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "check-service"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # ── Check snapshot store ──────────────────────────────────
    STORE_BACKEND: str = "file"           # "file" | "redis"
    STORE_PATH: str = "/app/data/checks.json"
    STORE_REDIS_KEY: str = "checks:snapshot"

    # ── Redis (STORE_BACKEND=redis) ───────────────────────────
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # ── Optimistic snapshot retry ─────────────────────────────
    OPT_LOCK_MAX_RETRIES: int = 5
    OPT_LOCK_BASE_DELAY_MS: int = 20
    OPT_LOCK_MAX_DELAY_MS: int = 500
    OPT_LOCK_JITTER_MS: int = 20

    # ── Identifiers ───────────────────────────────────────────
    CHECK_ID_MAX_ATTEMPTS: int = 10
    CHECK_NUMBER_START: int = 1000
    CHECK_NUMBER_END: int = 9999

    # ── Totals ────────────────────────────────────────────────
    TAX_RATE: float = 0.09
    SERVICE_RATE: float = 0.10

    # ── Settlement / PMS ──────────────────────────────────────
    AUTO_POST: bool = True
    DEFAULT_TRANSACTION_CODE: str | None = None
    FOLIO_SERVICE_URL: str = "http://opera-state:5000"
    PMS_HOTEL_ID: str = "HOTEL1"
    PMS_TIMEOUT_SECONDS: float = 5.0

    # ── Location context headers ──────────────────────────────
    REQUIRE_LOCATION_HEADERS: bool = False

    # ── Observability ─────────────────────────────────────────
    METRICS_ENABLED: bool = True
    HEALTH_CHECK_TIMEOUT: float = 3.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
