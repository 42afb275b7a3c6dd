from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Database (Supabase Postgres in Produktion, SQLite lokal)
    DATABASE_URL: str = "sqlite:///./portal.db"

    # Portal
    PORTAL_URL: str = "https://portal.bee-doo.de"
    PORTAL_TIMEZONE: str = "Europe/Berlin"
    SUPPORT_PHONE: str = "0521 9876 543"

    # Cron-Aufrufe (Terminerinnerungen)
    CRON_SECRET: str = ""

    # Ausgehende HTTP-Aufrufe (Twilio, Trustpilot, Supabase)
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Trustpilot-Cache
    REVIEW_CACHE_TTL_HOURS: int = 24

    # Application
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
