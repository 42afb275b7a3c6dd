"""Supabase (Auth + Storage) Einstellungen"""
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class SupabaseConfig(BaseSettings):
    """Supabase Projekt-Einstellungen"""

    url: str = ""
    anon_key: str = ""
    service_role_key: str = ""
    # JWT Secret des Projekts; ohne Secret wird jede Session bei Supabase geprüft
    jwt_secret: str = ""
    jwt_audience: str = "authenticated"

    storage_bucket: str = "project-documents"
    signed_url_ttl_seconds: int = 3600

    access_cookie_name: str = "sb-access-token"
    refresh_cookie_name: str = "sb-refresh-token"
    verifier_cookie_name: str = "sb-code-verifier"

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        extra="ignore"
    )

    @property
    def auth_url(self) -> str:
        return f"{self.url.rstrip('/')}/auth/v1"

    @property
    def storage_url(self) -> str:
        return f"{self.url.rstrip('/')}/storage/v1"

    def log_settings(self):
        """Einstellungen loggen (Secrets maskiert)"""
        logger.info(
            f"Supabase Config Loaded: URL={self.url}, AnonKey={self.anon_key[:4]}***, "
            f"LocalJWT={'yes' if self.jwt_secret else 'no'}"
        )


supabase_config = SupabaseConfig()
