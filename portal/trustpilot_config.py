"""Trustpilot Einstellungen"""
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class TrustpilotConfig(BaseSettings):
    """Trustpilot Business API Einstellungen"""

    api_key: str = ""
    # Business Unit ID, z.B. über
    # GET https://api.trustpilot.com/v1/business-units/find?name=bee-doo.de
    business_unit_id: str = ""

    api_base_url: str = "https://api.trustpilot.com/v1"
    language: str = "de"

    model_config = SettingsConfigDict(
        env_prefix="TRUSTPILOT_",
        env_file=".env",
        extra="ignore"
    )

    @property
    def is_configured(self) -> bool:
        """Ohne API Key oder Business Unit ID laufen Bewertungen im Demo-Modus"""
        return bool(self.api_key and self.business_unit_id)

    @property
    def reviews_url(self) -> str:
        return f"{self.api_base_url}/business-units/{self.business_unit_id}/reviews"

    def log_settings(self):
        """Einstellungen loggen (Secrets maskiert)"""
        logger.info(
            f"Trustpilot Config Loaded: BusinessUnit={self.business_unit_id}, "
            f"APIKey={self.api_key[:4]}***"
        )


trustpilot_config = TrustpilotConfig()
