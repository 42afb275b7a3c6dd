"""Twilio (WhatsApp) Einstellungen"""
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class TwilioConfig(BaseSettings):
    """Twilio Messaging API Einstellungen"""

    account_sid: str = ""
    auth_token: str = ""
    # z.B. whatsapp:+14155238886 (Sandbox) oder die verifizierte Nummer
    whatsapp_from: str = ""

    api_base_url: str = "https://api.twilio.com/2010-04-01"

    # Rufnummern ohne Ländervorwahl werden als deutsche Nummern behandelt
    country_code: str = "+49"

    model_config = SettingsConfigDict(
        env_prefix="TWILIO_",
        env_file=".env",
        extra="ignore"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.whatsapp_from)

    @property
    def messages_url(self) -> str:
        return f"{self.api_base_url}/Accounts/{self.account_sid}/Messages.json"

    def log_settings(self):
        """Einstellungen loggen (Secrets maskiert)"""
        logger.info(
            f"Twilio Config Loaded: AccountSID={self.account_sid[:4]}***, From={self.whatsapp_from}"
        )


# Singleton
twilio_config = TwilioConfig()
