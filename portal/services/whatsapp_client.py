"""
Twilio WhatsApp Client
Versendet eine WhatsApp-Nachricht über die Twilio Messages API
"""
import base64
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from portal.config import settings
from portal.twilio_config import TwilioConfig, twilio_config

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "whatsapp:"


@dataclass
class SendResult:
    """Ergebnis eines Versandversuchs: entweder sid oder error ist gesetzt"""
    sid: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.sid is not None


def normalize_phone(phone: str, country_code: str = "+49") -> str:
    """
    Rufnummer in das Twilio WhatsApp-Format bringen

    - "whatsapp:+49..." bleibt unverändert
    - "+49..." → "whatsapp:+49..."
    - "05251..." → führende 0 entfernen, Ländervorwahl voranstellen

    Nur für deutsche Nummern gedacht, keine E.164-Validierung.
    """
    if phone.startswith(CHANNEL_PREFIX):
        return phone
    if phone.startswith("+"):
        return f"{CHANNEL_PREFIX}{phone}"
    national = phone[1:] if phone.startswith("0") else phone
    return f"{CHANNEL_PREFIX}{country_code}{national}"


class TwilioWhatsAppClient:
    """Twilio Messages API (WhatsApp Kanal)"""

    def __init__(
        self,
        config: TwilioConfig = twilio_config,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.timeout = timeout
        self._transport = transport
        if not config.is_configured:
            logger.warning("Twilio not configured, WhatsApp messages will fail")

    def _create_auth_header(self) -> str:
        """Basic-Auth Header aus Account SID und Auth Token"""
        credentials = f"{self.config.account_sid}:{self.config.auth_token}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("utf-8")
        return f"Basic {encoded}"

    async def send_message(self, to: str, body: str) -> SendResult:
        """
        WhatsApp-Nachricht senden (genau ein Versuch, keine Wiederholung)

        Args:
            to: Rufnummer wie beim Kunden gespeichert
            body: Nachrichtentext

        Returns:
            SendResult mit Twilio Message SID oder Fehlermeldung
        """
        formatted_to = normalize_phone(to, self.config.country_code)

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(
                    self.config.messages_url,
                    headers={"Authorization": self._create_auth_header()},
                    data={
                        "From": self.config.whatsapp_from,
                        "To": formatted_to,
                        "Body": body,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Twilio request failed: {e}")
            return SendResult(error=str(e) or e.__class__.__name__)

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            error = data.get("message") or "Twilio error"
            logger.error(f"Twilio send failed: status={response.status_code}, error={error}")
            return SendResult(error=error)

        sid = data.get("sid")
        if not sid:
            return SendResult(error="Twilio error")

        logger.info(f"WhatsApp message sent: sid={sid}")
        return SendResult(sid=sid)
