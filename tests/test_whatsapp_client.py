"""
Twilio WhatsApp Client Tests

Rufnummern-Normalisierung und Versand gegen einen gemockten Twilio-Endpunkt.
"""
import base64
from urllib.parse import parse_qs

import httpx
import pytest

from portal.services.whatsapp_client import TwilioWhatsAppClient, normalize_phone
from portal.twilio_config import TwilioConfig


def _config() -> TwilioConfig:
    return TwilioConfig(
        account_sid="AC123",
        auth_token="secret",
        whatsapp_from="whatsapp:+14155238886",
    )


class TestNormalizePhone:
    """Rufnummer → whatsapp:+49..."""

    def test_national_number_gets_country_code(self):
        """Führende 0 wird entfernt, +49 und Kanalpräfix vorangestellt"""
        assert normalize_phone("05251123456") == "whatsapp:+495251123456"

    def test_channel_prefixed_number_unchanged(self):
        assert normalize_phone("whatsapp:+495251123456") == "whatsapp:+495251123456"

    def test_international_number_only_gets_channel_prefix(self):
        assert normalize_phone("+4915112345678") == "whatsapp:+4915112345678"

    def test_number_without_trunk_zero(self):
        assert normalize_phone("15112345678") == "whatsapp:+4915112345678"

    def test_custom_country_code(self):
        assert normalize_phone("0664123456", country_code="+43") == "whatsapp:+43664123456"


class TestSendMessage:
    """Versand über die Twilio Messages API"""

    @pytest.mark.asyncio
    async def test_success_returns_sid(self):
        """Erfolgreicher Versand liefert die Message SID"""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["form"] = parse_qs(request.content.decode())
            return httpx.Response(201, json={"sid": "SM123", "status": "queued"})

        client = TwilioWhatsAppClient(config=_config(), transport=httpx.MockTransport(handler))
        result = await client.send_message("05251123456", "Hallo")

        assert result.ok
        assert result.sid == "SM123"
        assert result.error is None
        assert captured["url"] == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
        expected = base64.b64encode(b"AC123:secret").decode()
        assert captured["auth"] == f"Basic {expected}"
        assert captured["form"]["To"] == ["whatsapp:+495251123456"]
        assert captured["form"]["From"] == ["whatsapp:+14155238886"]
        assert captured["form"]["Body"] == ["Hallo"]

    @pytest.mark.asyncio
    async def test_provider_error_message_is_returned(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})

        client = TwilioWhatsAppClient(config=_config(), transport=httpx.MockTransport(handler))
        result = await client.send_message("0123", "Hallo")

        assert not result.ok
        assert result.sid is None
        assert result.error == "Invalid 'To' Phone Number"

    @pytest.mark.asyncio
    async def test_provider_error_without_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="internal error")

        client = TwilioWhatsAppClient(config=_config(), transport=httpx.MockTransport(handler))
        result = await client.send_message("05251123456", "Hallo")

        assert result.error == "Twilio error"

    @pytest.mark.asyncio
    async def test_network_error_is_not_retried(self):
        """Netzwerkfehler: genau ein Versuch, Fehler als Ergebnis"""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = TwilioWhatsAppClient(config=_config(), transport=httpx.MockTransport(handler))
        result = await client.send_message("05251123456", "Hallo")

        assert not result.ok
        assert "connection refused" in result.error
        assert len(calls) == 1
