"""
Supabase Storage - signierte Download-URLs für Projektdokumente

Signieren ist idempotent und wird bei Netzwerkfehlern wiederholt
(3 Versuche, exponentielles Backoff).
"""
import logging
from typing import Optional
from urllib.parse import quote

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from portal.config import settings
from portal.supabase_config import SupabaseConfig, supabase_config

logger = logging.getLogger(__name__)


class StorageService:
    """Supabase Storage (Bucket project-documents)"""

    def __init__(
        self,
        config: SupabaseConfig = supabase_config,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict:
        key = self.config.service_role_key or self.config.anon_key
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True
    )
    async def _sign(self, storage_path: str, expires_in: int) -> str:
        url = f"{self.config.storage_url}/object/sign/{self.config.storage_bucket}/{quote(storage_path)}"
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.post(url, headers=self._headers(), json={"expiresIn": expires_in})
        response.raise_for_status()
        signed_path = response.json()["signedURL"]
        return f"{self.config.storage_url}{signed_path}"

    async def create_signed_url(self, storage_path: str, expires_in: Optional[int] = None) -> Optional[str]:
        """
        Zeitlich begrenzte Download-URL erzeugen

        Args:
            storage_path: Pfad im Bucket
            expires_in: Gültigkeit in Sekunden (Standard 1h)

        Returns:
            Signierte URL, oder None wenn Supabase sie nicht ausstellt
        """
        expires_in = expires_in or self.config.signed_url_ttl_seconds
        try:
            return await self._sign(storage_path, expires_in)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error(f"Failed to sign storage path {storage_path}: {e}")
            return None


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
