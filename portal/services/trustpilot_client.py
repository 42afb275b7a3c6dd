"""
Trustpilot Client
Lädt öffentliche Bewertungen der Business Unit über die Trustpilot API
"""
import logging
from typing import Any, Dict, Optional

import httpx

from portal.config import settings
from portal.trustpilot_config import TrustpilotConfig, trustpilot_config

logger = logging.getLogger(__name__)


class TrustpilotAPIError(Exception):
    """Trustpilot hat mit einem Nicht-2xx-Status geantwortet"""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Trustpilot API {status_code}: {body}")


class TrustpilotClient:
    """Trustpilot Business Units API"""

    def __init__(
        self,
        config: TrustpilotConfig = trustpilot_config,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    async def fetch_reviews(self, min_stars: int = 4, per_page: int = 20) -> Dict[str, Any]:
        """
        Bewertungen laden, neueste zuerst

        Args:
            min_stars: Mindestanzahl Sterne
            per_page: Anzahl Bewertungen

        Returns:
            Trustpilot JSON ({"reviews": [...], "totalNumberOfReviews": n})

        Raises:
            TrustpilotAPIError: Nicht-2xx-Antwort
            httpx.HTTPError: Netzwerkfehler / Timeout
        """
        params = {
            "stars": ",".join(str(s) for s in (5, 4, 3, 2, 1) if s >= min_stars),
            "orderBy": "createdat.desc",
            "perPage": str(per_page),
            "language": self.config.language,
        }

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.get(
                self.config.reviews_url,
                headers={"apikey": self.config.api_key},
                params=params,
            )

        if not response.is_success:
            raise TrustpilotAPIError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            raise TrustpilotAPIError(response.status_code, "invalid JSON body")

        # 2xx mit unerwarteter Struktur wie einen API-Fehler behandeln
        if not isinstance(data, dict):
            raise TrustpilotAPIError(response.status_code, f"unexpected payload: {str(data)[:200]}")
        reviews = data.get("reviews") or []
        if not isinstance(reviews, list) or not all(isinstance(r, dict) for r in reviews):
            raise TrustpilotAPIError(response.status_code, "unexpected reviews payload")

        logger.info(
            f"Trustpilot reviews fetched: {len(data.get('reviews') or [])} "
            f"(total={data.get('totalNumberOfReviews')})"
        )
        return data
