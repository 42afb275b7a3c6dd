"""
Supabase Auth - Magic-Link-Login und Session-Prüfung

Der eigentliche Login (E-Mail, Token, Sessions) liegt bei Supabase.
Hier wird nur der Magic Link angefordert (PKCE), der Code gegen eine Session
getauscht und das Access Token aus dem Cookie geprüft.
"""
import base64
import hashlib
import logging
import secrets
from typing import Any, Dict, Optional, Tuple

import httpx
import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from portal.config import settings
from portal.database import get_db
from portal.models.portal import SessionUser
from portal.models.portal_db import Customer
from portal.supabase_config import SupabaseConfig, supabase_config

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Supabase Auth hat die Anfrage abgelehnt"""


def generate_pkce_pair() -> Tuple[str, str]:
    """PKCE code_verifier und S256 code_challenge erzeugen"""
    verifier = secrets.token_urlsafe(48)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
    return verifier, challenge


class SupabaseAuthService:
    """Supabase GoTrue API"""

    def __init__(
        self,
        config: SupabaseConfig = supabase_config,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.timeout = timeout
        self._transport = transport

    def _headers(self, access_token: Optional[str] = None) -> dict:
        headers = {"apikey": self.config.anon_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    async def send_magic_link(self, email: str, redirect_to: str, code_challenge: str) -> None:
        """
        Magic Link per E-Mail anfordern (nur bestehende Kunden)

        Raises:
            AuthError: Supabase lehnt ab (z.B. unbekannte E-Mail, Rate Limit)
        """
        async with self._client() as client:
            response = await client.post(
                f"{self.config.auth_url}/otp",
                headers=self._headers(),
                params={"redirect_to": redirect_to},
                json={
                    "email": email,
                    "create_user": False,
                    "code_challenge": code_challenge,
                    "code_challenge_method": "s256",
                },
            )
        if not response.is_success:
            logger.warning(f"Magic link request rejected: status={response.status_code}")
            raise AuthError(self._error_message(response))
        logger.info("Magic link requested")

    async def exchange_code(self, auth_code: str, code_verifier: str) -> Dict[str, Any]:
        """
        Code aus dem Magic Link gegen eine Session tauschen

        Returns:
            Supabase Session (access_token, refresh_token, expires_in, user)
        """
        async with self._client() as client:
            response = await client.post(
                f"{self.config.auth_url}/token",
                headers=self._headers(),
                params={"grant_type": "pkce"},
                json={"auth_code": auth_code, "code_verifier": code_verifier},
            )
        if not response.is_success:
            logger.warning(f"Code exchange failed: status={response.status_code}")
            raise AuthError(self._error_message(response))
        return response.json()

    async def get_user(self, access_token: str) -> Optional[SessionUser]:
        """
        Access Token prüfen

        Mit SUPABASE_JWT_SECRET wird die Signatur lokal geprüft,
        sonst fragt der Service Supabase (/auth/v1/user).
        """
        if self.config.jwt_secret:
            return self._verify_locally(access_token)

        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.config.auth_url}/user",
                    headers=self._headers(access_token),
                )
        except httpx.HTTPError as e:
            logger.error(f"Supabase user lookup failed: {e}")
            return None

        if not response.is_success:
            return None
        data = response.json()
        return SessionUser(id=data["id"], email=data.get("email"))

    def _verify_locally(self, access_token: str) -> Optional[SessionUser]:
        try:
            claims = jwt.decode(
                access_token,
                self.config.jwt_secret,
                algorithms=["HS256"],
                audience=self.config.jwt_audience,
            )
        except jwt.PyJWTError as e:
            logger.info(f"Rejected session token: {e}")
            return None
        return SessionUser(id=claims["sub"], email=claims.get("email"))

    async def sign_out(self, access_token: str) -> None:
        """Session bei Supabase widerrufen"""
        async with self._client() as client:
            response = await client.post(
                f"{self.config.auth_url}/logout",
                headers=self._headers(access_token),
            )
        if not response.is_success:
            raise AuthError(self._error_message(response))

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return data.get("msg") or data.get("error_description") or data.get("error") or str(data)


_auth_service: Optional[SupabaseAuthService] = None


def get_auth_service() -> SupabaseAuthService:
    global _auth_service
    if _auth_service is None:
        _auth_service = SupabaseAuthService()
    return _auth_service


# --- FastAPI Dependencies ---

def _read_access_token(request: Request) -> Optional[str]:
    token = request.cookies.get(supabase_config.access_cookie_name)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None


async def get_current_user(
    request: Request,
    auth: SupabaseAuthService = Depends(get_auth_service),
) -> SessionUser:
    """Angemeldeten Benutzer aus dem Session-Cookie lesen, sonst 401"""
    token = _read_access_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Nicht angemeldet")

    user = await auth.get_user(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Sitzung ungültig oder abgelaufen")
    return user


def get_current_customer(
    user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Customer:
    """Kunde zum angemeldeten Benutzer, sonst 404"""
    customer = db.query(Customer).filter(Customer.user_id == user.id).first()
    if customer is None:
        raise HTTPException(status_code=404, detail="Kein Kundenkonto zu diesem Login gefunden")
    return customer
