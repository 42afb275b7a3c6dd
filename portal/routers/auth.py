"""
Login per Magic Link (Supabase Auth)

- POST /auth/login     Magic Link anfordern
- GET  /auth/callback  Code aus dem Link gegen Session tauschen
- POST /auth/logout    Session beenden
"""
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from portal.config import settings
from portal.models.portal import MagicLinkRequest, SessionUser
from portal.services.auth_service import (
    AuthError,
    SupabaseAuthService,
    generate_pkce_pair,
    get_auth_service,
    get_current_user,
)
from portal.supabase_config import supabase_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

DEFAULT_NEXT = "/portal"
VERIFIER_MAX_AGE = 60 * 60
REFRESH_MAX_AGE = 60 * 60 * 24 * 30


def _safe_next(next_path: Optional[str]) -> str:
    """Nur relative Pfade innerhalb des Portals als Weiterleitungsziel"""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//"):
        return DEFAULT_NEXT
    return next_path


def _secure_cookies() -> bool:
    return settings.PORTAL_URL.startswith("https://")


@router.post("/login")
async def request_magic_link(
    data: MagicLinkRequest,
    auth: SupabaseAuthService = Depends(get_auth_service),
):
    """
    Magic Link an die E-Mail-Adresse eines bestehenden Kunden senden
    """
    if not data.email or "@" not in data.email:
        raise HTTPException(status_code=400, detail="Gültige E-Mail-Adresse erforderlich")

    verifier, challenge = generate_pkce_pair()
    redirect_to = f"{settings.PORTAL_URL.rstrip('/')}/auth/callback?next={quote(_safe_next(data.next))}"

    try:
        await auth.send_magic_link(data.email.strip().lower(), redirect_to, challenge)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.HTTPError as e:
        logger.error(f"Supabase unreachable: {e}")
        raise HTTPException(status_code=502, detail="Login derzeit nicht möglich")

    response = JSONResponse({"success": True})
    response.set_cookie(
        supabase_config.verifier_cookie_name,
        verifier,
        max_age=VERIFIER_MAX_AGE,
        httponly=True,
        secure=_secure_cookies(),
        samesite="lax",
    )
    return response


@router.get("/callback")
async def auth_callback(
    request: Request,
    code: Optional[str] = None,
    next: Optional[str] = None,
    error: Optional[str] = None,
    auth: SupabaseAuthService = Depends(get_auth_service),
):
    """
    Magic-Link-Rückkehr: Session-Cookies setzen und ins Portal weiterleiten
    """
    if error:
        return RedirectResponse(f"/login?error={quote(error)}", status_code=303)

    target = _safe_next(next)
    if not code:
        return RedirectResponse(target, status_code=303)

    verifier = request.cookies.get(supabase_config.verifier_cookie_name)
    if not verifier:
        return RedirectResponse(f"/login?error={quote('Link abgelaufen')}", status_code=303)

    try:
        session = await auth.exchange_code(code, verifier)
    except (AuthError, httpx.HTTPError) as e:
        logger.warning(f"Magic link exchange failed: {e}")
        return RedirectResponse(f"/login?error={quote(str(e))}", status_code=303)

    response = RedirectResponse(target, status_code=303)
    response.set_cookie(
        supabase_config.access_cookie_name,
        session["access_token"],
        max_age=session.get("expires_in", 3600),
        httponly=True,
        secure=_secure_cookies(),
        samesite="lax",
    )
    if session.get("refresh_token"):
        response.set_cookie(
            supabase_config.refresh_cookie_name,
            session["refresh_token"],
            max_age=REFRESH_MAX_AGE,
            httponly=True,
            secure=_secure_cookies(),
            samesite="lax",
        )
    response.delete_cookie(supabase_config.verifier_cookie_name)
    return response


@router.post("/logout")
async def logout(
    request: Request,
    auth: SupabaseAuthService = Depends(get_auth_service),
):
    """
    Session bei Supabase widerrufen und Cookies löschen
    """
    token = request.cookies.get(supabase_config.access_cookie_name)
    if token:
        try:
            await auth.sign_out(token)
        except (AuthError, httpx.HTTPError) as e:
            logger.info(f"Supabase logout rejected, clearing cookies anyway: {e}")

    response = JSONResponse({"success": True})
    response.delete_cookie(supabase_config.access_cookie_name)
    response.delete_cookie(supabase_config.refresh_cookie_name)
    return response


@router.get("/me", response_model=SessionUser)
async def me(user: SessionUser = Depends(get_current_user)):
    """Angemeldeter Benutzer"""
    return user
