"""
Trustpilot-Bewertungen für das Portal (öffentlich)

Liefert immer eine Liste; Trustpilot-Fehler führen zu Cache- oder Demo-Daten.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.models.review import ReviewListResponse
from portal.services.review_service import ReviewService, get_review_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trustpilot", tags=["trustpilot"])


@router.get("", response_model=ReviewListResponse)
async def get_reviews(
    min_stars: int = Query(4, alias="minStars", ge=0, le=5),
    limit: int = Query(6, ge=1, le=50),
    sync: bool = Query(False, description="Cache überspringen und live abrufen"),
    db: Session = Depends(get_db),
    service: ReviewService = Depends(get_review_service),
):
    """
    Bewertungen aus dem Cache (24h) oder live von Trustpilot
    """
    return await service.get_reviews(db, min_stars=min_stars, limit=limit, force_sync=sync)
