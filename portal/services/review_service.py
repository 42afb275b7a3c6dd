"""
Bewertungsservice - Trustpilot-Bewertungen mit DB-Cache

Reihenfolge der Quellen:
1. cache    - frische Einträge aus trustpilot_reviews (Standard 24h)
2. demo     - keine Trustpilot-Zugangsdaten konfiguriert
3. api      - Live-Abruf, Ergebnis wird per ID upserted
4. fallback - Live-Abruf fehlgeschlagen: ältere Cache-Einträge, sonst Demo-Daten

Der Aufrufer bekommt immer eine Liste, Trustpilot-Fehler werden nie weitergereicht.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.config import settings
from portal.models.review import ReviewItem, ReviewListResponse, ReviewSource
from portal.models.review_db import CachedReview
from portal.services.demo_reviews import demo_reviews
from portal.services.trustpilot_client import TrustpilotAPIError, TrustpilotClient
import logging

logger = logging.getLogger(__name__)

# Live-Abruf immer ab 4 Sternen, gefiltert wird danach nach Wunsch des Aufrufers
LIVE_FETCH_MIN_STARS = 4
LIVE_FETCH_EXTRA = 10

# Spalten, die ein erneuter Abruf überschreibt. is_visible bleibt unangetastet,
# damit manuell ausgeblendete Bewertungen ausgeblendet bleiben.
UPSERT_COLUMNS = (
    "stars", "title", "text", "author_name", "author_location",
    "created_at_tp", "response", "cached_at",
)


def map_trustpilot_review(raw: Dict[str, Any], cached_at: datetime) -> ReviewItem:
    """Trustpilot-Antwort in das Format der trustpilot_reviews Tabelle bringen"""
    consumer = raw.get("consumer")
    if not isinstance(consumer, dict):
        consumer = {}
    company_reply = raw.get("companyReply")
    if not isinstance(company_reply, dict):
        company_reply = {}
    return ReviewItem(
        id=raw["id"],
        stars=raw["stars"],
        title=raw.get("title"),
        text=raw.get("text") or "",
        author_name=consumer.get("displayName") or "Anonym",
        author_location=consumer.get("countryCode"),
        created_at_tp=raw["createdAt"],
        response=company_reply.get("text"),
        cached_at=cached_at,
        is_visible=True,
    )


def _filter_and_limit(reviews: List[ReviewItem], min_stars: int, limit: int) -> List[ReviewItem]:
    return [r for r in reviews if r.stars >= min_stars][:limit]


class ReviewService:
    """Trustpilot-Bewertungen mit Cache und Fallback"""

    def __init__(
        self,
        client: Optional[TrustpilotClient] = None,
        cache_ttl_hours: int = settings.REVIEW_CACHE_TTL_HOURS,
    ):
        self.client = client or TrustpilotClient()
        self.cache_ttl = timedelta(hours=cache_ttl_hours)

    async def get_reviews(
        self,
        db: Session,
        min_stars: int = 4,
        limit: int = 6,
        force_sync: bool = False,
    ) -> ReviewListResponse:
        """
        Bewertungen für das Portal liefern

        Args:
            db: DB Session
            min_stars: Mindestanzahl Sterne
            limit: maximale Anzahl
            force_sync: Cache überspringen und live abrufen

        Returns:
            Bewertungen mit source = cache | demo | api | fallback
        """
        if not force_sync:
            cached = self._from_fresh_cache(db, min_stars, limit)
            if cached is not None:
                return cached

        if not self.client.is_configured:
            return self._from_demo(min_stars, limit)

        try:
            return await self._from_live(db, min_stars, limit)
        except (TrustpilotAPIError, httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Trustpilot fetch error: {e}")
            return self._from_stale_cache(db, min_stars, limit, error=str(e))

    def _from_fresh_cache(self, db: Session, min_stars: int, limit: int) -> Optional[ReviewListResponse]:
        """Ein einziger frischer Eintrag genügt, um den Cache zu verwenden"""
        cutoff = datetime.now(timezone.utc) - self.cache_ttl
        try:
            rows = self._query_cache(db, min_stars, limit, fresh_since=cutoff)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Review cache query failed")
            return None

        if not rows:
            return None
        return ReviewListResponse(
            reviews=[ReviewItem.model_validate(r) for r in rows],
            source=ReviewSource.CACHE,
        )

    def _from_demo(self, min_stars: int, limit: int) -> ReviewListResponse:
        logger.info("Trustpilot not configured, serving demo reviews")
        return ReviewListResponse(
            reviews=_filter_and_limit(demo_reviews(), min_stars, limit),
            source=ReviewSource.DEMO,
        )

    async def _from_live(self, db: Session, min_stars: int, limit: int) -> ReviewListResponse:
        data = await self.client.fetch_reviews(
            min_stars=LIVE_FETCH_MIN_STARS, per_page=limit + LIVE_FETCH_EXTRA
        )

        now = datetime.now(timezone.utc)
        reviews = [map_trustpilot_review(r, now) for r in data.get("reviews") or []]

        hidden_ids = set()
        if reviews:
            hidden_ids = self._upsert_reviews(db, reviews)

        visible = [r for r in reviews if r.id not in hidden_ids]
        return ReviewListResponse(
            reviews=_filter_and_limit(visible, min_stars, limit),
            source=ReviewSource.API,
            totalFromTP=data.get("totalNumberOfReviews"),
        )

    def _from_stale_cache(self, db: Session, min_stars: int, limit: int, error: str) -> ReviewListResponse:
        """Fallback ohne Frische-Grenze, danach Demo-Daten"""
        try:
            rows = self._query_cache(db, min_stars, limit)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Review fallback query failed")
            rows = []

        if rows:
            reviews = [ReviewItem.model_validate(r) for r in rows]
        else:
            reviews = _filter_and_limit(demo_reviews(), min_stars, limit)

        return ReviewListResponse(reviews=reviews, source=ReviewSource.FALLBACK, error=error)

    def _query_cache(
        self,
        db: Session,
        min_stars: int,
        limit: int,
        fresh_since: Optional[datetime] = None,
    ) -> List[CachedReview]:
        query = db.query(CachedReview).filter(
            CachedReview.stars >= min_stars,
            CachedReview.is_visible.is_(True),
        )
        if fresh_since is not None:
            query = query.filter(CachedReview.cached_at >= fresh_since)
        return query.order_by(CachedReview.created_at_tp.desc()).limit(limit).all()

    def _upsert_reviews(self, db: Session, reviews: List[ReviewItem]) -> set:
        """
        Bewertungen per Trustpilot-ID upserten

        Returns:
            IDs der betroffenen Bewertungen, die im Cache ausgeblendet sind
        """
        rows = [r.model_dump() for r in reviews]
        dialect = db.get_bind().dialect.name
        insert = postgresql_insert if dialect == "postgresql" else sqlite_insert

        stmt = insert(CachedReview).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CachedReview.id],
            set_={column: stmt.excluded[column] for column in UPSERT_COLUMNS},
        )

        try:
            db.execute(stmt)
            db.commit()
            hidden = (
                db.query(CachedReview.id)
                .filter(
                    CachedReview.id.in_([r.id for r in reviews]),
                    CachedReview.is_visible.is_(False),
                )
                .all()
            )
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to upsert Trustpilot reviews into cache")
            return set()

        logger.info(f"Cached {len(rows)} Trustpilot reviews")
        return {row.id for row in hidden}


_review_service: Optional[ReviewService] = None


def get_review_service() -> ReviewService:
    """ReviewService Singleton"""
    global _review_service
    if _review_service is None:
        _review_service = ReviewService()
    return _review_service
