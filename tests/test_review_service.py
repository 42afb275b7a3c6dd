"""
ReviewService Tests

Cache / Demo / Live / Fallback mit In-Memory SQLite und gemocktem Trustpilot.
"""
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from portal.models.review import ReviewSource
from portal.models.review_db import CachedReview
from portal.services.review_service import ReviewService, map_trustpilot_review
from portal.services.trustpilot_client import TrustpilotClient
from portal.trustpilot_config import TrustpilotConfig


def _configured() -> TrustpilotConfig:
    return TrustpilotConfig(api_key="tp-key", business_unit_id="bu-123")


def _unconfigured() -> TrustpilotConfig:
    return TrustpilotConfig(api_key="", business_unit_id="")


def _tp_review(review_id, stars, days_ago, display_name="Max M.", reply=None):
    review = {
        "id": review_id,
        "stars": stars,
        "title": f"Titel {review_id}",
        "text": f"Text {review_id}",
        "createdAt": (datetime.now(timezone.utc) - timedelta(days=days_ago)).isoformat(),
        "consumer": {"displayName": display_name, "countryCode": "DE"},
    }
    if reply:
        review["companyReply"] = {"text": reply}
    return review


def _service(handler=None, config=None, calls=None):
    def recording(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return handler(request)

    transport = httpx.MockTransport(recording) if handler else None
    client = TrustpilotClient(config=config or _configured(), transport=transport)
    return ReviewService(client=client, cache_ttl_hours=24)


def _cache_row(db, review_id, stars, days_ago, cached_hours_ago=1, is_visible=True):
    now = datetime.now(timezone.utc)
    row = CachedReview(
        id=review_id,
        stars=stars,
        title=f"Titel {review_id}",
        text=f"Text {review_id}",
        author_name="Anna B.",
        created_at_tp=now - timedelta(days=days_ago),
        cached_at=now - timedelta(hours=cached_hours_ago),
        is_visible=is_visible,
    )
    db.add(row)
    db.commit()
    return row


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError("Trustpilot darf nicht aufgerufen werden")


class TestMapTrustpilotReview:

    def test_missing_consumer_becomes_anonym(self):
        raw = {"id": "r1", "stars": 5, "createdAt": "2025-01-10T10:00:00Z"}
        item = map_trustpilot_review(raw, datetime.now(timezone.utc))
        assert item.author_name == "Anonym"
        assert item.author_location is None
        assert item.text == ""
        assert item.is_visible is True

    def test_company_reply_is_mapped(self):
        raw = _tp_review("r2", 4, 3, reply="Danke!")
        item = map_trustpilot_review(raw, datetime.now(timezone.utc))
        assert item.response == "Danke!"
        assert item.author_location == "DE"


class TestFreshCache:
    """Stufe 1: frischer Cache"""

    @pytest.mark.asyncio
    async def test_single_fresh_row_is_served(self, db_session):
        """Ein frischer Eintrag genügt, Trustpilot wird nicht angefragt"""
        _cache_row(db_session, "c1", 5, days_ago=3)
        service = _service(_unreachable)

        result = await service.get_reviews(db_session)

        assert result.source == ReviewSource.CACHE
        assert [r.id for r in result.reviews] == ["c1"]
        assert result.totalFromTP is None

    @pytest.mark.asyncio
    async def test_filters_and_orders_newest_first(self, db_session):
        _cache_row(db_session, "old5", 5, days_ago=30)
        _cache_row(db_session, "new5", 5, days_ago=1)
        _cache_row(db_session, "mid5", 5, days_ago=10)
        _cache_row(db_session, "four", 4, days_ago=0)
        service = _service(_unreachable)

        result = await service.get_reviews(db_session, min_stars=5, limit=2)

        assert result.source == ReviewSource.CACHE
        assert [r.id for r in result.reviews] == ["new5", "mid5"]

    @pytest.mark.asyncio
    async def test_invisible_rows_never_returned(self, db_session):
        _cache_row(db_session, "hidden", 5, days_ago=1, is_visible=False)
        _cache_row(db_session, "shown", 5, days_ago=2)
        service = _service(_unreachable)

        result = await service.get_reviews(db_session)

        assert [r.id for r in result.reviews] == ["shown"]

    @pytest.mark.asyncio
    async def test_stale_rows_are_not_served_as_cache(self, db_session):
        """Älter als 24h: kein Cache-Treffer, Demo ohne Zugangsdaten"""
        _cache_row(db_session, "stale", 5, days_ago=5, cached_hours_ago=48)
        service = _service(config=_unconfigured())

        result = await service.get_reviews(db_session)

        assert result.source == ReviewSource.DEMO


class TestDemo:
    """Stufe 2: keine Zugangsdaten"""

    @pytest.mark.asyncio
    async def test_demo_when_unconfigured(self, db_session):
        service = _service(config=_unconfigured())

        result = await service.get_reviews(db_session)

        assert result.source == ReviewSource.DEMO
        assert len(result.reviews) == 6
        assert result.reviews[0].id == "demo-1"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_demo_respects_min_stars_and_limit(self, db_session):
        service = _service(config=_unconfigured())

        result = await service.get_reviews(db_session, min_stars=5, limit=3)

        assert [r.id for r in result.reviews] == ["demo-1", "demo-2", "demo-3"]
        assert all(r.stars == 5 for r in result.reviews)


class TestLive:
    """Stufe 3: Live-Abruf mit Upsert"""

    @pytest.mark.asyncio
    async def test_live_fetch_maps_and_caches(self, db_session):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["params"] = dict(request.url.params)
            captured["apikey"] = request.headers["apikey"]
            return httpx.Response(200, json={
                "reviews": [
                    _tp_review("tp-1", 5, 1, display_name=None),
                    _tp_review("tp-2", 4, 2, reply="Vielen Dank!"),
                ],
                "totalNumberOfReviews": 187,
            })

        service = _service(handler)
        result = await service.get_reviews(db_session, min_stars=4, limit=6)

        assert result.source == ReviewSource.API
        assert result.totalFromTP == 187
        assert [r.id for r in result.reviews] == ["tp-1", "tp-2"]
        assert result.reviews[0].author_name == "Anonym"
        assert result.reviews[1].response == "Vielen Dank!"

        assert captured["apikey"] == "tp-key"
        assert captured["params"]["stars"] == "5,4"
        assert captured["params"]["orderBy"] == "createdat.desc"
        assert captured["params"]["perPage"] == "16"

        assert db_session.query(CachedReview).count() == 2

    @pytest.mark.asyncio
    async def test_live_result_filtered_by_caller_min_stars(self, db_session):
        def handler(request):
            return httpx.Response(200, json={
                "reviews": [_tp_review("a", 4, 1), _tp_review("b", 5, 2)],
                "totalNumberOfReviews": 2,
            })

        service = _service(handler)
        result = await service.get_reviews(db_session, min_stars=5)

        assert [r.id for r in result.reviews] == ["b"]
        # gecacht wird trotzdem alles
        assert db_session.query(CachedReview).count() == 2

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(self, db_session):
        """Zweimal dieselben Bewertungen → weiterhin eine Zeile pro ID"""
        def handler(request):
            return httpx.Response(200, json={
                "reviews": [_tp_review("x1", 5, 1), _tp_review("x2", 5, 2)],
                "totalNumberOfReviews": 2,
            })

        service = _service(handler)
        await service.get_reviews(db_session, force_sync=True)
        await service.get_reviews(db_session, force_sync=True)

        assert db_session.query(CachedReview).count() == 2

    @pytest.mark.asyncio
    async def test_upsert_updates_fields_but_keeps_hidden_flag(self, db_session):
        _cache_row(db_session, "h1", 5, days_ago=1, cached_hours_ago=48, is_visible=False)

        def handler(request):
            review = _tp_review("h1", 5, 1)
            review["title"] = "Neuer Titel"
            return httpx.Response(200, json={
                "reviews": [review, _tp_review("v1", 5, 2)],
                "totalNumberOfReviews": 2,
            })

        service = _service(handler)
        result = await service.get_reviews(db_session)

        assert result.source == ReviewSource.API
        assert [r.id for r in result.reviews] == ["v1"]

        db_session.expire_all()
        hidden = db_session.get(CachedReview, "h1")
        assert hidden.is_visible is False
        assert hidden.title == "Neuer Titel"

    @pytest.mark.asyncio
    async def test_force_sync_skips_fresh_cache(self, db_session):
        _cache_row(db_session, "cached", 5, days_ago=1)
        calls = []

        def handler(request):
            return httpx.Response(200, json={
                "reviews": [_tp_review("live", 5, 0)],
                "totalNumberOfReviews": 1,
            })

        service = _service(handler, calls=calls)
        result = await service.get_reviews(db_session, force_sync=True)

        assert result.source == ReviewSource.API
        assert [r.id for r in result.reviews] == ["live"]
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_empty_live_response(self, db_session):
        def handler(request):
            return httpx.Response(200, json={"reviews": [], "totalNumberOfReviews": 0})

        service = _service(handler)
        result = await service.get_reviews(db_session)

        assert result.source == ReviewSource.API
        assert result.reviews == []
        assert result.totalFromTP == 0


class TestFallback:
    """Stufe 4: Live-Abruf fehlgeschlagen"""

    @pytest.mark.asyncio
    async def test_error_with_empty_cache_serves_demo(self, db_session):
        def handler(request):
            return httpx.Response(401, json={"message": "Unauthorized"})

        service = _service(handler)
        result = await service.get_reviews(db_session)

        assert result.source == ReviewSource.FALLBACK
        assert result.error is not None
        assert "401" in result.error
        assert len(result.reviews) == 6
        assert result.reviews[0].id == "demo-1"

    @pytest.mark.asyncio
    async def test_error_serves_stale_cache(self, db_session):
        _cache_row(db_session, "stale-new", 5, days_ago=2, cached_hours_ago=72)
        _cache_row(db_session, "stale-old", 4, days_ago=9, cached_hours_ago=72)
        _cache_row(db_session, "stale-hidden", 5, days_ago=1, cached_hours_ago=72, is_visible=False)

        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        service = _service(handler)
        result = await service.get_reviews(db_session)

        assert result.source == ReviewSource.FALLBACK
        assert [r.id for r in result.reviews] == ["stale-new", "stale-old"]
        assert "timed out" in result.error

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        [],
        {"reviews": ["oops"]},
        {"reviews": {"id": "r1"}},
        "not an object",
    ])
    async def test_unexpected_payload_shape_falls_back(self, db_session, payload):
        """2xx mit falscher Struktur → Fallback statt Fehler"""
        def handler(request):
            return httpx.Response(200, json=payload)

        service = _service(handler)
        result = await service.get_reviews(db_session, force_sync=True)

        assert result.source == ReviewSource.FALLBACK
        assert "unexpected" in result.error
        assert [r.id for r in result.reviews][:1] == ["demo-1"]

    @pytest.mark.asyncio
    async def test_non_json_body_falls_back(self, db_session):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        service = _service(handler)
        result = await service.get_reviews(db_session, force_sync=True)

        assert result.source == ReviewSource.FALLBACK
        assert result.reviews

    @pytest.mark.asyncio
    async def test_string_consumer_is_treated_as_anonymous(self, db_session):
        def handler(request):
            review = _tp_review("s1", 5, 1)
            review["consumer"] = "Max"
            review["companyReply"] = "Danke"
            return httpx.Response(200, json={"reviews": [review], "totalNumberOfReviews": 1})

        service = _service(handler)
        result = await service.get_reviews(db_session, force_sync=True)

        assert result.source == ReviewSource.API
        assert result.reviews[0].author_name == "Anonym"
        assert result.reviews[0].response is None

    @pytest.mark.asyncio
    async def test_malformed_payload_falls_back(self, db_session):
        def handler(request):
            return httpx.Response(200, json={"reviews": [{"stars": 5}]})

        service = _service(handler)
        result = await service.get_reviews(db_session)

        assert result.source == ReviewSource.FALLBACK
        assert result.reviews
