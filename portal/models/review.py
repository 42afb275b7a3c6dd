from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime
from enum import Enum


class ReviewSource(str, Enum):
    """Welche Stufe die Bewertungen geliefert hat"""
    CACHE = "cache"
    API = "api"
    FALLBACK = "fallback"
    DEMO = "demo"


class ReviewItem(BaseModel):
    """Bewertung im Format der trustpilot_reviews Tabelle"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    stars: int
    title: Optional[str] = None
    text: str = ""
    author_name: str = "Anonym"
    author_location: Optional[str] = None
    created_at_tp: datetime
    response: Optional[str] = None
    cached_at: Optional[datetime] = None
    is_visible: bool = True


class ReviewListResponse(BaseModel):
    """GET /api/trustpilot Antwort"""
    reviews: List[ReviewItem]
    source: ReviewSource
    totalFromTP: Optional[int] = None
    error: Optional[str] = None
