from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text
from sqlalchemy.sql import func

from portal.database import Base


class CachedReview(Base):
    """Lokale Kopie einer Trustpilot-Bewertung, per Trustpilot-ID upserted"""
    __tablename__ = "trustpilot_reviews"

    id = Column(String(64), primary_key=True)  # Trustpilot Review ID
    stars = Column(Integer, nullable=False, index=True)
    title = Column(String(500), nullable=True)
    text = Column(Text, nullable=False, default="")
    author_name = Column(String(255), nullable=False, default="Anonym")
    author_location = Column(String(100), nullable=True)
    created_at_tp = Column(DateTime(timezone=True), nullable=False, index=True)
    response = Column(Text, nullable=True)
    cached_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    is_visible = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<CachedReview(id={self.id}, stars={self.stars})>"
