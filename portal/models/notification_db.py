"""
WhatsApp-Versandprotokoll (SQLAlchemy)

whatsapp_notifications: ein Eintrag pro Versandversuch, wird nie verändert
"""
from enum import Enum

from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.sql import func

from portal.database import Base


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


class WhatsAppNotification(Base):
    """WhatsApp-Versandprotokoll"""
    __tablename__ = "whatsapp_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=True)
    phone = Column(String(50), nullable=False)  # wie beim Kunden gespeichert
    message = Column(Text, nullable=False)
    trigger = Column(Text, nullable=False)
    milestone_key = Column(Text, nullable=True)
    twilio_sid = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False)  # 'sent', 'failed'
    error = Column(Text, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
