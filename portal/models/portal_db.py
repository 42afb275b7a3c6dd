"""
Portal-Tabellen (SQLAlchemy, Supabase Postgres / SQLite lokal)

customers, projects, milestones, documents, monitoring_monthly,
referrals, nps_responses, notifications
"""
import uuid
from enum import Enum

from sqlalchemy import (
    Column, String, Integer, Float, Date, DateTime, Text, ForeignKey,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from portal.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class ProjectStatus(str, Enum):
    CONSULTATION = "consultation"
    CONTRACT = "contract"
    GRID_APPLICATION = "grid_application"
    INSTALLATION = "installation"
    COMMISSIONING = "commissioning"
    FEED_IN = "feed_in"
    COMPLETED = "completed"


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    DONE = "done"


class DocumentCategory(str, Enum):
    OFFER = "offer"
    CONTRACT = "contract"
    GRID_APPLICATION = "grid_application"
    INSTALLATION_PROTOCOL = "installation_protocol"
    COMMISSIONING_PROTOCOL = "commissioning_protocol"
    FEED_IN_CONFIRMATION = "feed_in_confirmation"
    WARRANTY = "warranty"
    OTHER = "other"


class ReferralStatus(str, Enum):
    PENDING = "pending"
    CONVERTED = "converted"
    BONUS_PAID = "bonus_paid"


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ACTION = "action"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), unique=True, index=True, nullable=True)  # Supabase auth.users.id
    customer_number = Column(String(32), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    street = Column(String(255), nullable=True)
    zip = Column(String(10), nullable=True)
    city = Column(String(100), nullable=True)
    referral_code = Column(String(32), unique=True, nullable=False)
    referred_by = Column(String(36), ForeignKey("customers.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    projects = relationship("Project", back_populates="customer", order_by="Project.created_at.desc()")

    def __repr__(self):
        return f"<Customer(id={self.id}, customer_number={self.customer_number})>"


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_uuid)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    project_number = Column(String(32), unique=True, nullable=False)
    status = Column(String(30), default=ProjectStatus.CONSULTATION.value, nullable=False)
    capacity_kwp = Column(Float, nullable=True)
    storage_kwh = Column(Float, nullable=True)
    module_count = Column(Integer, nullable=True)
    module_model = Column(String(255), nullable=True)
    inverter_model = Column(String(255), nullable=True)
    orientation = Column(String(50), nullable=True)
    annual_yield_kwh = Column(Float, nullable=True)
    total_price_gross = Column(Float, nullable=True)
    deposit_paid = Column(Float, nullable=True)
    consultation_date = Column(Date, nullable=True)
    contract_date = Column(Date, nullable=True)
    installation_date = Column(Date, index=True, nullable=True)
    commissioning_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="projects")
    milestones = relationship("Milestone", back_populates="project", order_by="Milestone.sort_order")

    def __repr__(self):
        return f"<Project(id={self.id}, status={self.status})>"


class Milestone(Base):
    __tablename__ = "milestones"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), index=True, nullable=False)
    key = Column(String(50), nullable=False)  # 'consultation', 'installation', ...
    title = Column(String(255), nullable=False)
    status = Column(String(20), default=MilestoneStatus.PENDING.value, nullable=False)
    planned_date = Column(Date, nullable=True)
    done_date = Column(Date, nullable=True)
    note = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="milestones")


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), index=True, nullable=False)
    category = Column(String(50), default=DocumentCategory.OTHER.value, nullable=False)
    file_name = Column(String(255), nullable=False)
    storage_path = Column(String(512), nullable=False)
    mime_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())


class MonitoringMonthly(Base):
    __tablename__ = "monitoring_monthly"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), index=True, nullable=False)
    month = Column(Date, nullable=False)  # jeweils der Monatserste
    production_kwh = Column(Float, nullable=False, default=0)
    feed_in_kwh = Column(Float, nullable=False, default=0)
    self_use_kwh = Column(Float, nullable=False, default=0)
    revenue_eur = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Referral(Base):
    __tablename__ = "referrals"

    id = Column(String(36), primary_key=True, default=_uuid)
    referrer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    referred_email = Column(String(255), nullable=False)
    referred_customer = Column(String(36), ForeignKey("customers.id"), nullable=True)
    status = Column(String(20), default=ReferralStatus.PENDING.value, nullable=False)
    bonus_amount = Column(Float, nullable=False, default=500)
    converted_at = Column(DateTime(timezone=True), nullable=True)
    bonus_paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class NpsResponse(Base):
    __tablename__ = "nps_responses"

    id = Column(String(36), primary_key=True, default=_uuid)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    score = Column(Integer, nullable=False)  # 0-10
    comment = Column(Text, nullable=True)
    trigger = Column(String(50), nullable=False, default="portal")
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PortalNotification(Base):
    """In-App Benachrichtigungen im Portal (nicht WhatsApp)"""
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_uuid)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=True)
    type = Column(String(20), default=NotificationType.INFO.value, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    action_url = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
