from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import date, datetime


# --- Projektstatus ---

class MilestoneResponse(BaseModel):
    """Milestone der Projekt-Timeline"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    key: str
    title: str
    status: str  # 'pending', 'active', 'done'
    planned_date: Optional[date] = None
    done_date: Optional[date] = None
    note: Optional[str] = None
    sort_order: int


class PortalSnapshot(BaseModel):
    """Übersicht für den Portal-Header und die Kennzahlen"""
    customer_id: str
    customer_number: str
    first_name: str
    last_name: str
    email: str
    zip: Optional[str] = None
    city: Optional[str] = None
    referral_code: str
    project_id: str
    project_number: str
    project_status: str
    capacity_kwp: Optional[float] = None
    storage_kwh: Optional[float] = None
    module_count: Optional[int] = None
    module_model: Optional[str] = None
    inverter_model: Optional[str] = None
    orientation: Optional[str] = None
    annual_yield_kwh: Optional[float] = None
    installation_date: Optional[date] = None
    commissioning_date: Optional[date] = None
    total_kwh: float = 0
    total_co2_kg: float = 0
    total_revenue_eur: float = 0
    trees_equivalent: int = 0
    referral_count: int = 0
    referral_bonus_total: float = 0
    progress_pct: int = 0
    active_milestone: Optional[MilestoneResponse] = None


# --- Dokumente ---

class DocumentResponse(BaseModel):
    """Dokument mit signierter Download-URL"""
    id: str
    category: str
    file_name: str
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_at: Optional[datetime] = None
    download_url: Optional[str] = None


# --- Monitoring ---

class MonitoringMonthResponse(BaseModel):
    """Monatliche Produktion"""
    month: date
    production_kwh: float
    feed_in_kwh: float
    self_use_kwh: float
    co2_saved_kg: float
    revenue_eur: Optional[float] = None


# --- Empfehlungen ---

class ReferralResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    referred_email: str
    status: str  # 'pending', 'converted', 'bonus_paid'
    bonus_amount: float
    converted_at: Optional[datetime] = None
    bonus_paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ReferralOverview(BaseModel):
    referral_code: str
    referral_count: int
    referral_bonus_total: float
    referrals: List[ReferralResponse]


# --- In-App Benachrichtigungen ---

class PortalNotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    body: Optional[str] = None
    type: str
    action_url: Optional[str] = None
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


# --- NPS ---

class NpsSubmitRequest(BaseModel):
    """NPS-Bewertung (0-10), Bereich wird im Router geprüft"""
    score: Optional[int] = None
    comment: Optional[str] = None


class NpsSubmitResponse(BaseModel):
    id: str
    score: int
    comment: Optional[str] = None
    trigger: str


# --- Login ---

class MagicLinkRequest(BaseModel):
    email: Optional[str] = None
    next: Optional[str] = None


class SessionUser(BaseModel):
    """Verifizierter Supabase-Benutzer"""
    id: str
    email: Optional[str] = None
