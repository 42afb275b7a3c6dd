"""
Kundenportal API

Alle Endpunkte erfordern eine gültige Supabase-Session und liefern nur
Daten des angemeldeten Kunden.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from portal.database import get_db
from portal.models.portal import (
    DocumentResponse,
    MilestoneResponse,
    MonitoringMonthResponse,
    NpsSubmitRequest,
    NpsSubmitResponse,
    PortalNotificationResponse,
    PortalSnapshot,
    ReferralOverview,
)
from portal.models.portal_db import Customer
from portal.services.auth_service import get_current_customer
from portal.services.portal_service import PortalService, get_portal_service
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/portal", tags=["portal"])


@router.get("/snapshot", response_model=PortalSnapshot)
def get_snapshot(
    customer: Customer = Depends(get_current_customer),
    db: Session = Depends(get_db),
    service: PortalService = Depends(get_portal_service),
):
    """
    Kunde, Projekt und Kennzahlen (kWh, CO2, Ersparnis, Empfehlungen, Fortschritt)
    """
    return service.get_snapshot(db, customer)


@router.get("/milestones", response_model=List[MilestoneResponse])
def get_milestones(
    customer: Customer = Depends(get_current_customer),
    db: Session = Depends(get_db),
    service: PortalService = Depends(get_portal_service),
):
    return service.get_milestones(db, customer)


@router.get("/documents", response_model=List[DocumentResponse])
async def get_documents(
    customer: Customer = Depends(get_current_customer),
    db: Session = Depends(get_db),
    service: PortalService = Depends(get_portal_service),
):
    """
    Projektdokumente mit signierten Download-URLs (1h gültig)
    """
    return await service.get_documents(db, customer)


@router.get("/monitoring", response_model=List[MonitoringMonthResponse])
def get_monitoring(
    customer: Customer = Depends(get_current_customer),
    db: Session = Depends(get_db),
    service: PortalService = Depends(get_portal_service),
):
    """
    Monatliche Produktion der letzten 12 Monate
    """
    return service.get_monitoring(db, customer)


@router.get("/referrals", response_model=ReferralOverview)
def get_referrals(
    customer: Customer = Depends(get_current_customer),
    db: Session = Depends(get_db),
    service: PortalService = Depends(get_portal_service),
):
    return service.get_referrals(db, customer)


@router.get("/notifications", response_model=List[PortalNotificationResponse])
def get_notifications(
    customer: Customer = Depends(get_current_customer),
    db: Session = Depends(get_db),
    service: PortalService = Depends(get_portal_service),
):
    """
    Ungelesene Benachrichtigungen (max. 10)
    """
    return service.get_unread_notifications(db, customer)


@router.post("/notifications/{notification_id}/read", response_model=PortalNotificationResponse)
def mark_notification_read(
    notification_id: str,
    customer: Customer = Depends(get_current_customer),
    db: Session = Depends(get_db),
    service: PortalService = Depends(get_portal_service),
):
    return service.mark_notification_read(db, customer, notification_id)


@router.post("/nps", response_model=NpsSubmitResponse)
def submit_nps(
    data: NpsSubmitRequest,
    customer: Customer = Depends(get_current_customer),
    db: Session = Depends(get_db),
    service: PortalService = Depends(get_portal_service),
):
    """
    NPS-Bewertung abgeben

    Pflichtfeld: score (0-10)
    """
    if data.score is None or not 0 <= data.score <= 10:
        raise HTTPException(status_code=400, detail="Bewertung muss zwischen 0 und 10 liegen")
    return service.submit_nps(db, customer, data.score, data.comment)
