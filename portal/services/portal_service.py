"""
Portal-Daten - alle Abfragen für das Kundenportal

Jede Abfrage ist auf den angemeldeten Kunden bzw. sein Projekt beschränkt.
"""
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from portal.models.portal import (
    DocumentResponse,
    MilestoneResponse,
    MonitoringMonthResponse,
    NpsSubmitResponse,
    PortalNotificationResponse,
    PortalSnapshot,
    ReferralOverview,
    ReferralResponse,
)
from portal.models.portal_db import (
    Customer,
    Document,
    Milestone,
    MonitoringMonthly,
    NpsResponse,
    PortalNotification,
    Project,
    Referral,
)
from portal.services import portal_metrics
from portal.services.storage_service import StorageService, get_storage_service
import logging

logger = logging.getLogger(__name__)

UNREAD_NOTIFICATIONS_LIMIT = 10


def _one_year_before(d: date) -> date:
    try:
        return d.replace(year=d.year - 1)
    except ValueError:  # 29. Februar
        return d.replace(year=d.year - 1, day=28)


class PortalService:
    """Kundenportal Datenzugriff"""

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or get_storage_service()

    def get_project(self, db: Session, customer: Customer) -> Project:
        """Aktuellstes Projekt des Kunden"""
        project = (
            db.query(Project)
            .filter(Project.customer_id == customer.id)
            .order_by(Project.created_at.desc())
            .first()
        )
        if project is None:
            raise HTTPException(
                status_code=404,
                detail="Kein Projekt gefunden. Bitte kontaktieren Sie bee-doo.",
            )
        return project

    def get_snapshot(self, db: Session, customer: Customer) -> PortalSnapshot:
        """Kunde, Projekt und Kennzahlen in einem Objekt"""
        project = self.get_project(db, customer)
        milestones = self._milestones(db, project.id)

        total_kwh, total_revenue = (
            db.query(
                func.coalesce(func.sum(MonitoringMonthly.production_kwh), 0),
                func.coalesce(func.sum(MonitoringMonthly.revenue_eur), 0),
            )
            .filter(MonitoringMonthly.project_id == project.id)
            .one()
        )
        referrals = db.query(Referral).filter(Referral.referrer_id == customer.id).all()
        total_co2 = portal_metrics.co2_saved_kg(total_kwh)
        active = portal_metrics.active_milestone(milestones)

        return PortalSnapshot(
            customer_id=customer.id,
            customer_number=customer.customer_number,
            first_name=customer.first_name,
            last_name=customer.last_name,
            email=customer.email,
            zip=customer.zip,
            city=customer.city,
            referral_code=customer.referral_code,
            project_id=project.id,
            project_number=project.project_number,
            project_status=project.status,
            capacity_kwp=project.capacity_kwp,
            storage_kwh=project.storage_kwh,
            module_count=project.module_count,
            module_model=project.module_model,
            inverter_model=project.inverter_model,
            orientation=project.orientation,
            annual_yield_kwh=project.annual_yield_kwh,
            installation_date=project.installation_date,
            commissioning_date=project.commissioning_date,
            total_kwh=total_kwh,
            total_co2_kg=total_co2,
            total_revenue_eur=total_revenue,
            trees_equivalent=portal_metrics.trees_equivalent(total_co2),
            referral_count=len(referrals),
            referral_bonus_total=portal_metrics.referral_bonus_total(referrals),
            progress_pct=portal_metrics.progress_pct(milestones),
            active_milestone=MilestoneResponse.model_validate(active) if active else None,
        )

    def get_milestones(self, db: Session, customer: Customer) -> List[MilestoneResponse]:
        project = self.get_project(db, customer)
        return [MilestoneResponse.model_validate(m) for m in self._milestones(db, project.id)]

    def _milestones(self, db: Session, project_id: str) -> List[Milestone]:
        return (
            db.query(Milestone)
            .filter(Milestone.project_id == project_id)
            .order_by(Milestone.sort_order)
            .all()
        )

    async def get_documents(self, db: Session, customer: Customer) -> List[DocumentResponse]:
        """Dokumente, neueste zuerst, mit 1h gültiger Download-URL"""
        project = self.get_project(db, customer)
        docs = (
            db.query(Document)
            .filter(Document.project_id == project.id)
            .order_by(Document.uploaded_at.desc())
            .all()
        )

        results = []
        for doc in docs:
            download_url = await self.storage.create_signed_url(doc.storage_path)
            results.append(
                DocumentResponse(
                    id=doc.id,
                    category=doc.category,
                    file_name=doc.file_name,
                    mime_type=doc.mime_type,
                    file_size=doc.file_size,
                    uploaded_at=doc.uploaded_at,
                    download_url=download_url,
                )
            )
        return results

    def get_monitoring(
        self, db: Session, customer: Customer, today: Optional[date] = None
    ) -> List[MonitoringMonthResponse]:
        """Produktion der letzten 12 Monate, aufsteigend"""
        project = self.get_project(db, customer)
        since = _one_year_before(today or date.today())
        rows = (
            db.query(MonitoringMonthly)
            .filter(
                MonitoringMonthly.project_id == project.id,
                MonitoringMonthly.month >= since,
            )
            .order_by(MonitoringMonthly.month)
            .all()
        )
        return [
            MonitoringMonthResponse(
                month=r.month,
                production_kwh=r.production_kwh,
                feed_in_kwh=r.feed_in_kwh,
                self_use_kwh=r.self_use_kwh,
                co2_saved_kg=portal_metrics.co2_saved_kg(r.production_kwh),
                revenue_eur=r.revenue_eur,
            )
            for r in rows
        ]

    def get_referrals(self, db: Session, customer: Customer) -> ReferralOverview:
        referrals = (
            db.query(Referral)
            .filter(Referral.referrer_id == customer.id)
            .order_by(Referral.created_at.desc())
            .all()
        )
        return ReferralOverview(
            referral_code=customer.referral_code,
            referral_count=len(referrals),
            referral_bonus_total=portal_metrics.referral_bonus_total(referrals),
            referrals=[ReferralResponse.model_validate(r) for r in referrals],
        )

    def get_unread_notifications(self, db: Session, customer: Customer) -> List[PortalNotificationResponse]:
        rows = (
            db.query(PortalNotification)
            .filter(
                PortalNotification.customer_id == customer.id,
                PortalNotification.read_at.is_(None),
            )
            .order_by(PortalNotification.created_at.desc())
            .limit(UNREAD_NOTIFICATIONS_LIMIT)
            .all()
        )
        return [PortalNotificationResponse.model_validate(n) for n in rows]

    def mark_notification_read(
        self, db: Session, customer: Customer, notification_id: str
    ) -> PortalNotificationResponse:
        notification = (
            db.query(PortalNotification)
            .filter(
                PortalNotification.id == notification_id,
                PortalNotification.customer_id == customer.id,
            )
            .first()
        )
        if notification is None:
            raise HTTPException(status_code=404, detail="Benachrichtigung nicht gefunden")

        if notification.read_at is None:
            notification.read_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(notification)
        return PortalNotificationResponse.model_validate(notification)

    def submit_nps(
        self, db: Session, customer: Customer, score: int, comment: Optional[str] = None
    ) -> NpsSubmitResponse:
        record = NpsResponse(
            customer_id=customer.id,
            score=score,
            comment=comment or None,
            trigger="portal",
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info(f"NPS submitted: customer={customer.id}, score={score}")
        return NpsSubmitResponse(
            id=record.id, score=record.score, comment=record.comment, trigger=record.trigger
        )


_portal_service: Optional[PortalService] = None


def get_portal_service() -> PortalService:
    global _portal_service
    if _portal_service is None:
        _portal_service = PortalService()
    return _portal_service
