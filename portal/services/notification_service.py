"""
Benachrichtigungsservice - WhatsApp bei Milestone-Änderungen

Einzelversand (Milestone/Trigger → Vorlage → Twilio → Protokoll) und
die tägliche Terminerinnerung für Installationen am Folgetag.
Jeder Versandversuch wird in whatsapp_notifications protokolliert.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from portal.config import settings
from portal.models.notification import WhatsAppSendResponse, ReminderSweepResponse
from portal.models.notification_db import WhatsAppNotification, DeliveryStatus
from portal.models.portal_db import Customer, Project
from portal.services.message_templates import TEMPLATES, render_message
from portal.services.whatsapp_client import SendResult, TwilioWhatsAppClient
import logging

logger = logging.getLogger(__name__)

REMINDER_TRIGGER = "appointment_reminder"

WEEKDAYS_DE = [
    "Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag",
]
MONTHS_DE = [
    "Januar", "Februar", "März", "April", "Mai", "Juni",
    "Juli", "August", "September", "Oktober", "November", "Dezember",
]


def format_long_date_de(d: date) -> str:
    """z.B. "Freitag, 28. Februar" """
    return f"{WEEKDAYS_DE[d.weekday()]}, {d.day:02d}. {MONTHS_DE[d.month - 1]}"


class NotificationDispatcher:
    """WhatsApp-Benachrichtigungen über Twilio"""

    def __init__(
        self,
        client: Optional[TwilioWhatsAppClient] = None,
        timezone_name: str = settings.PORTAL_TIMEZONE,
    ):
        self.client = client or TwilioWhatsAppClient()
        self.tz = ZoneInfo(timezone_name)

    async def send(
        self,
        db: Session,
        customer_id: str,
        trigger: str,
        milestone_key: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> WhatsAppSendResponse:
        """
        WhatsApp-Nachricht an einen Kunden senden

        Die Vorlage wird über milestone_key, dann trigger gewählt; unbekannte
        Schlüssel fallen auf die Inbetriebnahme-Vorlage zurück.
        Der Versandversuch wird immer protokolliert, auch bei Fehlern.

        Args:
            db: DB Session
            customer_id: Kunden-ID
            trigger: Auslöser (z.B. 'milestone_change')
            milestone_key: Milestone-Schlüssel (z.B. 'installation')
            detail: Datum oder Dokumentname für die Vorlage

        Returns:
            Versandergebnis (success=False bei Twilio-Fehler)

        Raises:
            HTTPException: 404 wenn Kunde oder Telefonnummer fehlt
        """
        customer = db.get(Customer, customer_id)
        if customer is None or not customer.phone:
            raise HTTPException(status_code=404, detail="Kunde nicht gefunden oder keine Telefonnummer")

        message = render_message(customer.first_name, trigger, milestone_key, detail)
        result = await self.client.send_message(customer.phone, message)

        self._log_attempt(
            db,
            customer_id=customer.id,
            phone=customer.phone,
            message=message,
            trigger=trigger,
            milestone_key=milestone_key,
            result=result,
        )

        if not result.ok:
            return WhatsAppSendResponse(success=False, error=result.error)

        return WhatsAppSendResponse(success=True, sid=result.sid, to=customer.phone)

    async def send_appointment_reminders(
        self, db: Session, today: Optional[date] = None
    ) -> ReminderSweepResponse:
        """
        Terminerinnerung für alle Installationen am Folgetag (täglicher Cron)

        Projekte werden nacheinander abgearbeitet. Kunden ohne Telefonnummer
        werden übersprungen; ein fehlgeschlagener Versand bricht den Lauf
        nicht ab und wird nicht wiederholt.

        Returns:
            sent = erfolgreich versendet, total = Anzahl Projekte
        """
        if today is None:
            today = datetime.now(self.tz).date()
        tomorrow = today + timedelta(days=1)

        projects = (
            db.query(Project)
            .options(joinedload(Project.customer))
            .filter(Project.installation_date == tomorrow)
            .all()
        )
        date_label = format_long_date_de(tomorrow)

        sent = 0
        for project in projects:
            customer = project.customer
            if customer is None or not customer.phone:
                logger.info(f"Skipping reminder for project {project.id}: no phone number")
                continue

            message = TEMPLATES[REMINDER_TRIGGER](customer.first_name, date_label)
            result = await self.client.send_message(customer.phone, message)

            self._log_attempt(
                db,
                customer_id=customer.id,
                project_id=project.id,
                phone=customer.phone,
                message=message,
                trigger=REMINDER_TRIGGER,
                result=result,
            )

            if result.ok:
                sent += 1

        logger.info(f"Appointment reminders for {tomorrow}: sent={sent}, total={len(projects)}")
        return ReminderSweepResponse(sent=sent, total=len(projects))

    def _log_attempt(
        self,
        db: Session,
        customer_id: str,
        phone: str,
        message: str,
        trigger: str,
        result: SendResult,
        milestone_key: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Optional[WhatsAppNotification]:
        """Versandversuch protokollieren; ein Fehler beim Schreiben ändert das Versandergebnis nicht"""
        record = WhatsAppNotification(
            customer_id=customer_id,
            project_id=project_id,
            phone=phone,
            message=message,
            trigger=trigger,
            milestone_key=milestone_key,
            twilio_sid=result.sid,
            status=DeliveryStatus.SENT.value if result.ok else DeliveryStatus.FAILED.value,
            sent_at=datetime.now(timezone.utc) if result.ok else None,
            error=result.error,
        )
        try:
            db.add(record)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to write WhatsApp log for customer {customer_id}")
            return None
        return record


# Singleton-Instanz
_notification_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """NotificationDispatcher Singleton"""
    global _notification_dispatcher
    if _notification_dispatcher is None:
        _notification_dispatcher = NotificationDispatcher()
    return _notification_dispatcher
