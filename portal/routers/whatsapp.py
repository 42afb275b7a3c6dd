"""
WhatsApp-Benachrichtigungen über Twilio

POST: Einzelversand bei Milestone-Änderung
GET:  tägliche Terminerinnerungen (Cron, mit x-cron-secret)
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from portal.config import settings
from portal.database import get_db
from portal.models.notification import (
    WhatsAppSendRequest,
    WhatsAppSendResponse,
    ReminderSweepResponse,
)
from portal.services.notification_service import (
    NotificationDispatcher,
    get_notification_dispatcher,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/whatsapp", tags=["whatsapp"])


@router.post(
    "/send",
    response_model=WhatsAppSendResponse,
    response_model_exclude_none=True,
    responses={502: {"model": WhatsAppSendResponse}},
)
async def send_whatsapp(
    request: WhatsAppSendRequest,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    WhatsApp-Nachricht an einen Kunden senden

    Pflichtfelder: customerId, trigger
    """
    if not request.customer_id or not request.trigger:
        raise HTTPException(status_code=400, detail="customerId und trigger erforderlich")

    result = await dispatcher.send(
        db,
        customer_id=request.customer_id,
        trigger=request.trigger,
        milestone_key=request.milestone_key,
        detail=request.detail,
    )

    if not result.success:
        return JSONResponse(
            status_code=502,
            content=result.model_dump(exclude_none=True),
        )
    return result


@router.get("/send", response_model=ReminderSweepResponse)
async def send_appointment_reminders(
    x_cron_secret: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Terminerinnerungen für alle Installationen morgen (täglicher Cron)
    """
    if not settings.CRON_SECRET or not x_cron_secret or not hmac.compare_digest(
        x_cron_secret.encode(), settings.CRON_SECRET.encode()
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")

    return await dispatcher.send_appointment_reminders(db)
