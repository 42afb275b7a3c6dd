from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


MAX_KEY_LENGTH = 100


# --- WhatsApp Einzelversand ---

class WhatsAppSendRequest(BaseModel):
    """WhatsApp-Versand bei Milestone-Änderung"""
    model_config = ConfigDict(populate_by_name=True)

    # Pflichtfelder werden im Router geprüft (400 statt 422)
    customer_id: Optional[str] = Field(None, alias="customerId", max_length=36)
    trigger: Optional[str] = Field(None, max_length=MAX_KEY_LENGTH)
    milestone_key: Optional[str] = Field(None, alias="milestoneKey", max_length=MAX_KEY_LENGTH)
    detail: Optional[str] = Field(None, max_length=500)  # z.B. Datum oder Dokumentname


class WhatsAppSendResponse(BaseModel):
    """WhatsApp-Versand Ergebnis"""
    success: bool
    sid: Optional[str] = None
    to: Optional[str] = None
    error: Optional[str] = None


# --- Terminerinnerungen (Cron) ---

class ReminderSweepResponse(BaseModel):
    """Terminerinnerungen Ergebnis"""
    success: bool = True
    sent: int
    total: int
