"""
WhatsApp-Nachrichtenvorlagen

Jede Vorlage bekommt den Vornamen des Kunden und optional ein Detail
(Datum oder Dokumentname) und liefert den fertigen Nachrichtentext.
"""
import logging
from typing import Callable, Dict, Optional, Tuple

from portal.config import settings

logger = logging.getLogger(__name__)

Template = Callable[[str, Optional[str]], str]

DEFAULT_TEMPLATE_KEY = "commissioning"

PORTAL_URL = settings.PORTAL_URL
SUPPORT_PHONE = settings.SUPPORT_PHONE


def _consultation(name: str, detail: Optional[str] = None) -> str:
    return (
        f"☀️ *Hallo {name}!*\n\n"
        "Vielen Dank für Ihr Beratungsgespräch mit bee-doo. Wir freuen uns auf Ihr Projekt!\n\n"
        f"Bei Fragen: {SUPPORT_PHONE}\n"
        f"Ihr Portal: {PORTAL_URL}"
    )


def _contract(name: str, detail: Optional[str] = None) -> str:
    return (
        f"📋 *Hallo {name}!*\n\n"
        "Ihr Vertrag ist eingegangen – herzlichen Glückwunsch! "
        "Wir starten jetzt mit der Planung Ihrer Solaranlage.\n\n"
        "Dokumente jetzt im Portal ansehen:\n"
        f"👉 {PORTAL_URL}"
    )


def _grid_application(name: str, detail: Optional[str] = None) -> str:
    return (
        f"📡 *Status-Update für {name}*\n\n"
        "Ihre *Netzanmeldung* wurde eingereicht. "
        "Der Netzbetreiber bestätigt in der Regel innerhalb von 2-4 Wochen.\n\n"
        "Sie werden automatisch informiert. Ihr Portal:\n"
        f"👉 {PORTAL_URL}"
    )


def _installation(name: str, date: Optional[str] = None) -> str:
    return (
        "🔧 *Installationstermin bestätigt!*\n\n"
        f"Hallo {name}, Ihr Installationsteam kommt am *{date}* ab 08:00 Uhr zu Ihnen.\n\n"
        "✅ Bitte stellen Sie sicher, dass das Dach zugänglich ist.\n\n"
        f"Fragen? {SUPPORT_PHONE}\n"
        f"👉 {PORTAL_URL}"
    )


def _commissioning(name: str, detail: Optional[str] = None) -> str:
    return (
        "⚡ *Ihre Anlage ist in Betrieb!*\n\n"
        f"Hallo {name}, Ihre Solaranlage wurde erfolgreich in Betrieb genommen. "
        "Ab sofort produziert Sie sauberen Strom!\n\n"
        "☀️ Monitoring jetzt im Portal:\n"
        f"👉 {PORTAL_URL}"
    )


def _feed_in(name: str, detail: Optional[str] = None) -> str:
    return (
        "💶 *Einspeisung bestätigt!*\n\n"
        f"Hallo {name}, der Netzbetreiber hat Ihre Einspeisung bestätigt. "
        "Die *Einspeisevergütung* startet jetzt automatisch.\n\n"
        "📊 Alle Details im Portal:\n"
        f"👉 {PORTAL_URL}"
    )


def _document_ready(name: str, doc_name: Optional[str] = None) -> str:
    return (
        "📄 *Neues Dokument verfügbar*\n\n"
        f"Hallo {name}, \"{doc_name}\" wurde in Ihrem Portal hochgeladen.\n\n"
        f"👉 {PORTAL_URL}"
    )


def _appointment_reminder(name: str, date: Optional[str] = None) -> str:
    return (
        "⏰ *Terminerinnerung für morgen*\n\n"
        f"Hallo {name}, Ihr Installationsteam kommt *morgen, {date}* ab 08:00 Uhr.\n\n"
        "Bitte halten Sie den Dachbereich zugänglich.\n\n"
        f"Fragen? {SUPPORT_PHONE}"
    )


TEMPLATES: Dict[str, Template] = {
    "consultation": _consultation,
    "contract": _contract,
    "grid_application": _grid_application,
    "installation": _installation,
    "commissioning": _commissioning,
    "feed_in": _feed_in,
    "document_ready": _document_ready,
    "appointment_reminder": _appointment_reminder,
}


def resolve_template(trigger: Optional[str], milestone_key: Optional[str] = None) -> Tuple[str, Template]:
    """
    Vorlage auswählen: erst milestone_key, dann trigger, sonst "commissioning"

    Unbekannte Schlüssel führen nie zu einem Fehler.

    Returns:
        (verwendeter Schlüssel, Vorlagenfunktion)
    """
    for key in (milestone_key, trigger):
        if key and key in TEMPLATES:
            return key, TEMPLATES[key]

    logger.warning(
        f"No template for milestone_key={milestone_key!r} / trigger={trigger!r}, "
        f"using '{DEFAULT_TEMPLATE_KEY}'"
    )
    return DEFAULT_TEMPLATE_KEY, TEMPLATES[DEFAULT_TEMPLATE_KEY]


def render_message(
    first_name: str,
    trigger: Optional[str],
    milestone_key: Optional[str] = None,
    detail: Optional[str] = None,
) -> str:
    _, template = resolve_template(trigger, milestone_key)
    return template(first_name, detail)
