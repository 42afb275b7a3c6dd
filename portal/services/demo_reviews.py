"""Beispielbewertungen, solange kein Trustpilot API Key konfiguriert ist"""
from datetime import datetime, timedelta, timezone
from typing import List

from portal.models.review import ReviewItem

_SAMPLES = [
    {
        "id": "demo-1",
        "stars": 5,
        "title": "Rundum perfekter Service!",
        "text": (
            "Von der Beratung bis zur Inbetriebnahme war alles top. Das Team hat sich wirklich "
            "Zeit genommen, alles verständlich erklärt und der Installationstermin wurde exakt "
            "eingehalten. Unsere Anlage läuft seit 3 Monaten einwandfrei. Volle Empfehlung!"
        ),
        "author_name": "Thomas K.",
        "author_location": "Bielefeld",
        "days_ago": 7,
        "response": (
            "Vielen Dank, Thomas! Wir freuen uns riesig über Ihr Feedback und wünschen "
            "weiterhin viel Sonnenstrom! ☀️"
        ),
    },
    {
        "id": "demo-2",
        "stars": 5,
        "title": "Schnell, zuverlässig, kompetent",
        "text": (
            "Ich war skeptisch bei so einem großen Projekt, aber bee-doo hat meine Erwartungen "
            "übertroffen. Die Monteure waren pünktlich, sauber und haben alles sorgfältig erklärt. "
            "Das Kunden-Portal ist sehr übersichtlich. Super Preis-Leistungs-Verhältnis."
        ),
        "author_name": "Sabine M.",
        "author_location": "Gütersloh",
        "days_ago": 14,
        "response": None,
    },
    {
        "id": "demo-3",
        "stars": 5,
        "title": "Bestes Unternehmen für Solaranlagen",
        "text": (
            "Nachdem ich drei Angebote verglichen habe, war bee-doo das überzeugendste. "
            "Transparente Preise, kompetente Beratung und eine reibungslose Installation. "
            "Die Anlage produziert sogar mehr als prognostiziert. Sehr zu empfehlen!"
        ),
        "author_name": "Michael R.",
        "author_location": "Herford",
        "days_ago": 21,
        "response": "Toll, das freut uns sehr, Michael! Schön, dass die Anlage so gut läuft. ☀️",
    },
    {
        "id": "demo-4",
        "stars": 5,
        "title": "Professionell von Anfang bis Ende",
        "text": (
            "Top Beratung, faire Preise und ein sehr freundliches Installationsteam. Alles wurde "
            "genau so umgesetzt wie besprochen. Das Online-Portal macht es einfach, den Ertrag zu "
            "verfolgen. Ich würde bee-doo jederzeit weiterempfehlen."
        ),
        "author_name": "Andrea L.",
        "author_location": "Detmold",
        "days_ago": 30,
        "response": None,
    },
    {
        "id": "demo-5",
        "stars": 5,
        "title": "Unkompliziert und schnell!",
        "text": (
            "Innerhalb von 6 Wochen vom ersten Gespräch bis zur fertigen Anlage – das hatte ich so "
            "nicht erwartet. Das Team kommuniziert transparent und hält was es verspricht. "
            "Sehr empfehlenswert!"
        ),
        "author_name": "Klaus W.",
        "author_location": "Minden",
        "days_ago": 45,
        "response": "Herzlichen Dank, Klaus! Effizienz ist uns sehr wichtig. Viel Spaß mit Ihrer Anlage! 🌞",
    },
    {
        "id": "demo-6",
        "stars": 4,
        "title": "Sehr guter Gesamteindruck",
        "text": (
            "Die Beratung war sehr kompetent und die Installation lief reibungslos. Kleinere "
            "Kommunikationsprobleme bei der Terminabsprache, aber insgesamt sehr zufrieden. "
            "Die Anlage funktioniert einwandfrei."
        ),
        "author_name": "Petra B.",
        "author_location": "Paderborn",
        "days_ago": 60,
        "response": "Danke für Ihr offenes Feedback, Petra! Wir arbeiten ständig an unserer Kommunikation.",
    },
]


def demo_reviews() -> List[ReviewItem]:
    """Beispielbewertungen mit Zeitstempeln relativ zu jetzt, neueste zuerst"""
    now = datetime.now(timezone.utc)
    return [
        ReviewItem(
            id=s["id"],
            stars=s["stars"],
            title=s["title"],
            text=s["text"],
            author_name=s["author_name"],
            author_location=s["author_location"],
            created_at_tp=now - timedelta(days=s["days_ago"]),
            response=s["response"],
            cached_at=now,
            is_visible=True,
        )
        for s in _SAMPLES
    ]
