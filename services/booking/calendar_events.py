# ============================================================
# calendar_events.py — Événement Google Calendar par réservation
# ------------------------------------------------------------
# Authentification par compte de service (JSON dans
# GOOGLE_SERVICE_ACCOUNT_JSON). Sans configuration, l'événement
# est "skipped" ; une erreur de l'API donne "failed".
# ============================================================
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import google_auth_httplib2
import httplib2
from google.oauth2 import service_account
from googleapiclient.discovery import build

import config
from catalog import location_label
from dates import iso
from extras import ExtrasSummary, format_extra_item
from pricing import format_eur

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]

CREATED = "created"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class CalendarEventRequest:
    booking_id: str
    car_name: str
    start: datetime
    end: datetime
    pickup: str
    dropoff: str
    customer_name: str
    customer_email: str
    customer_phone: str
    deposit: int
    total: Optional[int]
    status: str
    extras: ExtrasSummary = field(default_factory=ExtrasSummary)
    notes: Optional[str] = None


@dataclass
class CalendarEventResult:
    status: str
    event_id: Optional[str] = None
    html_link: Optional[str] = None
    error: Optional[str] = None


def build_description(p: CalendarEventRequest) -> str:
    total_text = format_eur(p.total) if p.total is not None else "On request"
    lines = [
        f"Booking ID: {p.booking_id}",
        "",
        f"Car: {p.car_name}",
        f"Pickup: {location_label(p.pickup)}",
        f"Dropoff: {location_label(p.dropoff)}",
        "",
        "Client:",
        f"Name: {p.customer_name}",
        f"Email: {p.customer_email}",
        f"Phone: {p.customer_phone}",
        "",
        f"Deposit: {format_eur(p.deposit)}",
        f"Estimated total: {total_text}",
    ]
    if p.extras.items:
        lines += ["", "Extras:"]
        lines += [f"- {format_extra_item(i)}" for i in p.extras.items]
        if p.extras.extras_total > 0:
            lines.append(f"Extras total: {format_eur(p.extras.extras_total)}")
        if p.extras.has_by_agreement:
            lines.append("(Some services require price confirmation)")
    if p.notes:
        lines += ["", f"Notes: {p.notes}"]
    lines += ["", f"Status: {p.status}"]
    return "\n".join(lines)


def build_event(p: CalendarEventRequest) -> dict:
    return {
        "summary": f"{p.status} — {p.car_name} — {p.customer_name}",
        "description": build_description(p),
        "start": {"dateTime": iso(p.start), "timeZone": config.CALENDAR_TZ},
        "end": {"dateTime": iso(p.end), "timeZone": config.CALENDAR_TZ},
        "reminders": {"useDefault": True},
    }


def _calendar_client():
    info = json.loads(config.GOOGLE_SERVICE_ACCOUNT_JSON)
    creds = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    http = google_auth_httplib2.AuthorizedHttp(creds, http=httplib2.Http(timeout=config.HTTP_TIMEOUT_SECONDS))
    return build("calendar", "v3", http=http, cache_discovery=False)


def create_calendar_event(p: CalendarEventRequest) -> CalendarEventResult:
    if not (config.GOOGLE_CALENDAR_ID and config.GOOGLE_SERVICE_ACCOUNT_JSON):
        logger.info("[calendar] not configured, skipping booking=%s", p.booking_id)
        return CalendarEventResult(status=SKIPPED)

    logger.info("[calendar] creating event calendar=%s booking=%s", config.GOOGLE_CALENDAR_ID, p.booking_id)
    try:
        client = _calendar_client()
        created = client.events().insert(calendarId=config.GOOGLE_CALENDAR_ID, body=build_event(p)).execute()
    except Exception as e:
        # clé invalide, réseau, erreur HTTP de l'API Google…
        logger.error("[calendar] error creating event booking=%s: %s", p.booking_id, e)
        return CalendarEventResult(status=FAILED, error=str(e))

    logger.info("[calendar] event created id=%s link=%s", created.get("id"), created.get("htmlLink"))
    return CalendarEventResult(status=CREATED, event_id=created.get("id"), html_link=created.get("htmlLink"))
