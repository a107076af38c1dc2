# ============================================================
# mailer.py — Emails de confirmation (client et agence)
# ------------------------------------------------------------
# Les corps HTML / texte sont rendus avec Jinja2 (templates/).
# Envoi via l'API HTTP Resend si RESEND_API_KEY est défini,
# sinon l'email est seulement journalisé (développement).
# Ne lève jamais : le résultat indique le succès ou l'échec.
# ============================================================
import logging
import os
from dataclasses import dataclass
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

import config
from catalog import Car, location_label
from dates import to_local
from extras import ExtrasSummary, format_extra_item
from models import Booking
from pricing import PriceSummary, format_eur

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
templates.filters["eur"] = format_eur
templates.filters["location"] = location_label
templates.filters["extra"] = format_extra_item


@dataclass
class SendEmailResult:
    ok: bool
    id: Optional[str] = None
    error_message: Optional[str] = None
    error_name: Optional[str] = None


@dataclass
class RenderedEmail:
    subject: str
    html: str
    text: str


def _long_date(dt) -> str:
    local = to_local(dt)
    return f"{local:%B} {local.day}, {local.year}"


def _context(booking: Booking, car: Car, pricing: PriceSummary, extras: Optional[ExtrasSummary]) -> dict:
    return {
        "booking": booking,
        "car": car,
        "pricing": pricing,
        "extras": extras,
        "start_date": _long_date(booking.start_at),
        "end_date": _long_date(booking.end_at),
        "days_label": "day" if pricing.days == 1 else "days",
        "created": to_local(booking.created_at).strftime("%Y-%m-%d %H:%M"),
        "whatsapp_phone": config.WHATSAPP_PHONE,
    }


def _render(name: str, ctx: dict) -> RenderedEmail:
    return RenderedEmail(
        subject="",
        html=templates.get_template(f"{name}.html").render(**ctx),
        text=templates.get_template(f"{name}.txt").render(**ctx).strip(),
    )


def build_client_email(booking: Booking, car: Car, pricing: PriceSummary,
                       extras: Optional[ExtrasSummary] = None) -> RenderedEmail:
    email = _render("client_email", _context(booking, car, pricing, extras))
    email.subject = "MandryCabrio — Booking request received"
    return email


def build_admin_email(booking: Booking, car: Car, pricing: PriceSummary,
                      extras: Optional[ExtrasSummary] = None) -> RenderedEmail:
    ctx = _context(booking, car, pricing, extras)
    email = _render("admin_email", ctx)
    email.subject = f"New booking request — {car.name} — {ctx['start_date']} to {ctx['end_date']}"
    return email


def send_email(to: str, email: RenderedEmail) -> SendEmailResult:
    logger.info("[email] sending to=%s from=%s subject=%s", to, config.EMAIL_FROM, email.subject)

    if not config.RESEND_API_KEY.strip():
        # développement : on journalise au lieu d'envoyer
        logger.info("[email] fallback (no RESEND_API_KEY) %s -> %s\n%s", email.subject, to, email.text)
        return SendEmailResult(ok=True)

    try:
        r = httpx.post(
            config.RESEND_API_URL,
            headers={"Authorization": f"Bearer {config.RESEND_API_KEY}"},
            json={
                "from": config.EMAIL_FROM,
                "to": [to],
                "subject": email.subject,
                "html": email.html,
                "text": email.text,
            },
            timeout=config.HTTP_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.error("[email] failed to reach Resend: %s", e)
        return SendEmailResult(ok=False, error_message=str(e), error_name=type(e).__name__)

    try:
        data = r.json()
    except ValueError:
        data = {}
    if r.status_code >= 400:
        message = data.get("message") or f"Resend returned HTTP {r.status_code}"
        logger.error("[email] Resend error: %s", message)
        return SendEmailResult(ok=False, error_message=message, error_name=data.get("name"))

    logger.info("[email] sent id=%s", data.get("id"))
    return SendEmailResult(ok=True, id=data.get("id"))


def send_client_email(booking: Booking, car: Car, pricing: PriceSummary,
                      extras: Optional[ExtrasSummary] = None) -> SendEmailResult:
    return send_email(booking.email, build_client_email(booking, car, pricing, extras))


def send_admin_email(booking: Booking, car: Car, pricing: PriceSummary,
                     extras: Optional[ExtrasSummary] = None) -> SendEmailResult:
    return send_email(config.ADMIN_EMAIL, build_admin_email(booking, car, pricing, extras))
