# ============================================================
# whatsapp.py — Messages WhatsApp
# ------------------------------------------------------------
#  - message récapitulatif envoyé à l'agence
#  - lien wa.me pré-rempli renvoyé au client
# L'envoi à l'agence passe par l'API du fournisseur configuré
# (WHATSAPP_PROVIDER + WHATSAPP_API_KEY), sinon il est journalisé.
# ============================================================
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from urllib.parse import quote

import httpx

import config
from catalog import location_label
from dates import to_local
from extras import ExtrasSummary, format_extra_item
from pricing import format_eur

logger = logging.getLogger(__name__)


@dataclass
class AdminBookingMessage:
    booking_id: str
    car_name: str
    start: datetime
    end: datetime
    days: int
    pickup: str
    dropoff: str
    deposit: int
    total: Optional[int]
    daily_rate: Optional[int]
    client_name: str
    client_phone: str
    client_email: str
    client_whatsapp: Optional[str] = None
    flight_number: Optional[str] = None
    extras: ExtrasSummary = field(default_factory=ExtrasSummary)


def _short(dt: datetime) -> str:
    local = to_local(dt)
    return f"{local:%b} {local.day} {local:%H:%M}"


def build_admin_message(p: AdminBookingMessage) -> str:
    total_text = format_eur(p.total) if p.total is not None else "On request"
    rate_text = f" ({format_eur(p.daily_rate)}/day)" if p.daily_rate is not None else ""

    lines = [
        "🚗 New booking (PENDING)",
        "",
        f"Booking ID: {p.booking_id}",
        f"Car: {p.car_name}",
        "",
        f"Dates: {_short(p.start)} → {_short(p.end)} ({p.days} {'day' if p.days == 1 else 'days'})",
        f"Pickup: {location_label(p.pickup)}",
        f"Dropoff: {location_label(p.dropoff)}",
        "",
        "Client:",
        p.client_name,
        f"Phone: {p.client_phone}",
        f"Email: {p.client_email}",
    ]
    if p.client_whatsapp:
        lines.append(f"WhatsApp: {p.client_whatsapp}")
    if p.flight_number:
        lines += ["", f"Flight: {p.flight_number}"]
    lines += [
        "",
        f"Deposit: {format_eur(p.deposit)}",
        f"Estimated total: {total_text}{rate_text}",
    ]

    if p.extras.items:
        lines += ["", "Extras:"]
        lines += [f"• {format_extra_item(i)}" for i in p.extras.items]
        if p.extras.extras_total > 0:
            lines.append(f"Extras total: {format_eur(p.extras.extras_total)}")
        if p.extras.has_by_agreement:
            lines.append("(Some services require price confirmation)")

    return "\n".join(lines)


def build_client_link(booking_id: str, car_name: str, start: datetime, end: datetime) -> str:
    """Lien wa.me que le client ouvre pour poursuivre sur WhatsApp."""
    s, e = to_local(start), to_local(end)
    message = (
        "Hello MandryCabrio,\n\n"
        "I have sent a booking request.\n"
        f"Booking ID: {booking_id}\n"
        f"Car: {car_name}\n"
        f"Dates: {s:%b} {s.day} → {e:%b} {e.day}\n\n"
        "Thank you!"
    )
    return f"https://wa.me/{config.WHATSAPP_PHONE}?text={quote(message, safe='')}"


def send_whatsapp_admin(message: str) -> None:
    """Envoie le message à l'agence. Ne lève jamais."""
    if not (config.WHATSAPP_PROVIDER and config.WHATSAPP_API_KEY.strip()):
        logger.info("[whatsapp] %s", message)
        return

    try:
        r = httpx.post(
            config.WHATSAPP_API_URL,
            headers={"Authorization": f"Bearer {config.WHATSAPP_API_KEY}"},
            json={"to": f"+{config.WHATSAPP_PHONE}", "type": "text", "text": {"body": message}},
            timeout=config.HTTP_TIMEOUT_SECONDS,
        )
        r.raise_for_status()
        logger.info("[whatsapp] sent via %s (%d chars)", config.WHATSAPP_PROVIDER, len(message))
    except httpx.HTTPError as e:
        logger.error("[whatsapp] failed to send via %s: %s", config.WHATSAPP_PROVIDER, e)
        logger.info("[whatsapp] fallback: %s", message)
