# ============================================================
# booking_service.py — Création d'une réservation
# ------------------------------------------------------------
# Étapes, dans l'ordre (on s'arrête à la première erreur) :
#   1. champs obligatoires + conditions acceptées   -> 400
#   2. dates lisibles, fin > début, pas dans le passé -> 400
#   3. voiture connue                                 -> 404
#   4. voiture libre sur la période                   -> 409
#   5. options normalisées (un seul 2e conducteur)
#   6. prix de base + options
#   7. enregistrement PENDING
#   8. notifications (best-effort, jamais bloquantes)
# Les étapes 4 et 7 se font sous un verrou par voiture.
# ============================================================
import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from sqlalchemy import text
from sqlmodel import Session, select

import whatsapp
from availability import is_car_available
from catalog import EXTRA_IDS, Car, get_car
from dates import iso, parse_instant
from errors import ConflictError, NotFoundError, ValidationError
from extras import ExtrasSummary, calc_extras, normalize_extras
from models import ACTIVE_STATUSES, CANCELLED, CONFIRMED, PENDING, Booking
from notifier import BookingNotice, Notifier, NotificationReport
from pricing import PriceSummary, calc_total_price
from repository import BookingRepository
from schemas import BookingRequest

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "car_slug", "start_at", "end_at", "pickup_location",
    "dropoff_location", "name", "email", "phone",
)

# Transitions autorisées pour les actions admin
TRANSITIONS = {
    CONFIRMED: (PENDING,),
    CANCELLED: (PENDING, CONFIRMED),
}


@dataclass
class BookingOutcome:
    booking: Booking
    car: Car
    pricing: PriceSummary
    extras: ExtrasSummary
    total_estimate_final: Optional[int]
    whatsapp_link: str
    notifications: NotificationReport

    def to_response(self) -> dict:
        b = self.booking
        body = {
            "ok": True,
            "bookingId": b.id,
            "status": b.status,
            "whatsappLink": self.whatsapp_link,
            "summary": {
                "car": self.car.name,
                "dates": {"start": iso(b.start_at), "end": iso(b.end_at), "days": self.pricing.days},
                "pickup": b.pickup_location,
                "dropoff": b.dropoff_location,
                "deposit": self.car.deposit,
                "estimatedTotal": self.pricing.total,
                "extrasTotal": self.extras.extras_total,
                "totalEstimateFinal": self.total_estimate_final,
                "extras": [i.to_dict() for i in self.extras.items],
            },
        }
        cal = self.notifications.get("calendar")
        if cal and cal.ok and cal.value is not None and cal.value.event_id:
            body["calendar"] = {"eventId": cal.value.event_id, "htmlLink": cal.value.html_link}
        return body


# ------------------------------------------------------------
# Verrou de réservation
# ------------------------------------------------------------
# Sérialise "vérifier puis insérer" pour une même voiture :
# verrou en mémoire (un processus) + verrou consultatif
# PostgreSQL tenu jusqu'à la fin de la transaction (plusieurs
# instances).
# ------------------------------------------------------------
_slug_locks: Dict[str, threading.Lock] = {}
_slug_locks_guard = threading.Lock()


def _lock_for(car_slug: str) -> threading.Lock:
    with _slug_locks_guard:
        return _slug_locks.setdefault(car_slug, threading.Lock())


@contextmanager
def reservation_lock(s: Session, car_slug: str):
    with _lock_for(car_slug):
        if s.get_bind().dialect.name == "postgresql":
            s.execute(text("SELECT pg_advisory_xact_lock(hashtext(:slug))"), {"slug": car_slug})
        yield


def _validate_fields(req: BookingRequest):
    for name in REQUIRED_FIELDS:
        value = getattr(req, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError("Missing required fields")
    if req.accept_terms is not True:
        raise ValidationError("You must accept the rental terms")
    unknown = [e for e in req.extras or [] if e not in EXTRA_IDS]
    if unknown:
        raise ValidationError(f"Unknown extras: {', '.join(unknown)}")


def _validate_dates(req: BookingRequest, now: datetime):
    start = parse_instant(req.start_at)
    end = parse_instant(req.end_at)
    if end <= start:
        raise ValidationError("Return date must be after pickup date")
    if start < now:
        raise ValidationError("Pickup date cannot be in the past")
    return start, end


def create_booking(
    s: Session,
    req: BookingRequest,
    notifier: Optional[Notifier] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> BookingOutcome:
    # 1) champs obligatoires
    _validate_fields(req)

    # 2) dates
    current = now() if now else datetime.now(timezone.utc)
    start, end = _validate_dates(req, current)

    # 3) voiture
    car = get_car(req.car_slug)
    if car is None:
        raise NotFoundError("Car not found")

    repo = BookingRepository(s)
    with reservation_lock(s, car.slug):
        # 4) anti-chevauchement
        if not is_car_available(s, car.slug, start, end):
            s.rollback()
            raise ConflictError("Car is not available for the selected dates")

        # 5) + 6) options et prix
        extras = calc_extras(normalize_extras(req.extras or []))
        pricing = calc_total_price(car, start, end)
        total_estimate_final = (pricing.total or 0) + extras.extras_total
        if total_estimate_final == 0:
            total_estimate_final = pricing.total

        # 7) enregistrement
        booking = repo.create(Booking(
            car_slug=car.slug,
            start_at=start,
            end_at=end,
            pickup_location=req.pickup_location,
            dropoff_location=req.dropoff_location,
            name=req.name.strip(),
            email=req.email.strip(),
            phone=req.phone.strip(),
            whatsapp=req.whatsapp or None,
            flight_number=req.flight_number or None,
            extras_json=json.dumps(extras.to_dict()),
            extras_total=extras.extras_total if extras.extras_total > 0 else None,
            status=PENDING,
        ))
    logger.info("[booking] created id=%s car=%s %s -> %s", booking.id, car.slug, iso(start), iso(end))

    # les notifications lisent la réservation depuis d'autres threads
    s.expunge(booking)

    # 8) notifications
    notifier = notifier or Notifier()
    report = notifier.dispatch(BookingNotice(
        booking=booking,
        car=car,
        pricing=pricing,
        extras=extras,
        total_estimate=total_estimate_final,
    ))

    cal = report.get("calendar")
    if cal and cal.ok and cal.value is not None and cal.value.event_id:
        # la réservation est déjà enregistrée : un échec ici ne fait que se journaliser
        try:
            repo.attach_calendar_event(booking.id, cal.value.event_id, cal.value.html_link)
        except Exception as e:
            s.rollback()
            logger.error("[calendar] could not store event id=%s on booking=%s: %s",
                         cal.value.event_id, booking.id, e)

    return BookingOutcome(
        booking=booking,
        car=car,
        pricing=pricing,
        extras=extras,
        total_estimate_final=total_estimate_final,
        whatsapp_link=whatsapp.build_client_link(booking.id, car.name, start, end),
        notifications=report,
    )


def change_status(s: Session, booking_id: str, status: str) -> Booking:
    """Action admin : PENDING -> CONFIRMED, PENDING|CONFIRMED -> CANCELLED."""
    repo = BookingRepository(s)
    b = repo.get(booking_id)
    if not b:
        raise NotFoundError("Booking not found")
    if b.status == status:
        return b
    if b.status not in TRANSITIONS[status]:
        raise ConflictError(f"Cannot move booking from {b.status} to {status}")

    if status == CONFIRMED:
        # une autre réservation active a pu prendre le créneau entre-temps
        with reservation_lock(s, b.car_slug):
            overlapping = s.exec(
                select(Booking.id).where(
                    Booking.car_slug == b.car_slug,
                    Booking.id != b.id,
                    Booking.status.in_(ACTIVE_STATUSES),
                    Booking.start_at < b.end_at,
                    Booking.end_at > b.start_at,
                )
            ).first()
            if overlapping:
                s.rollback()
                raise ConflictError("Another active booking overlaps this one")
            b = repo.update_status(b.id, status)
    else:
        b = repo.update_status(b.id, status)
    logger.info("[booking] status id=%s -> %s", b.id, status)
    return b
