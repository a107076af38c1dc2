# ============================================================
# Booking API Router
# ------------------------------------------------------------
# Expose les endpoints REST : catalogue, recherche, devis,
# création d'une réservation et actions admin (liste,
# confirmation, annulation).
# ============================================================
import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

import booking_service
from auth import require_admin
from catalog import CATEGORIES, EXTRAS, car_to_dict, cars_in_category, extra_to_dict, get_car, get_extra
from dates import iso, parse_instant
from db import get_session
from errors import NotFoundError, ValidationError
from extras import calc_extras, normalize_extras
from models import CANCELLED, CONFIRMED, Booking
from notifier import Notifier
from pricing import calc_total_price, get_from_daily_price
from repository import BookingRepository
from schemas import BookingRequest
from search import search_cars

router = APIRouter()


# Dépendance FastAPI : remplaçable dans les tests
def get_notifier() -> Notifier:
    return Notifier()


def booking_to_dict(b: Booking) -> dict:
    return {
        "id": b.id,
        "carSlug": b.car_slug,
        "startAt": iso(b.start_at),
        "endAt": iso(b.end_at),
        "pickupLocation": b.pickup_location,
        "dropoffLocation": b.dropoff_location,
        "name": b.name,
        "email": b.email,
        "phone": b.phone,
        "whatsapp": b.whatsapp,
        "flightNumber": b.flight_number,
        "extras": json.loads(b.extras_json) if b.extras_json else None,
        "extrasTotal": b.extras_total,
        "status": b.status,
        "calendarEventId": b.calendar_event_id,
        "calendarEventLink": b.calendar_event_link,
        "createdAt": iso(b.created_at),
    }


def car_listing(car) -> dict:
    d = car_to_dict(car)
    d["fromDailyPrice"] = get_from_daily_price(car)
    return d


# ------------------------------------------------------------
# Catalogue
# ------------------------------------------------------------
@router.get("/api/cars")
def list_cars(cat: Optional[str] = None):
    if cat and cat != "any" and cat not in CATEGORIES:
        raise ValidationError(f"Unknown category: {cat}")
    cars = cars_in_category(cat)
    # prix "à partir de" croissant, voitures sans prix en dernier
    cars.sort(key=lambda c: (get_from_daily_price(c) is None, get_from_daily_price(c) or 0))
    return {"ok": True, "cars": [car_listing(c) for c in cars]}


@router.get("/api/cars/{slug}")
def get_car_detail(slug: str):
    car = get_car(slug)
    if not car:
        raise NotFoundError("Car not found")
    return {"ok": True, "car": car_listing(car)}


# Devis sans réservation ni vérification de disponibilité
@router.get("/api/cars/{slug}/quote")
def quote(
    slug: str,
    date_from: str = Query(..., alias="from"),
    date_to: str = Query(..., alias="to"),
    extras: List[str] = Query([]),
):
    car = get_car(slug)
    if not car:
        raise NotFoundError("Car not found")
    start, end = parse_instant(date_from), parse_instant(date_to)
    if end <= start:
        raise ValidationError("Return date must be after pickup date")
    pricing = calc_total_price(car, start, end)
    unknown = [e for e in extras if get_extra(e) is None]
    if unknown:
        raise ValidationError(f"Unknown extras: {', '.join(unknown)}")
    summary = calc_extras(normalize_extras(extras))
    total = (pricing.total or 0) + summary.extras_total
    return {
        "ok": True,
        "car": car.slug,
        "pricing": pricing.to_dict(),
        "deposit": car.deposit,
        "extras": summary.to_dict(),
        "totalEstimateFinal": total if total else pricing.total,
    }


@router.get("/api/extras")
def list_extras():
    return {"ok": True, "extras": [extra_to_dict(e) for e in EXTRAS]}


# ------------------------------------------------------------
# GET /api/search — voitures libres sur une période
# ------------------------------------------------------------
@router.get("/api/search")
def search(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    cat: str = "any",
    s: Session = Depends(get_session),
):
    if not date_from or not date_to:
        raise ValidationError("Missing from or to parameters")
    result = search_cars(s, date_from, date_to, cat)
    return {
        "ok": True,
        "from": date_from,
        "to": date_to,
        "cat": cat,
        "cars": [car_listing(c) for c in result.cars],
        "unavailableSlugs": result.unavailable_slugs,
    }


# ------------------------------------------------------------
# POST /api/booking — Créer une demande de réservation
# ------------------------------------------------------------
@router.post("/api/booking")
def create_booking(
    req: BookingRequest,
    s: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    outcome = booking_service.create_booking(s, req, notifier=notifier)
    return outcome.to_response()


# ------------------------------------------------------------
# Admin
# ------------------------------------------------------------
@router.get("/api/bookings", dependencies=[Depends(require_admin)])
def list_bookings(s: Session = Depends(get_session)):
    rows = BookingRepository(s).list_recent(50)
    return {"ok": True, "bookings": [booking_to_dict(b) for b in rows]}


@router.post("/api/admin/bookings/{booking_id}/confirm", dependencies=[Depends(require_admin)])
def confirm_booking(booking_id: str, s: Session = Depends(get_session)):
    b = booking_service.change_status(s, booking_id, CONFIRMED)
    return {"ok": True, "booking": booking_to_dict(b)}


@router.post("/api/admin/bookings/{booking_id}/cancel", dependencies=[Depends(require_admin)])
def cancel_booking(booking_id: str, s: Session = Depends(get_session)):
    b = booking_service.change_status(s, booking_id, CANCELLED)
    return {"ok": True, "booking": booking_to_dict(b)}
