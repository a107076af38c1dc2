# ============================================================
# availability.py — Disponibilité des voitures
# ------------------------------------------------------------
# Deux intervalles semi-ouverts [s1, e1) et [s2, e2) se
# chevauchent si s1 < e2 et s2 < e1. Seules les réservations
# actives (PENDING, CONFIRMED) bloquent un créneau.
# ============================================================
from datetime import datetime
from typing import Iterable, Set

from sqlmodel import Session, select

from models import ACTIVE_STATUSES, Booking


def has_overlap(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    return s1 < e2 and s2 < e1


def _overlapping(start: datetime, end: datetime):
    return select(Booking).where(
        Booking.status.in_(ACTIVE_STATUSES),
        Booking.start_at < end,
        Booking.end_at > start,
    )


def is_car_available(s: Session, car_slug: str, start: datetime, end: datetime) -> bool:
    found = s.exec(_overlapping(start, end).where(Booking.car_slug == car_slug)).first()
    return found is None


def get_unavailable_slugs(s: Session, car_slugs: Iterable[str], start: datetime, end: datetime) -> Set[str]:
    """Vérification groupée : une seule requête pour toutes les voitures."""
    slugs = list(car_slugs)
    if not slugs:
        return set()
    q = (
        select(Booking.car_slug)
        .where(
            Booking.car_slug.in_(slugs),
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.start_at < end,
            Booking.end_at > start,
        )
        .distinct()
    )
    return set(s.exec(q).all())
