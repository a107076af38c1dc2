# ============================================================
# models.py — Modèles de données SQLModel (Booking Service)
# ------------------------------------------------------------
# Définit les tables de la base :
#   1️. Booking : une demande de location
#   2️. Review : un avis client, invisible tant que non approuvé
# ============================================================
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

PENDING = "PENDING"
CONFIRMED = "CONFIRMED"
CANCELLED = "CANCELLED"

# Seules ces réservations bloquent un créneau
ACTIVE_STATUSES = (PENDING, CONFIRMED)


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ------------------------------------------------------------
# Booking
# ------------------------------------------------------------
# Cycle de vie : PENDING → CONFIRMED | CANCELLED (actions admin).
# Pour une même voiture, deux réservations actives ne doivent
# jamais se chevaucher sur [start_at, end_at).
# ------------------------------------------------------------
class Booking(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    car_slug: str = Field(index=True)
    start_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    end_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    pickup_location: str
    dropoff_location: str
    name: str
    email: str
    phone: str
    whatsapp: Optional[str] = None
    flight_number: Optional[str] = None
    extras_json: Optional[str] = Field(default=None, sa_column=Column(Text))
    extras_total: Optional[int] = None
    status: str = Field(default=PENDING, index=True)
    calendar_event_id: Optional[str] = None
    calendar_event_link: Optional[str] = None
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Review(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str
    rating: int
    comment: str = Field(sa_column=Column(Text, nullable=False))
    car_slug: Optional[str] = Field(default=None, index=True)
    language: str = "en"
    is_approved: bool = False
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
