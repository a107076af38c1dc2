"""Shared helpers for the booking service tests."""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from sqlmodel import Session, SQLModel, select

import calendar_events
import db
from mailer import SendEmailResult
from models import Booking
from notifier import Notifier

ADMIN_HEADERS = {"x-admin-password": "test-admin"}


def reset_db():
    import models  # noqa: F401
    SQLModel.metadata.drop_all(db.engine)
    SQLModel.metadata.create_all(db.engine)


def future(days: int, hour: int = 10) -> datetime:
    base = datetime.now(timezone.utc) + timedelta(days=days)
    return base.replace(hour=hour, minute=0, second=0, microsecond=0)


def stub_notifier(**overrides) -> Notifier:
    collaborators = {
        "send_client_email": MagicMock(return_value=SendEmailResult(ok=True, id="c1")),
        "send_admin_email": MagicMock(return_value=SendEmailResult(ok=True, id="a1")),
        "send_whatsapp_admin": MagicMock(return_value=None),
        "create_calendar_event": MagicMock(
            return_value=calendar_events.CalendarEventResult(status=calendar_events.SKIPPED)
        ),
    }
    collaborators.update(overrides)
    return Notifier(timeout=5, **collaborators)


def booking_payload(car_slug="audi-a5-cabrio-2022", start=None, end=None, **extra) -> dict:
    start = start or future(30)
    end = end or start + timedelta(days=3)
    payload = {
        "carSlug": car_slug,
        "startAt": start.isoformat(),
        "endAt": end.isoformat(),
        "pickupLocation": "south-airport-tfs",
        "dropoffLocation": "south-airport-tfs",
        "name": "Ana Pérez",
        "email": "ana@example.com",
        "phone": "+34 600 000 000",
        "acceptTerms": True,
    }
    payload.update(extra)
    return payload


def insert_booking(car_slug: str, start: datetime, end: datetime, status: str = "PENDING") -> Booking:
    with Session(db.engine) as s:
        b = Booking(
            car_slug=car_slug,
            start_at=start,
            end_at=end,
            pickup_location="south-airport-tfs",
            dropoff_location="south-airport-tfs",
            name="Existing Client",
            email="existing@example.com",
            phone="+34 611 111 111",
            status=status,
        )
        s.add(b)
        s.commit()
        s.refresh(b)
        s.expunge(b)
        return b


def count_bookings() -> int:
    with Session(db.engine) as s:
        return len(s.exec(select(Booking)).all())
