# ============================================================
# repository.py — Accès aux données Booking et Review
# ------------------------------------------------------------
# Ce module implémente le design pattern "Repository". Il isole
# la logique d'accès aux tables des routes FastAPI et du
# workflow de réservation.
# ============================================================
from typing import List, Optional

from sqlmodel import Session, select

from models import Booking, Review


class BookingRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, b: Booking):
        self.session.add(b)
        self.session.commit()
        self.session.refresh(b)
        return b

    def get(self, booking_id: str) -> Optional[Booking]:
        return self.session.exec(select(Booking).where(Booking.id == booking_id)).first()

    def list_recent(self, limit: int = 50) -> List[Booking]:
        return list(self.session.exec(select(Booking).order_by(Booking.created_at.desc()).limit(limit)).all())

    def update_status(self, booking_id: str, status: str):
        b = self.get(booking_id)
        if b:
            b.status = status
            self.session.commit()
            self.session.refresh(b)
        return b

    def attach_calendar_event(self, booking_id: str, event_id: Optional[str], html_link: Optional[str]):
        b = self.get(booking_id)
        if b:
            b.calendar_event_id = event_id
            b.calendar_event_link = html_link
            self.session.commit()
            self.session.refresh(b)
        return b


class ReviewRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, r: Review):
        self.session.add(r)
        self.session.commit()
        self.session.refresh(r)
        return r

    def get(self, review_id: str) -> Optional[Review]:
        return self.session.exec(select(Review).where(Review.id == review_id)).first()

    def list_all(self) -> List[Review]:
        return list(self.session.exec(select(Review).order_by(Review.created_at.desc())).all())

    def list_approved(self, language: str, car_slug: Optional[str], limit: int = 50) -> List[Review]:
        q = select(Review).where(Review.is_approved == True, Review.language == language)  # noqa: E712
        # sans voiture : avis généraux (page d'accueil) uniquement
        if car_slug:
            q = q.where(Review.car_slug == car_slug)
        else:
            q = q.where(Review.car_slug == None)  # noqa: E711
        return list(self.session.exec(q.order_by(Review.created_at.desc()).limit(limit)).all())

    def approve(self, review_id: str):
        r = self.get(review_id)
        if r:
            r.is_approved = True
            self.session.commit()
            self.session.refresh(r)
        return r

    def delete(self, review_id: str) -> bool:
        r = self.get(review_id)
        if not r:
            return False
        self.session.delete(r)
        self.session.commit()
        return True
