# ============================================================
# reviews.py — Avis clients
# ------------------------------------------------------------
# Public : dépôt d'un avis (anti-spam honeypot + limite par IP)
# et lecture des avis approuvés. Admin : liste, approbation,
# suppression.
# ============================================================
import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

import config
from auth import require_admin
from dates import iso
from db import get_session
from errors import NotFoundError, ValidationError
from models import Review
from ratelimit import CooldownLimiter
from repository import ReviewRepository
from schemas import ReviewRequest

logger = logging.getLogger(__name__)

router = APIRouter()

LANGUAGES = ("en", "es", "de", "ru", "uk")
MAX_COMMENT_LENGTH = 1000

limiter = CooldownLimiter(config.REVIEW_COOLDOWN_SECONDS, config.RATE_LIMIT_MAX_ENTRIES)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def valid_language(lang: Optional[str]) -> str:
    return lang if lang in LANGUAGES else "en"


def review_to_dict(r: Review) -> dict:
    return {
        "id": r.id,
        "name": r.name,
        "rating": r.rating,
        "comment": r.comment,
        "carSlug": r.car_slug,
        "language": r.language,
        "isApproved": r.is_approved,
        "createdAt": iso(r.created_at),
    }


def _check(req: ReviewRequest):
    if not req.name or not req.name.strip():
        raise ValidationError("Name is required")
    rating = req.rating
    if isinstance(rating, bool) or not isinstance(rating, (int, float)) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")
    if not req.comment or not req.comment.strip():
        raise ValidationError("Comment is required")
    if len(req.comment.strip()) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment must be {MAX_COMMENT_LENGTH} characters or less")


# ------------------------------------------------------------
# POST /api/reviews — Déposer un avis (en attente de modération)
# ------------------------------------------------------------
@router.post("/api/reviews")
def submit_review(req: ReviewRequest, request: Request, s: Session = Depends(get_session)):
    # honeypot rempli : un robot, on répond "ok" sans rien stocker
    if req.honeypot:
        logger.info("[reviews] honeypot triggered ip=%s", client_ip(request))
        return {"ok": True, "message": "Thank you for your review!"}

    ip = client_ip(request)
    if not limiter.allow(ip):
        wait_seconds = limiter.retry_after(ip) or config.REVIEW_COOLDOWN_SECONDS
        raise HTTPException(
            429,
            "Please wait before submitting another review.",
            headers={"Retry-After": str(math.ceil(wait_seconds))},
        )

    _check(req)
    review = ReviewRepository(s).create(Review(
        name=req.name.strip(),
        rating=int(round(req.rating)),
        comment=req.comment.strip(),
        car_slug=req.car_slug or None,
        language=valid_language(req.language),
        is_approved=False,
    ))
    logger.info("[reviews] submitted id=%s car=%s", review.id, review.car_slug)
    return {
        "ok": True,
        "message": "Thank you! Your review will appear after approval.",
        "reviewId": review.id,
    }


# ------------------------------------------------------------
# GET /api/reviews — Avis approuvés + note moyenne
# ------------------------------------------------------------
@router.get("/api/reviews")
def list_reviews(lang: str = "en", carSlug: Optional[str] = None, s: Session = Depends(get_session)):
    rows = ReviewRepository(s).list_approved(valid_language(lang), carSlug, limit=50)
    average = sum(r.rating for r in rows) / len(rows) if rows else 0
    return {
        "ok": True,
        "reviews": [review_to_dict(r) for r in rows],
        "aggregateRating": {"average": round(average, 1), "count": len(rows)},
    }


# ------------------------------------------------------------
# Admin
# ------------------------------------------------------------
@router.get("/api/admin/reviews", dependencies=[Depends(require_admin)])
def admin_list_reviews(s: Session = Depends(get_session)):
    return {"ok": True, "reviews": [review_to_dict(r) for r in ReviewRepository(s).list_all()]}


@router.post("/api/admin/reviews/{review_id}", dependencies=[Depends(require_admin)])
def approve_review(review_id: str, s: Session = Depends(get_session)):
    r = ReviewRepository(s).approve(review_id)
    if not r:
        raise NotFoundError("Review not found")
    logger.info("[reviews] approved id=%s", review_id)
    return {"ok": True, "review": review_to_dict(r)}


@router.delete("/api/admin/reviews/{review_id}", dependencies=[Depends(require_admin)])
def delete_review(review_id: str, s: Session = Depends(get_session)):
    if not ReviewRepository(s).delete(review_id):
        raise NotFoundError("Review not found")
    logger.info("[reviews] deleted id=%s", review_id)
    return {"ok": True, "message": "Review deleted"}
