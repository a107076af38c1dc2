# ============================================================
# search.py — Recherche de voitures disponibles
# ------------------------------------------------------------
# Filtre la flotte par catégorie puis retire les voitures déjà
# réservées sur la période, en une seule requête.
# ============================================================
from dataclasses import dataclass
from typing import List, Optional

from sqlmodel import Session

from availability import get_unavailable_slugs
from catalog import CATEGORIES, Car, cars_in_category
from dates import parse_instant
from errors import ValidationError


@dataclass
class SearchResult:
    cars: List[Car]
    unavailable_slugs: List[str]


def search_cars(s: Session, date_from: str, date_to: str, category: Optional[str] = "any") -> SearchResult:
    start = parse_instant(date_from)
    end = parse_instant(date_to)
    if end <= start:
        raise ValidationError("Return date must be after pickup date")

    if category and category != "any" and category not in CATEGORIES:
        raise ValidationError(f"Unknown category: {category}")

    candidates = cars_in_category(category)
    if not candidates:
        return SearchResult(cars=[], unavailable_slugs=[])

    unavailable = get_unavailable_slugs(s, [c.slug for c in candidates], start, end)
    return SearchResult(
        cars=[c for c in candidates if c.slug not in unavailable],
        # ordre du catalogue, pour une réponse stable
        unavailable_slugs=[c.slug for c in candidates if c.slug in unavailable],
    )
