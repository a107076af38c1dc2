# ============================================================
# pricing.py — Calcul du prix d'une location
# ------------------------------------------------------------
# Fonctions pures : (voiture, période) -> tarif journalier par
# palier, total, éligibilité au tarif mensuel.
# Montants en EUR entiers, aucun arrondi flottant.
# ============================================================
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from catalog import Car
from dates import parse_instant

DAY_SECONDS = 24 * 60 * 60
MONTH_MIN_DAYS = 28

# Paliers standards : (jours min, jours max ou None, palier)
STANDARD_TIERS: List[Tuple[int, Optional[int], str]] = [
    (1, 3, "d1_3"),
    (4, 7, "d4_7"),
    (8, None, "d8_plus"),
]

# Exceptions par voiture, prioritaires sur les paliers standards.
# Une exception ne s'applique que si le palier existe sur la voiture.
TIER_OVERRIDES: Dict[str, List[Tuple[int, Optional[int], str]]] = {
    "mercedes-benz-e450-mhev-cabrio-2022": [(8, 14, "d8_14")],
}

Instant = Union[str, datetime]


@dataclass(frozen=True)
class PriceSummary:
    days: int
    daily_rate: Optional[int]
    total: Optional[int]
    month_price: Optional[int]
    on_request_month: bool

    def to_dict(self) -> dict:
        return {
            "days": self.days,
            "dailyRate": self.daily_rate,
            "total": self.total,
            "monthPrice": self.month_price,
            "onRequestMonth": self.on_request_month,
        }


def calc_days(start: Instant, end: Instant) -> int:
    """Nombre de jours facturés : arrondi supérieur, minimum 1."""
    s = parse_instant(start)
    e = parse_instant(end)
    seconds = (e - s).total_seconds()
    return max(1, math.ceil(seconds / DAY_SECONDS))


def _in_bracket(days: int, low: int, high: Optional[int]) -> bool:
    return days >= low and (high is None or days <= high)


def get_daily_rate(car: Car, days: int) -> Optional[int]:
    """Tarif journalier pour une durée donnée, None = prix sur demande."""
    for low, high, tier in TIER_OVERRIDES.get(car.slug, []):
        rate = getattr(car.pricing, tier)
        if rate is not None and _in_bracket(days, low, high):
            return rate

    for low, high, tier in STANDARD_TIERS:
        if _in_bracket(days, low, high):
            return getattr(car.pricing, tier)
    return None


def calc_total_price(car: Car, start: Instant, end: Instant) -> PriceSummary:
    days = calc_days(start, end)
    daily_rate = get_daily_rate(car, days)
    total = daily_rate * days if daily_rate is not None else None

    month_price = None
    if car.pricing.month is not None and days >= MONTH_MIN_DAYS:
        month_price = car.pricing.month

    return PriceSummary(
        days=days,
        daily_rate=daily_rate,
        total=total,
        month_price=month_price,
        on_request_month=car.pricing.on_request_month,
    )


def get_from_daily_price(car: Car) -> Optional[int]:
    """Plus petit tarif journalier défini ("à partir de X €/jour")."""
    p = car.pricing
    prices = [v for v in (p.d1_3, p.d4_7, p.d8_plus, p.d8_14) if v is not None]
    return min(prices) if prices else None


def format_eur(value: int) -> str:
    return f"€{value:,}"
