# ============================================================
# extras.py — Calcul des options (siège enfant, 2e conducteur…)
# ============================================================
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from catalog import BY_AGREEMENT, EXCLUSIVE_EXTRAS, FIXED, FREE, get_extra
from pricing import format_eur


@dataclass(frozen=True)
class ExtraItem:
    id: str
    label: str
    price: Optional[int]

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "price": self.price}


@dataclass(frozen=True)
class ExtrasSummary:
    items: List[ExtraItem] = field(default_factory=list)
    extras_total: int = 0
    has_by_agreement: bool = False

    def to_dict(self) -> dict:
        return {
            "items": [i.to_dict() for i in self.items],
            "extrasTotal": self.extras_total,
            "hasByAgreement": self.has_by_agreement,
        }


def calc_extras(extra_ids: Iterable[str]) -> ExtrasSummary:
    """Détaille et additionne les options choisies.

    Les identifiants inconnus sont ignorés. Une option "by_agreement"
    n'a pas de prix (None) et n'entre pas dans le total.
    """
    items = []
    total = 0
    has_by_agreement = False

    for extra_id in extra_ids:
        extra = get_extra(extra_id)
        if extra is None:
            continue

        price = None
        if extra.pricing_rule == FREE:
            price = 0
        elif extra.pricing_rule == FIXED:
            price = extra.price
        elif extra.pricing_rule == BY_AGREEMENT:
            has_by_agreement = True

        items.append(ExtraItem(id=extra.id, label=extra.label, price=price))
        if price is not None:
            total += price

    return ExtrasSummary(items=items, extras_total=total, has_by_agreement=has_by_agreement)


def normalize_extras(extra_ids: Iterable[str]) -> List[str]:
    """Sélection valide : sans doublon, une seule variante 2e conducteur.

    Si les deux zones sont cochées, la dernière sélectionnée gagne.
    """
    ids = list(extra_ids)
    selected = []
    for extra_id in ids:
        if extra_id not in selected:
            selected.append(extra_id)

    chosen = [e for e in selected if e in EXCLUSIVE_EXTRAS]
    if len(chosen) > 1:
        last_index = {e: max(i for i, x in enumerate(ids) if x == e) for e in chosen}
        keep = max(chosen, key=lambda e: last_index[e])
        selected = [e for e in selected if e not in EXCLUSIVE_EXTRAS or e == keep]
    return selected


def format_extra_item(item: ExtraItem) -> str:
    if item.price is None:
        return f"{item.label} (by agreement)"
    if item.price == 0:
        return f"{item.label} (free)"
    return f"{item.label} ({format_eur(item.price)})"


def format_extras_summary(summary: ExtrasSummary) -> str:
    if not summary.items:
        return "None"
    return ", ".join(format_extra_item(i) for i in summary.items)
