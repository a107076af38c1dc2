# ============================================================
# dates.py — Normalisation des dates
# ------------------------------------------------------------
# Tout est stocké et comparé en UTC. Une date sans timezone est
# interprétée dans l'heure locale de l'agence (LOCAL_TZ).
# ============================================================
from datetime import datetime, timezone
from typing import Union

import config
from errors import ValidationError


def to_utc(dt: datetime) -> datetime:
    # si pas de tz, on suppose la timezone locale
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=config.LOCAL_TZ)
    return dt.astimezone(timezone.utc)


def parse_instant(value: Union[str, datetime, None], label: str = "date") -> datetime:
    """Parse une date ISO 8601 (ou un datetime) en datetime UTC.

    Lève ValidationError("Invalid date format") si la valeur est
    absente ou illisible.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Invalid date format")
    raw = value.strip()
    # fromisoformat ne gère le suffixe "Z" qu'à partir de Python 3.11
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(raw))
    except ValueError:
        raise ValidationError("Invalid date format")


def from_db(dt: datetime) -> datetime:
    # une valeur relue (SQLite) peut être naïve : elle est en UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime) -> datetime:
    return from_db(dt).astimezone(config.LOCAL_TZ)


def iso(dt: datetime) -> str:
    return from_db(dt).isoformat()
