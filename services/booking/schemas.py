# ============================================================
# schemas.py — Corps des requêtes de l'API publique
# ------------------------------------------------------------
# Champs optionnels : une valeur manquante est signalée par le
# workflow de réservation (400 avec un message lisible), pas par
# une 422 du framework. Clés JSON en camelCase (carSlug,
# startAt…), attributs Python en snake_case.
# ============================================================
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class BookingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    car_slug: Optional[str] = Field(None, alias="carSlug")
    start_at: Optional[str] = Field(None, alias="startAt", description="ISO 8601 pickup time")
    end_at: Optional[str] = Field(None, alias="endAt", description="ISO 8601 return time")
    pickup_location: Optional[str] = Field(None, alias="pickupLocation")
    dropoff_location: Optional[str] = Field(None, alias="dropoffLocation")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    flight_number: Optional[str] = Field(None, alias="flightNumber")
    # null ou absent : aucune option
    extras: Optional[List[str]] = Field(default_factory=list)
    accept_terms: Optional[bool] = Field(None, alias="acceptTerms")


class ReviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    # nombre attendu, validé par la route (message 400 dédié)
    rating: Optional[Union[int, float, str]] = None
    comment: Optional[str] = None
    car_slug: Optional[str] = Field(None, alias="carSlug")
    language: Optional[str] = None
    honeypot: Optional[str] = None
