# ============================================================
# catalog.py — Flotte, options et lieux de prise en charge
# ------------------------------------------------------------
# Données de référence statiques, chargées en mémoire et jamais
# modifiées à l'exécution. Les montants sont en EUR entiers.
# ============================================================
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

CATEGORIES = ("cabrio", "suv", "economy", "ev", "motorcycle", "luxury")

# Règles de prix des options
FREE = "free"
FIXED = "fixed"
BY_AGREEMENT = "by_agreement"


@dataclass(frozen=True)
class CarPricing:
    d1_3: Optional[int] = None
    d4_7: Optional[int] = None
    d8_plus: Optional[int] = None
    d8_14: Optional[int] = None
    month: Optional[int] = None
    on_request_month: bool = False


@dataclass(frozen=True)
class Car:
    id: str
    slug: str
    name: str
    category: str
    specs: Tuple[str, ...]
    pricing: CarPricing
    deposit: int
    color: Optional[str] = None
    image: str = "/cars/placeholder.jpg"


@dataclass(frozen=True)
class Extra:
    id: str
    label: str
    description: str
    pricing_rule: str
    price: Optional[int] = None


CARS: List[Car] = [
    Car(
        id="1",
        slug="jeep-wrangler-sahara-4xe-2022-sky-top",
        name="Jeep Wrangler Sahara 4XE 2022 (SKY TOP)",
        category="suv",
        specs=("Plug-in Hybrid", "2.0 petrol + electric", "380 hp", "Automatic", "4x4"),
        color="Red",
        pricing=CarPricing(d1_3=160, d4_7=140, d8_plus=120, month=2500),
        deposit=1000,
    ),
    Car(
        id="2",
        slug="audi-a5-cabrio-2022",
        name="Audi A5 Cabrio 2022",
        category="cabrio",
        specs=("2.0 diesel", "Automatic", "Cabrio"),
        color="White",
        pricing=CarPricing(d1_3=145, d4_7=120, d8_plus=95, month=1900),
        deposit=600,
    ),
    Car(
        id="3",
        slug="audi-q7-quattro-2020",
        name="Audi Q7 Quattro 2020",
        category="suv",
        specs=("3.0 petrol", "Automatic", "Quattro/4WD"),
        color="Grey",
        pricing=CarPricing(d1_3=120, d4_7=100, d8_plus=80, month=1600),
        deposit=1000,
    ),
    Car(
        id="4",
        slug="volkswagen-t-roc-cabrio-2022",
        name="Volkswagen T-Roc Cabrio 2022",
        category="cabrio",
        specs=("1.5 petrol", "Automatic", "Cabrio"),
        color="Red",
        pricing=CarPricing(d1_3=85, d4_7=80, d8_plus=75, month=1450),
        deposit=600,
    ),
    Car(
        id="5",
        slug="toyota-yaris-cross-2024",
        name="Toyota Yaris Cross 2024",
        category="economy",
        specs=("1.5 hybrid", "Automatic"),
        color="White",
        pricing=CarPricing(d1_3=60, d4_7=50, d8_plus=40, month=1100),
        deposit=300,
    ),
    # pas de tarif 8+ : au-delà de 14 jours le prix est sur demande
    Car(
        id="6",
        slug="mercedes-benz-e450-mhev-cabrio-2022",
        name="Mercedes-Benz E450 MHEV Cabrio 2022",
        category="cabrio",
        specs=("3.0 mild-hybrid petrol", "367 hp", "Automatic", "Cabrio"),
        pricing=CarPricing(d1_3=190, d4_7=150, d8_14=120, month=2800),
        deposit=1000,
    ),
    Car(
        id="7",
        slug="toyota-yaris-2021",
        name="Toyota Yaris 2021",
        category="economy",
        specs=("1.5 hybrid", "Automatic"),
        color="Grey",
        pricing=CarPricing(d1_3=40, d4_7=37, d8_plus=35, month=800),
        deposit=300,
    ),
    Car(
        id="8",
        slug="kia-ev6-2024",
        name="Kia EV6 2024",
        category="ev",
        specs=("Electric", "Automatic"),
        color="Pearl White",
        pricing=CarPricing(d1_3=100, d4_7=85, d8_plus=75, month=1200),
        deposit=600,
    ),
    Car(
        id="9",
        slug="lexus-rx450h-2023-white-pano",
        name="Lexus RX450h 2023 (white, pano)",
        category="suv",
        specs=("Hybrid", "Automatic", "Panoramic roof"),
        color="White",
        pricing=CarPricing(d1_3=120, d4_7=100, d8_plus=90, month=1500),
        deposit=600,
    ),
    Car(
        id="10",
        slug="lexus-rx450h-2023-dark-blue",
        name="Lexus RX450h 2023 (dark blue)",
        category="suv",
        specs=("Hybrid", "Automatic"),
        color="Dark Blue",
        pricing=CarPricing(d1_3=120, d4_7=100, d8_plus=90, month=1500),
        deposit=600,
    ),
    Car(
        id="11",
        slug="chevrolet-camaro-cabrio-2019",
        name="Chevrolet Camaro Cabrio 2019",
        category="cabrio",
        specs=("3.7 petrol", "Automatic", "Cabrio"),
        color="Blue",
        pricing=CarPricing(d1_3=170, d4_7=150, d8_plus=130, on_request_month=True),
        deposit=600,
    ),
    Car(
        id="12",
        slug="ford-mustang-cabrio-2018",
        name="Ford Mustang Cabrio 2018",
        category="cabrio",
        specs=("2.3 EcoBoost", "Automatic", "Cabrio"),
        color="Black",
        pricing=CarPricing(d1_3=150, d4_7=130, d8_plus=110, on_request_month=True),
        deposit=600,
    ),
    Car(
        id="13",
        slug="bmw-320d-cabrio-e93-2010",
        name="BMW 320d Cabrio e93 (2010)",
        category="cabrio",
        specs=("Diesel", "Automatic", "Cabrio"),
        pricing=CarPricing(d1_3=70, d4_7=60, d8_plus=50),
        deposit=200,
    ),
    Car(
        id="14",
        slug="mercedes-slk-200-2006",
        name="Mercedes SLK 200 (2006)",
        category="cabrio",
        specs=("2.0 petrol", "163 hp", "Automatic"),
        pricing=CarPricing(d1_3=50, d4_7=40, d8_plus=30),
        deposit=300,
    ),
    Car(
        id="15",
        slug="indian-chieftain-1-8-motorcycle-2019",
        name="Indian Chieftain 1.8 (Motorcycle) 2019",
        category="motorcycle",
        specs=("1811 cc", "76 hp", "6-speed manual", "Cruiser"),
        pricing=CarPricing(d1_3=250, d4_7=170, d8_plus=150, on_request_month=True),
        deposit=1000,
    ),
    Car(
        id="16",
        slug="volkswagen-t-roc-cabrio-2020-manual",
        name="Volkswagen T-Roc Cabrio 2020 (manual)",
        category="cabrio",
        specs=("1.0 petrol", "Manual", "Cabrio"),
        color="White",
        pricing=CarPricing(d1_3=60, d4_7=55, d8_plus=50, on_request_month=True),
        deposit=300,
    ),
    Car(
        id="17",
        slug="hyundai-i20",
        name="Hyundai i20",
        category="economy",
        specs=("Petrol", "Automatic", "5 seats"),
        color="Blue",
        pricing=CarPricing(d1_3=40, d4_7=35, d8_plus=30, on_request_month=True),
        deposit=300,
    ),
    Car(
        id="18",
        slug="mercedes-benz-e200-w211-kompressor-2005",
        name="Mercedes-Benz E200 W211 Kompressor (2005)",
        category="economy",
        specs=("1.8 petrol", "170 hp", "Automatic 5G-Tronic", "Panoramic roof"),
        color="Grey",
        pricing=CarPricing(d1_3=50, d4_7=40, d8_plus=30),
        deposit=300,
    ),
    Car(
        id="19",
        slug="mini-cooper-s-countryman-2015",
        name="Mini Cooper S Countryman 2015",
        category="suv",
        specs=("1.6 Turbo", "184 hp", "4x4"),
        pricing=CarPricing(d1_3=65, d4_7=55, d8_plus=45),
        deposit=300,
    ),
]

EXTRAS: List[Extra] = [
    Extra(
        id="child_seat",
        label="Child seat / bassinet / booster",
        description="Free child seat, bassinet, or booster seat for your rental",
        pricing_rule=FREE,
        price=0,
    ),
    Extra(
        id="second_driver_south",
        label="Second driver — South (€30)",
        description="Additional driver authorization for South zone (South Airport TFS, Los Cristianos)",
        pricing_rule=FIXED,
        price=30,
    ),
    Extra(
        id="second_driver_north",
        label="Second driver — North (€80)",
        description="Additional driver authorization for North zone (North Airport TFN, Puerto de la Cruz, Santa Cruz)",
        pricing_rule=FIXED,
        price=80,
    ),
    Extra(
        id="island_delivery",
        label="Delivery / pickup across the island",
        description="Delivery and pickup service across Tenerife (by agreement)",
        pricing_rule=BY_AGREEMENT,
    ),
]

EXTRA_IDS = tuple(e.id for e in EXTRAS)

# Variantes d'une même option : une seule peut être retenue
EXCLUSIVE_EXTRAS = ("second_driver_south", "second_driver_north")

LOCATION_LABELS: Dict[str, str] = {
    "north-airport-tfn": "North Airport (TFN)",
    "south-airport-tfs": "South Airport (TFS)",
    "puerto-de-la-cruz": "Puerto de la Cruz",
    "santa-cruz": "Santa Cruz",
    "los-cristianos": "Los Cristianos",
    "other": "Other (by agreement)",
}

_CARS_BY_SLUG = {c.slug: c for c in CARS}
_EXTRAS_BY_ID = {e.id: e for e in EXTRAS}


def get_car(slug: str) -> Optional[Car]:
    return _CARS_BY_SLUG.get(slug)


def get_extra(extra_id: str) -> Optional[Extra]:
    return _EXTRAS_BY_ID.get(extra_id)


def location_label(code: str) -> str:
    return LOCATION_LABELS.get(code, code)


def cars_in_category(category: Optional[str] = None) -> List[Car]:
    """Filtre la flotte ; None, "" ou "any" renvoient tout."""
    if not category or category == "any":
        return list(CARS)
    return [c for c in CARS if c.category == category]


def car_to_dict(car: Car) -> dict:
    p = car.pricing
    pricing = {k: v for k, v in (
        ("d1_3", p.d1_3), ("d4_7", p.d4_7), ("d8_plus", p.d8_plus),
        ("d8_14", p.d8_14), ("month", p.month),
    ) if v is not None}
    if p.on_request_month:
        pricing["onRequestMonth"] = True
    return {
        "id": car.id,
        "slug": car.slug,
        "name": car.name,
        "category": car.category,
        "specs": list(car.specs),
        "color": car.color,
        "pricing": pricing,
        "deposit": car.deposit,
        "image": car.image,
    }


def extra_to_dict(extra: Extra) -> dict:
    return {
        "id": extra.id,
        "label": extra.label,
        "description": extra.description,
        "pricingRule": extra.pricing_rule,
        "price": extra.price,
    }
