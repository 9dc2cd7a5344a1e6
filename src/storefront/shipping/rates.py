"""Shipping rate calculator.

Deterministic table lookup from postal code to zone, price and delivery
estimate. No carrier call is made; quotes depend only on (postal code, weight).
"""

import math
import re
from dataclasses import dataclass
from enum import Enum

from storefront.errors import ValidationError

POSTAL_CODE_PATTERN = re.compile(r"^[A-Z]?\d{4}$", re.IGNORECASE)
INVALID_POSTAL_CODE = "Código postal inválido. Debe tener 4 dígitos, o una letra seguida de 4 dígitos."


class Zone(Enum):
    CABA = "CABA"
    GBA = "GBA"
    NEAR_PROVINCES = "NEAR_PROVINCES"
    REST_OF_COUNTRY = "REST_OF_COUNTRY"


@dataclass(frozen=True)
class Tier:
    price: float
    estimated_days: str


@dataclass(frozen=True)
class ShippingQuote:
    id: str
    name: str
    description: str
    price: float
    estimated_days: str

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "estimated_days": self.estimated_days,
        }


@dataclass(frozen=True)
class ShippingRates:
    postal_code: str
    zone: Zone
    options: tuple[ShippingQuote, ...]

    def option(self, option_id: str) -> ShippingQuote | None:
        return next((o for o in self.options if o.id == option_id), None)


# (low, high) inclusive ranges of the numeric part
_ZONE_RANGES = (
    (Zone.CABA, ((1000, 1499),)),
    (Zone.GBA, ((1500, 1999),)),
    (Zone.NEAR_PROVINCES, ((2000, 2999), (3000, 3599), (5000, 5999))),
)

_ZONE_TIERS = {
    Zone.CABA: {"standard": Tier(800, "2-3 días"), "express": Tier(1500, "24 horas")},
    Zone.GBA: {"standard": Tier(1200, "2-4 días"), "express": Tier(2000, "24-48 horas")},
    Zone.NEAR_PROVINCES: {"standard": Tier(1800, "3-5 días"), "express": Tier(3000, "48-72 horas")},
    Zone.REST_OF_COUNTRY: {"standard": Tier(2500, "5-7 días"), "express": Tier(4000, "72-96 horas")},
}

PICKUP = ShippingQuote(
    id="pickup",
    name="Retiro en tienda",
    description="Retira tu pedido en nuestra tienda física",
    price=0,
    estimated_days="Inmediato",
)


def validate_postal_code(postal_code: str | None) -> str:
    """Normalise a postal code (trimmed, upper case) or raise ValidationError."""
    code = (postal_code or "").strip().upper()
    if not POSTAL_CODE_PATTERN.match(code):
        raise ValidationError(INVALID_POSTAL_CODE, details={"postal_code": postal_code})
    return code


def zone_for(postal_code: str) -> Zone:
    numeric = int(validate_postal_code(postal_code)[-4:])
    for zone, ranges in _ZONE_RANGES:
        if any(low <= numeric <= high for low, high in ranges):
            return zone
    return Zone.REST_OF_COUNTRY


def weight_multiplier(weight_kg: float | None) -> int:
    if weight_kg is None:
        return 1
    if weight_kg <= 0:
        raise ValidationError("El peso debe ser mayor a cero", details={"weight_kg": weight_kg})
    return math.ceil(weight_kg)


def calculate_shipping(postal_code: str, weight_kg: float | None = None) -> ShippingRates:
    code = validate_postal_code(postal_code)
    zone = zone_for(code)
    multiplier = weight_multiplier(weight_kg)
    tiers = _ZONE_TIERS[zone]

    standard = tiers["standard"]
    express = tiers["express"]
    return ShippingRates(
        postal_code=code,
        zone=zone,
        options=(
            PICKUP,
            ShippingQuote(
                id="standard",
                name="Envío estándar",
                description=f"Envío a domicilio en {standard.estimated_days} hábiles",
                price=standard.price * multiplier,
                estimated_days=standard.estimated_days,
            ),
            ShippingQuote(
                id="express",
                name="Envío express",
                description=f"Envío prioritario en {express.estimated_days}",
                price=express.price * multiplier,
                estimated_days=express.estimated_days,
            ),
        ),
    )
