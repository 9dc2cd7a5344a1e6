"""Settings store: reads fall back to defaults, writes upsert by key.

A read never fails: a missing record, undecodable JSON or a storage error
all produce the default for the key (logged), merged with whatever could be
read.
"""

import copy
import json

import structlog
from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.config import STORE_NAME
from storefront.domain import storefront
from storefront.errors import NotFoundError, ValidationError
from storefront.settings.setting import Setting
from storefront.shipping.rates import PICKUP

logger = structlog.get_logger(__name__)

DEFAULTS: dict[str, object] = {
    "store": {
        "name": STORE_NAME,
        "admin_email": "admin@rastuci.com",
        "address": {
            "street_name": "",
            "city": "",
            "province_code": "B",
            "postal_code": "1611",
        },
        "emails": {"sales_email": "", "support_email": "", "sender_name": STORE_NAME},
        "shipping": {"free_shipping": False, "free_shipping_threshold": None},
    },
    "shipping_options": [
        PICKUP.as_dict(),
        {
            "id": "standard",
            "name": "Envío estándar",
            "description": "Envío a domicilio en 3-5 días hábiles",
            "price": 1500,
            "estimated_days": "3-5 días",
        },
        {
            "id": "express",
            "name": "Envío express",
            "description": "Envío prioritario en 24-48 horas",
            "price": 2500,
            "estimated_days": "24-48 horas",
        },
    ],
    "contact": {"emails": [], "phones": [], "address": ""},
    "home": {
        "hero_title": STORE_NAME,
        "hero_subtitle": "Ropa para chicos",
    },
}

_SHIPPING_OPTION_FIELDS = {"id", "name", "description", "price", "estimated_days"}


def _merge(default, override):
    if isinstance(default, dict) and isinstance(override, dict):
        merged = dict(default)
        for key, value in override.items():
            merged[key] = _merge(default.get(key), value) if key in default else value
        return merged
    return override


def _find(key: str) -> Setting | None:
    results = current_domain.repository_for(Setting)._dao.query.filter(key=key).all()
    return results.first if results.items else None


def get_setting(key: str):
    if key not in DEFAULTS:
        raise NotFoundError(f"Configuración desconocida: {key}")
    default = copy.deepcopy(DEFAULTS[key])

    try:
        record = _find(key)
        if record is None:
            return default
        return _merge(default, record.data)
    except Exception as exc:
        logger.error("Failed to read setting, using defaults", key=key, error=str(exc), exc_info=True)
        return default


def validate_shipping_options(options) -> list[dict]:
    if not isinstance(options, list) or not options:
        raise ValidationError("Debe haber al menos una opción de envío")
    for option in options:
        if not isinstance(option, dict) or not _SHIPPING_OPTION_FIELDS.issubset(option):
            raise ValidationError(
                "Cada opción de envío requiere id, name, description, price y estimated_days",
                details={"option": option},
            )
        price = option["price"]
        if isinstance(price, bool) or not isinstance(price, int | float) or price < 0:
            raise ValidationError(f"Precio inválido para la opción {option['id']}", details={"option": option})
    return options


_VALIDATORS = {"shipping_options": validate_shipping_options}


@storefront.command(part_of="Setting")
class SaveSetting:
    key = String(required=True, max_length=100)
    value = Text(required=True)  # JSON document


@storefront.command_handler(part_of=Setting)
class SettingsHandler:
    @handle(SaveSetting)
    def save_setting(self, command):
        if command.key not in DEFAULTS:
            raise NotFoundError(f"Configuración desconocida: {command.key}")
        try:
            data = json.loads(command.value)
        except ValueError as exc:
            raise ValidationError("El valor debe ser JSON válido") from exc

        validator = _VALIDATORS.get(command.key)
        if validator is not None:
            data = validator(data)

        repo = current_domain.repository_for(Setting)
        record = _find(command.key)
        if record is None:
            record = Setting(key=command.key, value=json.dumps(data))
        record.replace(data)
        repo.add(record)
        logger.info("Setting saved", key=command.key)
