"""Runtime settings read from the process environment.

Values are read on every call so tests can monkeypatch the environment.
"""

import os
from dataclasses import dataclass

CURRENCY = "ARS"
STORE_NAME = "Rastuci"


def _flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value in (None, ""):
        return default
    return float(value)


@dataclass(frozen=True)
class CarrierSettings:
    username: str
    password: str
    customer_id: str
    environment: str
    origin_postal_code: str
    webhook_secret: str

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password)


def carrier_settings() -> CarrierSettings:
    return CarrierSettings(
        username=os.environ.get("CORREO_ARGENTINO_USERNAME", ""),
        password=os.environ.get("CORREO_ARGENTINO_PASSWORD", ""),
        customer_id=os.environ.get("CORREO_ARGENTINO_CUSTOMER_ID", ""),
        environment=os.environ.get("CORREO_ARGENTINO_ENV", "test"),
        origin_postal_code=os.environ.get("STORE_POSTAL_CODE", "1611"),
        webhook_secret=os.environ.get("CORREO_ARGENTINO_WEBHOOK_SECRET", ""),
    )


def payment_access_token() -> str:
    return os.environ.get("MP_ACCESS_TOKEN", "")


def payment_webhook_secret() -> str:
    return os.environ.get("MP_WEBHOOK_SECRET", "")


def allow_unsigned_webhooks() -> bool:
    """Local development escape hatch; never enable in production."""
    return _flag("PAYMENT_ALLOW_UNSIGNED_WEBHOOKS")


def cron_secret() -> str:
    return os.environ.get("CRON_SECRET", "")


def tracking_poll_delay() -> float:
    return _float("TRACKING_POLL_DELAY_SECONDS", 1.0)


def payment_window_minutes() -> float:
    return _float("ORDER_PAYMENT_WINDOW_MINUTES", 60.0)


def http_timeout() -> float:
    return _float("HTTP_TIMEOUT_SECONDS", 10.0)


def is_production() -> bool:
    return os.environ.get("PROTEAN_ENV") == "production"


def rate_limit_enabled() -> bool:
    return _flag("RATE_LIMIT_ENABLED", default=True)
