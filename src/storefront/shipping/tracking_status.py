"""Carrier tracking vocabulary and how it maps onto order statuses."""

from storefront.ordering.order import OrderStatus

NOTIFIABLE_STATUSES = frozenset(
    {
        "ENTREGADO",
        "DEVUELTO",
        "EN_TRANSITO",
        "RETENIDO_ADUANA",
        "NO_ENTREGADO",
        "EN_SUCURSAL",
    }
)

_ORDER_STATUS_BY_CARRIER_STATUS = {
    "ENTREGADO": OrderStatus.DELIVERED,
    "EN_TRANSITO": OrderStatus.PROCESSED,
    "EN_SUCURSAL": OrderStatus.PROCESSED,
    "EN_DISTRIBUCION": OrderStatus.PROCESSED,
    "RETENIDO_ADUANA": OrderStatus.PROCESSED,
    "DEVUELTO": OrderStatus.PENDING,
    "NO_ENTREGADO": OrderStatus.PENDING,
}


def normalize(status: str | None) -> str:
    return (status or "").strip().upper().replace(" ", "_")


def is_notifiable(status: str | None) -> bool:
    return normalize(status) in NOTIFIABLE_STATUSES


def map_carrier_status(status: str | None) -> OrderStatus:
    """Order status a carrier status corresponds to; unknown statuses mean still in flight."""
    return _ORDER_STATUS_BY_CARRIER_STATUS.get(normalize(status), OrderStatus.PROCESSED)
