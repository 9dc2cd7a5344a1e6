"""Order lookups shared by handlers, sweeps and the API."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.errors import NotFoundError, ValidationError
from storefront.ordering.order import TERMINAL_STATUSES, Order, OrderStatus
from storefront.utils.db import fetch_all

_OPEN_STATUSES = [s.value for s in OrderStatus if s not in TERMINAL_STATUSES]


def _orders():
    return current_domain.repository_for(Order)._dao.query.order_by(["-created_at", "id"])


def load_order(order_id: str) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise NotFoundError("Pedido no encontrado") from exc


def list_orders(status: str | None = None) -> list[Order]:
    """Orders for the back office, newest first."""
    query = _orders()
    if status:
        try:
            OrderStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Estado de pedido desconocido: {status}") from exc
        query = query.filter(status=status)
    return fetch_all(query)


def find_by_tracking_number(tracking_number: str) -> Order:
    results = current_domain.repository_for(Order)._dao.query.filter(tracking_number=tracking_number).all()
    if not results.items:
        raise NotFoundError(f"No hay pedido con número de seguimiento {tracking_number}")
    return results.first


def orders_in_transit() -> list[Order]:
    """Orders with a tracking number that have not reached a terminal state."""
    # NULL never compares equal, so the exclude also drops orders without a tracking number
    query = _orders().filter(status__in=_OPEN_STATUSES).exclude(tracking_number="")
    return [o for o in fetch_all(query) if o.tracking_number]


def orders_awaiting_payment() -> list[Order]:
    """Unpaid orders, oldest first."""
    query = (
        current_domain.repository_for(Order)
        ._dao.query.filter(status__in=[OrderStatus.PENDING.value, OrderStatus.WAITING_TRANSFER_PROOF.value])
        .order_by(["created_at", "id"])
    )
    return fetch_all(query)
