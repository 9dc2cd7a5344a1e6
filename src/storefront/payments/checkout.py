"""Hosted checkout: builds the line sent to the processor and opens the session."""

import structlog

from storefront.config import CURRENCY, STORE_NAME
from storefront.errors import ExternalServiceError
from storefront.ordering.order import Order
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import PaymentGatewayError, PreferenceResult

logger = structlog.get_logger(__name__)


def build_payment_items(order: Order) -> list[dict]:
    """Single summary line for the whole order.

    Item prices are already snapshots of the effective (sale) price, so the
    total covers items plus shipping minus discount.
    """
    items_total = sum(item.subtotal for item in order.items or [])
    total = round(max(items_total + (order.shipping_cost or 0.0) - (order.discount or 0.0), 0.0), 2)
    return [
        {
            "id": str(order.id),
            "title": f"Compra en {STORE_NAME}",
            "quantity": 1,
            "currency_id": CURRENCY,
            "unit_price": total,
        }
    ]


def open_checkout(order: Order) -> PreferenceResult:
    try:
        preference = get_gateway().create_preference(
            items=build_payment_items(order),
            external_reference=str(order.id),
            payer_email=order.customer_email,
        )
    except PaymentGatewayError as exc:
        logger.error("Checkout preference failed", order_id=str(order.id), error=str(exc))
        raise ExternalServiceError("mercadopago", "No se pudo iniciar el pago", {"order_id": str(order.id)}) from exc

    logger.info("Checkout opened", order_id=str(order.id), preference_id=preference.preference_id)
    return preference
