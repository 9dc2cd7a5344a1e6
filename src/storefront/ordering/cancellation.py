"""Order cancellation: command, handler and the expired-order sweep.

Cancelling writes the CANCELLED status and gives every item's units back to
its product (or variant) in the same unit of work. The status check in
``Order.cancel`` runs first, so a second cancellation fails before any stock
is touched.
"""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import StorefrontError
from storefront.ordering.order import Order
from storefront.ordering.queries import load_order, orders_awaiting_payment
from storefront.ordering.stock import fetch_products

logger = structlog.get_logger(__name__)

EXPIRY_BATCH_SIZE = 50


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


def restore_stock(lines: list[dict]) -> int:
    """Return each line's quantity to its product. Returns the units restored."""
    products = fetch_products([line["product_id"] for line in lines])
    restored = 0
    for line in lines:
        product = products.get(line["product_id"])
        if product is None:
            logger.warning("Product missing during stock restore", product_id=line["product_id"])
            continue
        product.release_stock(line["quantity"], line.get("color"), line.get("size"))
        restored += line["quantity"]

    repo = current_domain.repository_for(Product)
    for product in products.values():
        repo.add(product)
    return restored


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)
        lines = order.cancel(reason=command.reason)
        restored = restore_stock(lines)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            reason=command.reason,
            restored_units=restored,
        )
        return restored


@dataclass
class ExpirySweepResult:
    cancelled: int = 0
    restored_stock: int = 0
    errors: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def cancel_expired_orders(as_of: datetime | None = None, batch_size: int = EXPIRY_BATCH_SIZE) -> ExpirySweepResult:
    """Cancel unpaid orders whose payment window has closed.

    Each order is cancelled through its own command so one failure leaves
    the rest of the batch unaffected.
    """
    as_of = as_of or datetime.now(UTC)
    expired = [o for o in orders_awaiting_payment() if o.is_expired(as_of)][:batch_size]

    result = ExpirySweepResult()
    for order in expired:
        try:
            restored = current_domain.process(
                CancelOrder(order_id=str(order.id), reason="Pago no recibido a tiempo"),
                asynchronous=False,
            )
            result.cancelled += 1
            result.restored_stock += restored or 0
        except StorefrontError as exc:
            result.errors += 1
            logger.warning("Failed to cancel expired order", order_id=str(order.id), error=exc.message)

    logger.info("Expired order sweep complete", **result.as_dict())
    return result
