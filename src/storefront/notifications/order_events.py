"""Customer emails driven by Order events."""

import structlog
from protean import handle

from storefront.domain import storefront
from storefront.notifications.dispatch import send_best_effort
from storefront.notifications.templates import EmailKind
from storefront.ordering.events import OrderDelivered, OrderProcessed, TrackingUpdated
from storefront.ordering.order import Order
from storefront.shipping.tracking_status import is_notifiable

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Order)
class OrderNotifications:
    @handle(OrderProcessed)
    def on_order_processed(self, event: OrderProcessed) -> None:
        if not event.tracking_number:
            logger.info("Processed order has no tracking number, skipping email", order_id=str(event.order_id))
            return
        send_best_effort(
            EmailKind.ORDER_SHIPPED,
            event.customer_email,
            {
                "order_id": str(event.order_id),
                "customer_name": event.customer_name,
                "tracking_number": event.tracking_number,
            },
        )

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        send_best_effort(
            EmailKind.ORDER_DELIVERED,
            event.customer_email,
            {"order_id": str(event.order_id), "customer_name": event.customer_name},
        )

    @handle(TrackingUpdated)
    def on_tracking_updated(self, event: TrackingUpdated) -> None:
        if not is_notifiable(event.carrier_status):
            return
        send_best_effort(
            EmailKind.TRACKING_UPDATE,
            event.customer_email,
            {
                "order_id": str(event.order_id),
                "customer_name": event.customer_name,
                "tracking_number": event.tracking_number,
                "carrier_status": event.carrier_status,
                "description": event.description,
                "branch_name": event.branch_name,
            },
        )
