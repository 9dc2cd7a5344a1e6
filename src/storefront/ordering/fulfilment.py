"""Fulfilment transitions: processed, delivered and tracking number assignment."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order import Order
from storefront.ordering.queries import load_order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class MarkProcessed:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class MarkDelivered:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class AssignTrackingNumber:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)


@storefront.command_handler(part_of=Order)
class FulfilmentHandler:
    @handle(MarkProcessed)
    def mark_processed(self, command):
        order = load_order(command.order_id)
        order.mark_processed()
        current_domain.repository_for(Order).add(order)
        logger.info("Order processed", order_id=str(order.id), tracking_number=order.tracking_number)

    @handle(MarkDelivered)
    def mark_delivered(self, command):
        order = load_order(command.order_id)
        order.mark_delivered()
        current_domain.repository_for(Order).add(order)
        logger.info("Order delivered", order_id=str(order.id))

    @handle(AssignTrackingNumber)
    def assign_tracking_number(self, command):
        order = load_order(command.order_id)
        order.assign_tracking_number(command.tracking_number)
        current_domain.repository_for(Order).add(order)
