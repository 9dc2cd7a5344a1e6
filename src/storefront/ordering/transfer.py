"""Bank transfer path: proof submission and manual review."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order import Order
from storefront.ordering.queries import load_order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ConfirmTransfer:
    """Customer tells us the transfer was made."""

    order_id = Identifier(required=True)
    sender_name = String(required=True, max_length=200)
    transaction_id = String(required=True, max_length=100)


@storefront.command(part_of="Order")
class ApproveTransfer:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class RejectTransfer:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@storefront.command_handler(part_of=Order)
class TransferHandler:
    @handle(ConfirmTransfer)
    def confirm_transfer(self, command):
        order = load_order(command.order_id)
        order.submit_transfer_proof(command.sender_name, command.transaction_id)
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Transfer proof submitted",
            order_id=str(order.id),
            transaction_id=command.transaction_id,
        )

    @handle(ApproveTransfer)
    def approve_transfer(self, command):
        order = load_order(command.order_id)
        order.approve_transfer()
        current_domain.repository_for(Order).add(order)
        logger.info("Transfer approved", order_id=str(order.id))

    @handle(RejectTransfer)
    def reject_transfer(self, command):
        order = load_order(command.order_id)
        order.reject_transfer(command.reason)
        current_domain.repository_for(Order).add(order)
        logger.info("Transfer rejected", order_id=str(order.id), reason=command.reason)
