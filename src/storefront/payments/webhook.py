"""ProcessPaymentNotification: apply a processor notification to its order.

The notification only names a payment id. The payment itself is fetched from
the gateway and its ``external_reference`` identifies the order.
"""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ExternalServiceError, ValidationError
from storefront.ordering.order import Order, OrderStatus
from storefront.ordering.queries import load_order
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import PaymentGatewayError
from storefront.payments.status import PaymentOutcome, map_payment_status

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ProcessPaymentNotification:
    payment_id = String(required=True, max_length=100)


@storefront.command_handler(part_of=Order)
class PaymentNotificationHandler:
    @handle(ProcessPaymentNotification)
    def process_notification(self, command):
        try:
            payment = get_gateway().get_payment(command.payment_id)
        except PaymentGatewayError as exc:
            raise ExternalServiceError(
                "mercadopago",
                "No se pudo consultar el pago",
                details={"payment_id": command.payment_id, "status": exc.status, "error": str(exc)},
            ) from exc

        if not payment.external_reference:
            raise ValidationError(
                "El pago no tiene referencia de pedido",
                details={"payment_id": payment.payment_id},
            )

        outcome = map_payment_status(payment.status)
        order = load_order(payment.external_reference)
        order.record_payment_status(payment.payment_id, outcome.value)

        advanced = False
        if outcome == PaymentOutcome.PAID:
            advanced = order.confirm_payment(payment.payment_id)
            if not advanced and order.current_status == OrderStatus.CANCELLED:
                logger.error(
                    "Payment received for cancelled order; refund required",
                    order_id=str(order.id),
                    payment_id=payment.payment_id,
                    amount=payment.amount,
                    cancellation_reason=order.cancellation_reason,
                )
            elif not advanced:
                logger.info(
                    "Payment already applied to order",
                    order_id=str(order.id),
                    payment_id=payment.payment_id,
                    status=order.status,
                )

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Payment notification processed",
            order_id=str(order.id),
            payment_id=payment.payment_id,
            provider_status=payment.status,
            outcome=outcome.value,
            order_status=order.status,
        )
        return {"order_id": str(order.id), "outcome": outcome.value, "order_status": order.status, "advanced": advanced}
