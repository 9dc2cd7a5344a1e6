"""Order aggregate (CQRS): the order lifecycle of the storefront.

State Machine:
    PENDING → PENDING_PAYMENT → PROCESSED → DELIVERED
    WAITING_TRANSFER_PROOF → PAYMENT_REVIEW → PROCESSED
    PAYMENT_REVIEW → WAITING_TRANSFER_PROOF (proof rejected)
    any non-terminal state → CANCELLED

Every status change goes through ``_assert_can_transition``; the status
field is never written anywhere else.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.errors import ConflictError, InvalidTransitionError, ValidationError
from storefront.ordering.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderProcessed,
    PaymentConfirmed,
    PaymentStatusRecorded,
    TrackingNumberAssigned,
    TrackingUpdated,
    TransferApproved,
    TransferProofSubmitted,
    TransferRejected,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    WAITING_TRANSFER_PROOF = "WAITING_TRANSFER_PROOF"
    PAYMENT_REVIEW = "PAYMENT_REVIEW"
    PROCESSED = "PROCESSED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(Enum):
    MERCADOPAGO = "mercadopago"
    TRANSFER = "transfer"
    CASH = "cash"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PENDING_PAYMENT, OrderStatus.CANCELLED},
    OrderStatus.PENDING_PAYMENT: {OrderStatus.PROCESSED, OrderStatus.CANCELLED},
    OrderStatus.WAITING_TRANSFER_PROOF: {OrderStatus.PAYMENT_REVIEW, OrderStatus.CANCELLED},
    OrderStatus.PAYMENT_REVIEW: {
        OrderStatus.PROCESSED,
        OrderStatus.WAITING_TRANSFER_PROOF,  # Proof rejected
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATUSES = {status for status, targets in _VALID_TRANSITIONS.items() if not targets}

# Unpaid orders hold reserved stock only for a limited window
_EXPIRING_STATUSES = {OrderStatus.PENDING, OrderStatus.WAITING_TRANSFER_PROOF}

_INITIAL_STATUS = {
    PaymentMethod.MERCADOPAGO: OrderStatus.PENDING,
    PaymentMethod.TRANSFER: OrderStatus.WAITING_TRANSFER_PROOF,
    PaymentMethod.CASH: OrderStatus.PENDING_PAYMENT,
}


def required_predecessors(target: OrderStatus) -> list[OrderStatus]:
    """States from which ``target`` may be reached, in declaration order."""
    return [source for source, targets in _VALID_TRANSITIONS.items() if target in targets]


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    street_name = String(max_length=255)
    street_number = String(max_length=20)
    floor = String(max_length=10)
    apartment = String(max_length=10)
    city = String(max_length=100)
    province_code = String(max_length=1)
    postal_code = String(max_length=10)


@storefront.value_object(part_of="Order")
class TransferProof:
    """Customer-submitted evidence of a completed bank transfer."""

    sender_name = String(required=True, max_length=200)
    transaction_id = String(required=True, max_length=100)
    submitted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line. Price and name are snapshots taken at placement."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    color = String(max_length=50)
    size = String(max_length=20)

    @property
    def subtotal(self) -> float:
        return round(self.unit_price * self.quantity, 2)

    def as_line(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "color": self.color,
            "size": self.size,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_name = String(required=True, max_length=200)
    customer_email = String(required=True, max_length=254)
    customer_phone = String(max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.MERCADOPAGO.value)
    payment_id = String(max_length=100)
    payment_status = String(max_length=50)
    items = HasMany(OrderItem)
    shipping_method = String(max_length=50)
    shipping_cost = Float(default=0.0, min_value=0.0)
    shipping_address = ValueObject(ShippingAddress)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)
    tracking_number = String(max_length=100)
    last_tracking_event = Text()  # JSON of the latest carrier event seen
    transfer_proof = ValueObject(TransferProof)
    estimated_delivery = DateTime()
    expires_at = DateTime()
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_name: str,
        customer_email: str,
        items_data: list[dict],
        payment_method: str = PaymentMethod.MERCADOPAGO.value,
        customer_phone: str | None = None,
        shipping_method: str | None = None,
        shipping_cost: float = 0.0,
        discount: float = 0.0,
        shipping_address: ShippingAddress | None = None,
        payment_window: timedelta | None = None,
    ):
        """Create an order from already validated and priced lines."""
        if not items_data:
            raise ValidationError("No hay productos en el carrito")

        try:
            method = PaymentMethod(payment_method)
        except ValueError as exc:
            raise ValidationError(f"Método de pago no soportado: {payment_method}") from exc
        status = _INITIAL_STATUS[method]
        now = datetime.now(UTC)

        items_total = sum(round(i["unit_price"] * i["quantity"], 2) for i in items_data)
        total = round(max(items_total + (shipping_cost or 0.0) - (discount or 0.0), 0.0), 2)

        order = cls(
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            status=status.value,
            payment_method=method.value,
            shipping_method=shipping_method,
            shipping_cost=shipping_cost or 0.0,
            shipping_address=shipping_address,
            discount=discount or 0.0,
            total=total,
            expires_at=now + payment_window if payment_window and status in _EXPIRING_STATUSES else None,
            created_at=now,
            updated_at=now,
        )
        for item_data in items_data:
            order.add_items(OrderItem(**item_data))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_name=customer_name,
                customer_email=customer_email,
                status=status.value,
                payment_method=method.value,
                items=json.dumps([{**i, "product_id": str(i["product_id"])} for i in items_data]),
                item_count=len(items_data),
                total=total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.current_status in TERMINAL_STATUSES

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in _VALID_TRANSITIONS.get(self.current_status, set())

    def _assert_can_transition(self, target: OrderStatus, required: list[OrderStatus] | None = None) -> None:
        """``required`` narrows the table to the predecessors a specific action accepts."""
        allowed = required if required is not None else required_predecessors(target)
        if self.current_status not in allowed or not self.can_transition_to(target):
            raise InvalidTransitionError(
                current=self.status,
                target=target.value,
                required=[s.value for s in allowed],
            )

    def _move_to(self, target: OrderStatus, required: list[OrderStatus] | None = None) -> datetime:
        self._assert_can_transition(target, required)
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        return now

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.current_status not in _EXPIRING_STATUSES or self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        expires_at = self.expires_at if self.expires_at.tzinfo else self.expires_at.replace(tzinfo=UTC)
        return expires_at < now

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment_status(self, payment_id: str, payment_status: str) -> None:
        now = datetime.now(UTC)
        self.payment_id = payment_id
        self.payment_status = payment_status
        self.updated_at = now
        self.raise_(
            PaymentStatusRecorded(
                order_id=str(self.id),
                payment_id=payment_id,
                payment_status=payment_status,
                recorded_at=now,
            )
        )

    def confirm_payment(self, payment_id: str | None = None) -> bool:
        """Advance an unpaid order after the processor approved the payment.

        Returns False, leaving the order untouched, when the order is already
        past the point a payment confirmation applies to.
        """
        previous = self.current_status
        if previous == OrderStatus.PENDING:
            target = OrderStatus.PENDING_PAYMENT
        elif previous == OrderStatus.PAYMENT_REVIEW:
            target = OrderStatus.PROCESSED
        else:
            return False

        now = self._move_to(target)
        if payment_id:
            self.payment_id = payment_id
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_id=payment_id,
                previous_status=previous.value,
                new_status=target.value,
                confirmed_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Bank transfer path
    # -------------------------------------------------------------------
    def submit_transfer_proof(self, sender_name: str, transaction_id: str) -> None:
        if not (sender_name or "").strip() or not (transaction_id or "").strip():
            raise ValidationError("Nombre del remitente y número de operación son obligatorios")

        now = self._move_to(OrderStatus.PAYMENT_REVIEW)
        self.transfer_proof = TransferProof(
            sender_name=sender_name.strip(),
            transaction_id=transaction_id.strip(),
            submitted_at=now,
        )
        self.raise_(
            TransferProofSubmitted(
                order_id=str(self.id),
                sender_name=sender_name.strip(),
                transaction_id=transaction_id.strip(),
                submitted_at=now,
            )
        )

    def approve_transfer(self) -> None:
        now = self._move_to(OrderStatus.PROCESSED, required=[OrderStatus.PAYMENT_REVIEW])
        self.payment_status = "PAID"
        self.raise_(TransferApproved(order_id=str(self.id), approved_at=now))

    def reject_transfer(self, reason: str | None = None) -> None:
        now = self._move_to(OrderStatus.WAITING_TRANSFER_PROOF)
        self.transfer_proof = None
        self.raise_(TransferRejected(order_id=str(self.id), reason=reason, rejected_at=now))

    # -------------------------------------------------------------------
    # Fulfilment
    # -------------------------------------------------------------------
    def mark_processed(self) -> None:
        now = self._move_to(OrderStatus.PROCESSED, required=[OrderStatus.PENDING_PAYMENT])
        self.raise_(
            OrderProcessed(
                order_id=str(self.id),
                customer_name=self.customer_name,
                customer_email=self.customer_email,
                tracking_number=self.tracking_number,
                processed_at=now,
            )
        )

    def mark_delivered(self) -> None:
        now = self._move_to(OrderStatus.DELIVERED, required=[OrderStatus.PROCESSED])
        self.estimated_delivery = now
        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                customer_name=self.customer_name,
                customer_email=self.customer_email,
                delivered_at=now,
            )
        )

    def assign_tracking_number(self, tracking_number: str) -> None:
        if self.is_terminal:
            raise ConflictError(f"No se puede asignar seguimiento a un pedido en estado {self.status}")
        if not (tracking_number or "").strip():
            raise ValidationError("El número de seguimiento es obligatorio")

        now = datetime.now(UTC)
        self.tracking_number = tracking_number.strip()
        self.updated_at = now
        self.raise_(
            TrackingNumberAssigned(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                assigned_at=now,
            )
        )

    def record_tracking_event(self, event: dict) -> bool:
        """Remember the carrier's latest event; returns True if it is new."""
        snapshot = {
            "status": event.get("status"),
            "description": event.get("description"),
            "event_date": event.get("event_date"),
            "branch_name": event.get("branch_name"),
        }
        encoded = json.dumps(snapshot, sort_keys=True)
        if encoded == self.last_tracking_event:
            return False

        now = datetime.now(UTC)
        self.last_tracking_event = encoded
        self.updated_at = now
        self.raise_(
            TrackingUpdated(
                order_id=str(self.id),
                customer_name=self.customer_name,
                customer_email=self.customer_email,
                tracking_number=self.tracking_number,
                carrier_status=snapshot["status"] or "",
                description=snapshot["description"],
                branch_name=snapshot["branch_name"],
                event_date=snapshot["event_date"],
                updated_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason: str | None = None) -> list[dict]:
        """Cancel the order and return the lines whose stock must be restored."""
        previous = self.current_status
        now = self._move_to(OrderStatus.CANCELLED)
        self.cancellation_reason = reason
        lines = [item.as_line() for item in (self.items or [])]
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous.value,
                reason=reason,
                items=json.dumps(lines),
                cancelled_at=now,
            )
        )
        return lines
