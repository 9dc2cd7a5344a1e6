"""FastAPI endpoints for orders: checkout and the back-office transitions."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.rate_limit import PLACE_ORDER, rate_limit
from storefront.api.schemas import (
    AssignTrackingRequest,
    CancelledOrderView,
    CancelOrderRequest,
    ConfirmTransferRequest,
    Envelope,
    OrderView,
    PlacedOrderView,
    PlaceOrderRequest,
    RejectTransferRequest,
    TransitionView,
)
from storefront.ordering.cancellation import CancelOrder
from storefront.ordering.fulfilment import AssignTrackingNumber, MarkDelivered, MarkProcessed
from storefront.ordering.order import PaymentMethod
from storefront.ordering.placement import PlaceOrder
from storefront.ordering.queries import list_orders, load_order
from storefront.ordering.transfer import ApproveTransfer, ConfirmTransfer, RejectTransfer
from storefront.payments.checkout import open_checkout

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _transition(order_id: str) -> Envelope[TransitionView]:
    order = load_order(order_id)
    return Envelope(data=TransitionView(order_id=str(order.id), status=order.status))


@router.post(
    "",
    status_code=201,
    response_model=Envelope[PlacedOrderView],
    dependencies=[Depends(rate_limit(PLACE_ORDER))],
)
def place_order(body: PlaceOrderRequest) -> Envelope[PlacedOrderView]:
    command = PlaceOrder(
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        items=json.dumps([item.model_dump() for item in body.items]),
        payment_method=body.payment_method,
        shipping_method=body.shipping_method,
        shipping_cost=body.shipping_cost,
        discount=body.discount,
        shipping_address=body.shipping_address.model_dump_json() if body.shipping_address else None,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = load_order(order_id)

    placed = PlacedOrderView(order_id=str(order.id), status=order.status, total=order.total)
    if order.payment_method == PaymentMethod.MERCADOPAGO.value:
        preference = open_checkout(order)
        placed.checkout_url = preference.init_point
        placed.preference_id = preference.preference_id
    return Envelope(data=placed)


@router.get("", response_model=Envelope[list[OrderView]])
def get_orders(status: str | None = None) -> Envelope[list[OrderView]]:
    return Envelope(data=[OrderView.from_order(o) for o in list_orders(status)])


@router.get("/{order_id}", response_model=Envelope[OrderView])
def get_order(order_id: str) -> Envelope[OrderView]:
    return Envelope(data=OrderView.from_order(load_order(order_id)))


@router.post("/{order_id}/mark-processed", response_model=Envelope[TransitionView])
def mark_processed(order_id: str) -> Envelope[TransitionView]:
    current_domain.process(MarkProcessed(order_id=order_id), asynchronous=False)
    return _transition(order_id)


@router.post("/{order_id}/mark-delivered", response_model=Envelope[TransitionView])
def mark_delivered(order_id: str) -> Envelope[TransitionView]:
    current_domain.process(MarkDelivered(order_id=order_id), asynchronous=False)
    return _transition(order_id)


@router.post("/{order_id}/cancel", response_model=Envelope[CancelledOrderView])
def cancel_order(order_id: str, body: CancelOrderRequest | None = None) -> Envelope[CancelledOrderView]:
    reason = body.reason if body else None
    restored = current_domain.process(CancelOrder(order_id=order_id, reason=reason), asynchronous=False)
    order = load_order(order_id)
    return Envelope(data=CancelledOrderView(order_id=str(order.id), status=order.status, restored_stock=restored or 0))


@router.post("/{order_id}/confirm-transfer", response_model=Envelope[TransitionView])
def confirm_transfer(order_id: str, body: ConfirmTransferRequest) -> Envelope[TransitionView]:
    command = ConfirmTransfer(
        order_id=order_id,
        sender_name=body.sender_name,
        transaction_id=body.transaction_id,
    )
    current_domain.process(command, asynchronous=False)
    return _transition(order_id)


@router.post("/{order_id}/approve-transfer", response_model=Envelope[TransitionView])
def approve_transfer(order_id: str) -> Envelope[TransitionView]:
    current_domain.process(ApproveTransfer(order_id=order_id), asynchronous=False)
    return _transition(order_id)


@router.post("/{order_id}/reject-transfer", response_model=Envelope[TransitionView])
def reject_transfer(order_id: str, body: RejectTransferRequest | None = None) -> Envelope[TransitionView]:
    reason = body.reason if body else None
    current_domain.process(RejectTransfer(order_id=order_id, reason=reason), asynchronous=False)
    return _transition(order_id)


@router.post("/{order_id}/tracking", response_model=Envelope[OrderView])
def assign_tracking(order_id: str, body: AssignTrackingRequest) -> Envelope[OrderView]:
    command = AssignTrackingNumber(order_id=order_id, tracking_number=body.tracking_number)
    current_domain.process(command, asynchronous=False)
    return Envelope(data=OrderView.from_order(load_order(order_id)))
