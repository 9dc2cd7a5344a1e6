"""Application tests for the transfer review and fulfilment commands."""

import pytest
from protean import current_domain

from storefront.errors import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from storefront.ordering.fulfilment import AssignTrackingNumber, MarkDelivered, MarkProcessed
from storefront.ordering.order import OrderStatus
from storefront.ordering.queries import find_by_tracking_number, list_orders, orders_awaiting_payment, orders_in_transit
from storefront.ordering.transfer import ApproveTransfer, ConfirmTransfer, RejectTransfer


def _process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def transfer_order(make_product, place_order):
    product_id = make_product(stock=5)
    return place_order([{"product_id": product_id, "quantity": 1}], payment_method="transfer")


class TestTransferReview:
    def test_full_transfer_path(self, transfer_order, load_order):
        _process(ConfirmTransfer(order_id=transfer_order, sender_name="Juan", transaction_id="OP-9"))
        assert load_order(transfer_order).status == OrderStatus.PAYMENT_REVIEW.value

        _process(ApproveTransfer(order_id=transfer_order))
        order = load_order(transfer_order)
        assert order.status == OrderStatus.PROCESSED.value
        assert order.transfer_proof.transaction_id == "OP-9"

    def test_reject_allows_new_proof(self, transfer_order, load_order):
        _process(ConfirmTransfer(order_id=transfer_order, sender_name="Juan", transaction_id="OP-9"))
        _process(RejectTransfer(order_id=transfer_order, reason="Monto incorrecto"))
        assert load_order(transfer_order).status == OrderStatus.WAITING_TRANSFER_PROOF.value

        _process(ConfirmTransfer(order_id=transfer_order, sender_name="Juan", transaction_id="OP-10"))
        assert load_order(transfer_order).transfer_proof.transaction_id == "OP-10"

    def test_approve_without_proof_fails(self, transfer_order):
        with pytest.raises(InvalidTransitionError):
            _process(ApproveTransfer(order_id=transfer_order))

    def test_reviewed_order_cannot_be_marked_processed(self, transfer_order, load_order):
        _process(ConfirmTransfer(order_id=transfer_order, sender_name="Juan", transaction_id="OP-9"))

        with pytest.raises(InvalidTransitionError) as exc:
            _process(MarkProcessed(order_id=transfer_order))

        assert exc.value.message == "El pedido debe estar en estado PENDING_PAYMENT. Estado actual: PAYMENT_REVIEW"
        order = load_order(transfer_order)
        assert order.status == OrderStatus.PAYMENT_REVIEW.value
        assert order.payment_status is None

    def test_unknown_order(self):
        with pytest.raises(NotFoundError) as exc:
            _process(ApproveTransfer(order_id="missing"))
        assert exc.value.message == "Pedido no encontrado"


class TestFulfilment:
    def test_cash_order_ships_and_delivers(self, make_product, place_order, load_order, mailer):
        product_id = make_product()
        order_id = place_order([{"product_id": product_id, "quantity": 1}], payment_method="cash")

        _process(AssignTrackingNumber(order_id=order_id, tracking_number="TN-1"))
        _process(MarkProcessed(order_id=order_id))
        _process(MarkDelivered(order_id=order_id))

        order = load_order(order_id)
        assert order.status == OrderStatus.DELIVERED.value
        subjects = [e["subject"] for e in mailer.sent_to("ana@example.com")]
        assert any("despachado" in s for s in subjects)
        assert any("entregado" in s for s in subjects)

    def test_mark_delivered_requires_processed(self, transfer_order):
        with pytest.raises(InvalidTransitionError):
            _process(MarkDelivered(order_id=transfer_order))

    def test_tracking_on_cancelled_order(self, transfer_order):
        from storefront.ordering.cancellation import CancelOrder

        _process(CancelOrder(order_id=transfer_order))
        with pytest.raises(ConflictError):
            _process(AssignTrackingNumber(order_id=transfer_order, tracking_number="TN-1"))


class TestQueries:
    def test_list_orders_by_status(self, make_product, place_order):
        product_id = make_product(stock=5)
        place_order([{"product_id": product_id, "quantity": 1}], payment_method="cash")
        place_order([{"product_id": product_id, "quantity": 1}], payment_method="transfer")

        assert len(list_orders()) == 2
        assert [o.payment_method for o in list_orders("PENDING_PAYMENT")] == ["cash"]

    def test_list_orders_unknown_status(self):
        with pytest.raises(ValidationError):
            list_orders("SHIPPED")

    def test_in_transit_and_lookup(self, transfer_order):
        _process(AssignTrackingNumber(order_id=transfer_order, tracking_number="TN-7"))
        assert [str(o.id) for o in orders_in_transit()] == [transfer_order]
        assert str(find_by_tracking_number("TN-7").id) == transfer_order
        with pytest.raises(NotFoundError):
            find_by_tracking_number("TN-0")

    def test_queries_read_past_the_first_hundred_orders(self, make_product, place_order):
        product_id = make_product(stock=200)
        for index in range(100):
            place_order(
                [{"product_id": product_id, "quantity": 1}], payment_method="cash", customer_email=f"c{index}@example.com"
            )
        late = place_order([{"product_id": product_id, "quantity": 1}], payment_method="transfer")
        _process(AssignTrackingNumber(order_id=late, tracking_number="TN-LATE"))

        orders = list_orders()
        assert len(orders) == 101
        assert len({str(o.id) for o in orders}) == 101
        assert len(list_orders("PENDING_PAYMENT")) == 100
        assert [str(o.id) for o in orders_in_transit()] == [late]
        assert [str(o.id) for o in orders_awaiting_payment()] == [late]
