"""Domain events for the Order aggregate.

Events carry the customer contact fields so notification handlers never
need to reload the order.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String(required=True)
    customer_email = String(required=True)
    status = String(required=True)
    payment_method = String(required=True)
    items = Text(required=True)  # JSON list of item dicts
    item_count = Integer(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentStatusRecorded:
    """The payment processor reported a status for this order's payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = String(required=True)
    payment_status = String(required=True)
    recorded_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = String()
    previous_status = String(required=True)
    new_status = String(required=True)
    confirmed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderProcessed:
    """The order was prepared and handed to the carrier."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String(required=True)
    customer_email = String(required=True)
    tracking_number = String()
    processed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String(required=True)
    customer_email = String(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String()
    items = Text(required=True)  # JSON list of restored lines
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TransferProofSubmitted:
    __version__ = 1

    order_id = Identifier(required=True)
    sender_name = String(required=True)
    transaction_id = String(required=True)
    submitted_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TransferApproved:
    __version__ = 1

    order_id = Identifier(required=True)
    approved_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TransferRejected:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    rejected_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TrackingNumberAssigned:
    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    assigned_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TrackingUpdated:
    """The carrier reported a tracking event not seen before."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String(required=True)
    customer_email = String(required=True)
    tracking_number = String(required=True)
    carrier_status = String(required=True)
    description = String()
    branch_name = String()
    event_date = String()
    updated_at = DateTime(required=True)
