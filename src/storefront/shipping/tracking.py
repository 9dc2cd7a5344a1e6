"""Carrier tracking: event recording and the cron-driven polling sweep.

The sweep walks every order that has a tracking number and is still in
flight, one carrier call at a time with a pause between calls. Emails for new
events are sent by the Order event handler, not here.
"""

import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront import config
from storefront.domain import storefront
from storefront.ordering.order import Order, OrderStatus
from storefront.ordering.queries import load_order, orders_in_transit
from storefront.shipping.carrier import get_carrier
from storefront.shipping.tracking_status import is_notifiable, map_carrier_status, normalize

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class RecordTrackingEvent:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    description = String(max_length=500)
    event_date = String(max_length=50)
    branch_name = String(max_length=200)
    advance_status = Boolean(default=False)


@storefront.command_handler(part_of=Order)
class TrackingHandler:
    @handle(RecordTrackingEvent)
    def record_tracking_event(self, command):
        """Store the event on the order. Returns True when it was new."""
        order = load_order(command.order_id)
        status = normalize(command.status)
        changed = order.record_tracking_event(
            {
                "status": status,
                "description": command.description,
                "event_date": command.event_date,
                "branch_name": command.branch_name,
            }
        )

        if (
            command.advance_status
            and map_carrier_status(status) == OrderStatus.DELIVERED
            and order.can_transition_to(OrderStatus.DELIVERED)
        ):
            order.mark_delivered()
            changed = True

        if changed:
            current_domain.repository_for(Order).add(order)
        return changed


@dataclass
class TrackingSweepResult:
    checked: int = 0
    updated: int = 0
    notified: int = 0
    errors: int = 0
    # order id -> order status the latest carrier event corresponds to
    statuses: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return asdict(self)


def poll_tracking(delay: float | None = None, sleep: Callable[[float], None] = time.sleep) -> TrackingSweepResult:
    """Re-fetch carrier tracking for every in-flight order, sequentially."""
    delay = config.tracking_poll_delay() if delay is None else delay
    carrier = get_carrier()
    result = TrackingSweepResult()

    orders = orders_in_transit()
    logger.info("Tracking sweep started", orders=len(orders))

    for index, order in enumerate(orders):
        if index and delay > 0:
            sleep(delay)

        result.checked += 1
        try:
            response = carrier.get_tracking(order.tracking_number)
            if not response.success:
                result.errors += 1
                logger.warning(
                    "Tracking fetch failed",
                    order_id=str(order.id),
                    tracking_number=order.tracking_number,
                    error=response.error.message if response.error else None,
                )
                continue

            events = (response.data or {}).get("events") or []
            if not events:
                continue

            latest = events[0]
            if not latest.get("status"):
                continue
            changed = current_domain.process(
                RecordTrackingEvent(
                    order_id=str(order.id),
                    status=latest["status"],
                    description=latest.get("description"),
                    event_date=latest.get("event_date"),
                    branch_name=latest.get("branch_name"),
                ),
                asynchronous=False,
            )
            if changed:
                result.updated += 1
                result.statuses[str(order.id)] = map_carrier_status(latest["status"]).value
                if is_notifiable(latest.get("status")):
                    result.notified += 1
        except Exception as exc:
            result.errors += 1
            logger.error(
                "Tracking update failed",
                order_id=str(order.id),
                tracking_number=order.tracking_number,
                error=str(exc),
                exc_info=True,
            )

    logger.info("Tracking sweep complete", **result.as_dict())
    return result
