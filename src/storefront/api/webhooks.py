"""Inbound webhooks: payment processor and postal carrier notifications."""

import hmac

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from protean.utils.globals import current_domain

from storefront import config
from storefront.api.rate_limit import PAYMENT_WEBHOOK, rate_limit
from storefront.api.schemas import CarrierWebhookRequest, Envelope, PaymentNotificationRequest, WebhookResult
from storefront.ordering.queries import find_by_tracking_number
from storefront.payments.signature import verify_signature
from storefront.payments.webhook import ProcessPaymentNotification
from storefront.shipping.tracking import RecordTrackingEvent

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@router.post("/mercadopago", response_model=Envelope[WebhookResult])
def mercadopago_webhook(
    request: Request,
    body: PaymentNotificationRequest | None = None,
    x_signature: str = Header(default=""),
    x_request_id: str = Header(default=""),
    within_limit: bool = Depends(rate_limit(PAYMENT_WEBHOOK, reject=False)),
) -> Envelope[WebhookResult]:
    """Apply a payment notification after checking its signature.

    Over the rate limit the notification is acknowledged without being applied
    so the processor does not retry into the same limit.
    """
    if not within_limit:
        return Envelope(data=WebhookResult(processed=False, detail={"reason": "rate_limited"}))

    body = body or PaymentNotificationRequest()
    data_id = request.query_params.get("data.id") or str((body.data or {}).get("id") or "") or None
    topic = body.type or request.query_params.get("type") or request.query_params.get("topic")

    if not verify_signature(config.payment_webhook_secret(), x_signature, x_request_id, data_id):
        if not config.allow_unsigned_webhooks():
            raise HTTPException(status_code=401, detail="Firma de webhook inválida")
        logger.warning("Accepting unsigned payment webhook", data_id=data_id)

    if topic != "payment" or not data_id:
        logger.info("Ignoring payment notification", topic=topic, data_id=data_id)
        return Envelope(data=WebhookResult(processed=False))

    result = current_domain.process(ProcessPaymentNotification(payment_id=data_id), asynchronous=False)
    return Envelope(data=WebhookResult(processed=True, detail=result))


@router.post("/correo-argentino", response_model=Envelope[WebhookResult])
def correo_argentino_webhook(
    body: CarrierWebhookRequest,
    x_webhook_secret: str = Header(default=""),
) -> Envelope[WebhookResult]:
    """Record a pushed tracking event; a delivery event closes the order."""
    secret = config.carrier_settings().webhook_secret
    if not secret or not hmac.compare_digest(secret, x_webhook_secret):
        raise HTTPException(status_code=401, detail="Secreto de webhook inválido")

    order = find_by_tracking_number(body.tracking_number)
    changed = current_domain.process(
        RecordTrackingEvent(
            order_id=str(order.id),
            status=body.status,
            description=body.event_description,
            event_date=body.event_date,
            branch_name=body.branch_name,
            advance_status=True,
        ),
        asynchronous=False,
    )
    logger.info(
        "Carrier webhook processed",
        order_id=str(order.id),
        tracking_number=body.tracking_number,
        status=body.status,
        changed=changed,
    )
    return Envelope(data=WebhookResult(processed=bool(changed), detail={"order_id": str(order.id)}))
