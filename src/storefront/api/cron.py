"""Scheduled jobs exposed over HTTP for the platform scheduler.

Both routes require ``Authorization: Bearer <CRON_SECRET>`` or
``?secret=<CRON_SECRET>``. Without a configured secret nothing is accepted.
"""

import hmac

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException

from storefront import config
from storefront.ordering.cancellation import cancel_expired_orders
from storefront.shipping.tracking import poll_tracking

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def require_cron_secret(authorization: str = Header(default=""), secret: str | None = None) -> None:
    expected = config.cron_secret()
    if not expected:
        logger.error("CRON_SECRET is not configured; rejecting cron call")
        raise HTTPException(status_code=401, detail="No autorizado")

    scheme, _, token = authorization.partition(" ")
    provided = token.strip() if scheme.lower() == "bearer" else (secret or "")
    if not hmac.compare_digest(expected, provided):
        raise HTTPException(status_code=401, detail="No autorizado")


@router.get("/tracking-notifications", dependencies=[Depends(require_cron_secret)])
def tracking_notifications():
    result = poll_tracking()
    return {"success": True, "data": result.as_dict()}


@router.get("/orders", dependencies=[Depends(require_cron_secret)])
def expire_orders():
    result = cancel_expired_orders()
    return {"success": True, "data": result.as_dict()}
