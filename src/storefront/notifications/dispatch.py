"""Best-effort email dispatch.

A failed notification is logged and reported to the caller, never raised:
the business change that triggered it has already been committed.
"""

import structlog

from storefront.notifications.channel import get_mailer
from storefront.notifications.templates import EmailKind, render

logger = structlog.get_logger(__name__)


def send_best_effort(kind: EmailKind, to: str | None, context: dict) -> bool:
    """Render and send one email. Returns True only if the adapter accepted it."""
    if not to:
        logger.warning("Skipping email without recipient", kind=kind.value, **_ids(context))
        return False

    try:
        content = render(kind, context)
        result = get_mailer().send(to=to, subject=content["subject"], body=content["body"])
    except Exception as exc:
        logger.error("Email dispatch crashed", kind=kind.value, to=to, error=str(exc), exc_info=True, **_ids(context))
        return False

    if result.get("status") != "sent":
        logger.warning("Email dispatch failed", kind=kind.value, to=to, error=result.get("error"), **_ids(context))
        return False

    logger.info("Email sent", kind=kind.value, to=to, message_id=result.get("message_id"), **_ids(context))
    return True


def _ids(context: dict) -> dict:
    return {k: context[k] for k in ("order_id", "period_id") if context.get(k)}
