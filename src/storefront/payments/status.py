from enum import Enum


class PaymentOutcome(Enum):
    PAID = "PAID"
    PENDING = "PENDING"
    FAILED = "FAILED"


_OUTCOME_BY_PROVIDER_STATUS = {
    "approved": PaymentOutcome.PAID,
    "authorized": PaymentOutcome.PAID,
    "pending": PaymentOutcome.PENDING,
    "in_process": PaymentOutcome.PENDING,
    "in_mediation": PaymentOutcome.PENDING,
    "rejected": PaymentOutcome.FAILED,
    "cancelled": PaymentOutcome.FAILED,
    "refunded": PaymentOutcome.FAILED,
    "charged_back": PaymentOutcome.FAILED,
}


def map_payment_status(provider_status: str | None) -> PaymentOutcome:
    """Internal outcome for a processor status; anything unrecognised stays PENDING."""
    return _OUTCOME_BY_PROVIDER_STATUS.get((provider_status or "").strip().lower(), PaymentOutcome.PENDING)
