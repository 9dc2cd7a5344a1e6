"""Payment gateway port (abstract interface).

The webhook flow only trusts what the gateway returns for a payment id, never
the notification body itself.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentInfo:
    """A payment as reported by the processor."""

    payment_id: str
    status: str
    status_detail: str | None = None
    external_reference: str | None = None
    amount: float | None = None


@dataclass(frozen=True)
class PreferenceResult:
    """A hosted checkout session the customer is redirected to."""

    preference_id: str
    init_point: str


class PaymentGatewayError(Exception):
    """The processor could not be reached or answered with an error."""

    def __init__(self, message: str, status: int | None = None, body=None):
        self.status = status
        self.body = body
        super().__init__(message)


class PaymentGateway(ABC):
    @abstractmethod
    def get_payment(self, payment_id: str) -> PaymentInfo:
        """Fetch a payment by id. Raises PaymentGatewayError on failure."""
        ...

    @abstractmethod
    def create_preference(self, items: list[dict], external_reference: str, payer_email: str) -> PreferenceResult:
        """Open a checkout session for an order. Raises PaymentGatewayError on failure."""
        ...
