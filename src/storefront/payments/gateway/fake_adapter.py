"""Configurable fake payment gateway for development and testing.

Payments are registered with ``add_payment`` and served back by id, which is
how the webhook tests script the processor's answer.
"""

from uuid import uuid4

from storefront.payments.gateway.port import PaymentGateway, PaymentGatewayError, PaymentInfo, PreferenceResult


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.payments: dict[str, PaymentInfo] = {}
        self.preferences: list[dict] = []
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def add_payment(self, payment_id: str, status: str, external_reference: str, amount: float | None = None) -> None:
        self.payments[payment_id] = PaymentInfo(
            payment_id=payment_id,
            status=status,
            external_reference=external_reference,
            amount=amount,
        )

    def get_payment(self, payment_id: str) -> PaymentInfo:
        self.calls.append({"method": "get_payment", "payment_id": payment_id})
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason, status=503)
        if payment_id not in self.payments:
            raise PaymentGatewayError(f"Payment {payment_id} not found", status=404)
        return self.payments[payment_id]

    def create_preference(self, items: list[dict], external_reference: str, payer_email: str) -> PreferenceResult:
        self.calls.append(
            {
                "method": "create_preference",
                "items": items,
                "external_reference": external_reference,
                "payer_email": payer_email,
            }
        )
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason, status=503)

        preference_id = f"pref-{uuid4().hex[:12]}"
        self.preferences.append({"id": preference_id, "external_reference": external_reference, "items": items})
        return PreferenceResult(
            preference_id=preference_id,
            init_point=f"https://fake-checkout.example.com/{preference_id}",
        )
