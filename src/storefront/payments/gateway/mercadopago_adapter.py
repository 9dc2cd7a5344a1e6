"""MercadoPago REST adapter."""

import requests
import structlog

from storefront import config
from storefront.payments.gateway.port import PaymentGateway, PaymentGatewayError, PaymentInfo, PreferenceResult

logger = structlog.get_logger(__name__)

API_BASE = "https://api.mercadopago.com"


class MercadoPagoGateway(PaymentGateway):
    def __init__(self, access_token: str, session: requests.Session | None = None, timeout: float | None = None):
        if not access_token:
            raise ValueError("MercadoPago access token is required")
        self.access_token = access_token
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else config.http_timeout()

    @classmethod
    def from_env(cls) -> "MercadoPagoGateway":
        return cls(access_token=config.payment_access_token())

    def _call(self, method: str, path: str, json: dict | None = None) -> dict:
        try:
            response = self.session.request(
                method,
                f"{API_BASE}{path}",
                headers={"Authorization": f"Bearer {self.access_token}"},
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("MercadoPago request failed", path=path, error=str(exc))
            raise PaymentGatewayError(str(exc)) from exc

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {"message": response.text}

        if not response.ok:
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning("MercadoPago returned an error", path=path, status=response.status_code)
            raise PaymentGatewayError(message or f"MercadoPago error {response.status_code}", response.status_code, body)
        return body

    def get_payment(self, payment_id: str) -> PaymentInfo:
        body = self._call("GET", f"/v1/payments/{payment_id}")
        return PaymentInfo(
            payment_id=str(body.get("id", payment_id)),
            status=body.get("status") or "",
            status_detail=body.get("status_detail"),
            external_reference=body.get("external_reference"),
            amount=body.get("transaction_amount"),
        )

    def create_preference(self, items: list[dict], external_reference: str, payer_email: str) -> PreferenceResult:
        body = self._call(
            "POST",
            "/checkout/preferences",
            json={
                "items": items,
                "external_reference": external_reference,
                "payer": {"email": payer_email},
            },
        )
        return PreferenceResult(preference_id=body["id"], init_point=body["init_point"])
