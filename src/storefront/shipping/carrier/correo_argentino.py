"""Correo Argentino (MiCorreo REST API) carrier adapter.

One HTTP attempt per call, no retries. The bearer token lives in the injected
TokenCache and is reused until the carrier answers 401, which triggers a
single re-authentication.
"""

from datetime import UTC, datetime

import requests
import structlog

from storefront import config
from storefront.shipping.carrier.payload import (
    check_shipment,
    import_body,
    parse_agency,
    parse_import,
    parse_tracking,
)
from storefront.shipping.carrier.port import CarrierPort, CarrierResponse, ShipmentRequest
from storefront.shipping.provinces import validate_province_code
from storefront.shipping.token_cache import InMemoryTokenCache, TokenCache

logger = structlog.get_logger(__name__)

BASE_URLS = {
    "prod": "https://api.correoargentino.com.ar/micorreo/v1",
    "test": "https://apitest.correoargentino.com.ar/micorreo/v1",
}

DEFAULT_TOKEN_TTL = 12 * 60 * 60
CUSTOMER_ID_TTL = 24 * 60 * 60


class CorreoArgentinoClient(CarrierPort):
    def __init__(
        self,
        username: str,
        password: str,
        customer_id: str | None = None,
        environment: str = "test",
        token_cache: TokenCache | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.username = username
        self.password = password
        self.base_url = BASE_URLS.get(environment, BASE_URLS["test"])
        self.cache = token_cache or InMemoryTokenCache()
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else config.http_timeout()
        self._token_key = f"correo-argentino:token:{username}"
        self._customer_key = f"correo-argentino:customer:{username}"
        if customer_id:
            self.cache.set(self._customer_key, customer_id, CUSTOMER_ID_TTL)

    @classmethod
    def from_env(cls, token_cache: TokenCache | None = None) -> "CorreoArgentinoClient":
        settings = config.carrier_settings()
        return cls(
            username=settings.username,
            password=settings.password,
            customer_id=settings.customer_id,
            environment=settings.environment,
            token_cache=token_cache,
        )

    # -------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------
    def authenticate(self) -> CarrierResponse:
        try:
            response = self.session.request(
                "POST",
                f"{self.base_url}/token",
                auth=(self.username, self.password),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Carrier authentication request failed", error=str(exc))
            return CarrierResponse.fail("AUTH_FAILED", "No se pudo autenticar con Correo Argentino", {"error": str(exc)})

        body = _json(response)
        token = body.get("token") if isinstance(body, dict) else None
        if not response.ok or not token:
            logger.warning("Carrier rejected credentials", status=response.status_code)
            return CarrierResponse.fail(
                "AUTH_FAILED",
                _carrier_message(body) or "No se pudo autenticar con Correo Argentino",
                {"status": response.status_code},
            )

        self.cache.set(self._token_key, token, _ttl_from(body.get("expires")))
        return CarrierResponse.ok({"token": token, "expires": body.get("expires")})

    def _token(self) -> str | CarrierResponse:
        token = self.cache.get(self._token_key)
        if token:
            return token
        result = self.authenticate()
        if not result.success:
            return result
        return result.data["token"]

    def validate_user(self) -> CarrierResponse:
        customer_id = self.cache.get(self._customer_key)
        if customer_id:
            return CarrierResponse.ok({"customer_id": customer_id})

        result = self._request(
            "POST",
            "/users/validate",
            json={"email": self.username, "password": self.password},
            error_code="AUTH_FAILED",
            error_message="No se pudo validar el usuario de Correo Argentino",
        )
        if not result.success:
            return result
        customer_id = (result.data or {}).get("customerId")
        if not customer_id:
            return CarrierResponse.fail("AUTH_FAILED", "Correo Argentino no devolvió un customerId")
        self.cache.set(self._customer_key, customer_id, CUSTOMER_ID_TTL)
        return CarrierResponse.ok({"customer_id": customer_id})

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def get_agencies(self, province_code: str, postal_code: str | None = None) -> CarrierResponse:
        province_code = validate_province_code(province_code)
        customer = self.validate_user()
        if not customer.success:
            return customer

        result = self._request(
            "GET",
            "/agencies",
            params={"customerId": customer.data["customer_id"], "provinceCode": province_code},
            error_code="AGENCIES_ERROR",
            error_message="Error obteniendo sucursales",
        )
        if not result.success:
            return result

        agencies = [parse_agency(a) for a in (result.data or [])]
        if postal_code:
            agencies = [a for a in agencies if a["postal_code"] == postal_code] or agencies
        return CarrierResponse.ok(agencies)

    def get_tracking(self, shipping_id: str) -> CarrierResponse:
        result = self._request(
            "GET",
            "/shipping/tracking",
            params={"shippingId": shipping_id},
            error_code="TRACKING_ERROR",
            error_message="Error obteniendo tracking",
        )
        if not result.success:
            return result
        return CarrierResponse.ok(parse_tracking(result.data, shipping_id))

    def import_shipment(self, shipment: ShipmentRequest) -> CarrierResponse:
        rejected = check_shipment(shipment)
        if rejected is not None:
            return rejected

        customer = self.validate_user()
        if not customer.success:
            return customer

        logger.info("Importing shipment", order_id=shipment.order_id, delivery_type=shipment.delivery_type)
        result = self._request(
            "POST",
            "/shipping/import",
            json=import_body(shipment, customer.data["customer_id"]),
            error_code="IMPORT_ERROR",
            error_message="Error importando envío",
        )
        if not result.success:
            return result
        return CarrierResponse.ok(parse_import(result.data))

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        error_code: str,
        error_message: str,
        params: dict | None = None,
        json: dict | None = None,
        _reauthenticated: bool = False,
    ) -> CarrierResponse:
        token = self._token()
        if isinstance(token, CarrierResponse):
            return token

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                headers={"Authorization": f"Bearer {token}"},
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Carrier request failed", path=path, error=str(exc))
            return CarrierResponse.fail(error_code, error_message, {"error": str(exc)})

        if response.status_code == 401 and not _reauthenticated:
            logger.info("Carrier token rejected, re-authenticating", path=path)
            self.cache.invalidate(self._token_key)
            return self._request(method, path, error_code, error_message, params, json, _reauthenticated=True)

        body = _json(response)
        if not response.ok:
            logger.warning("Carrier returned an error", path=path, status=response.status_code)
            return CarrierResponse.fail(
                error_code,
                _carrier_message(body) or error_message,
                {"status": response.status_code, "body": body},
            )
        return CarrierResponse.ok(body)


def _json(response: requests.Response):
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return {"message": response.text}


def _carrier_message(body) -> str | None:
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None


def _ttl_from(expires: str | None) -> float:
    if not expires:
        return DEFAULT_TOKEN_TTL
    try:
        expires_at = datetime.fromisoformat(expires)
    except ValueError:
        return DEFAULT_TOKEN_TTL
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    return max((expires_at - datetime.now(UTC)).total_seconds(), 0)
