"""FastAPI endpoints for shipping: rate quotes and the carrier passthrough.

Carrier failures keep the carrier's own message so the admin can act on it.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from storefront.api.errors import error_response
from storefront.api.schemas import Envelope, ShipmentImportRequest, ShippingQuoteRequest, ShippingRatesView
from storefront.settings.store import get_setting
from storefront.shipping.carrier import get_carrier
from storefront.shipping.carrier.port import CarrierResponse, ShipmentRequest
from storefront.shipping.provinces import validate_province_code
from storefront.shipping.rates import calculate_shipping, validate_postal_code

router = APIRouter(prefix="/api/shipping", tags=["shipping"])

_CLIENT_ERROR_CODES = {"MISSING_ADDRESS", "MISSING_AGENCY", "VALIDATION_ERROR"}


def _carrier_result(response: CarrierResponse) -> dict | JSONResponse:
    if response.success:
        return {"success": True, "data": response.data}
    error = response.error
    status = 400 if error.code in _CLIENT_ERROR_CODES else 502
    return error_response(error.message, error.code, status)


def _rates(postal_code: str, weight_kg: float | None) -> Envelope[ShippingRatesView]:
    rates = calculate_shipping(postal_code, weight_kg)
    return Envelope(
        data=ShippingRatesView(
            postal_code=rates.postal_code,
            zone=rates.zone.value,
            options=[option.as_dict() for option in rates.options],
        )
    )


@router.get("/calculate", response_model=Envelope[ShippingRatesView])
async def calculate_get(postal_code: str = "", weight_kg: float | None = None) -> Envelope[ShippingRatesView]:
    return _rates(postal_code, weight_kg)


@router.post("/calculate", response_model=Envelope[ShippingRatesView])
async def calculate_post(body: ShippingQuoteRequest) -> Envelope[ShippingRatesView]:
    return _rates(body.postal_code, body.weight_kg)


@router.get("/options")
async def shipping_options():
    return {"success": True, "data": get_setting("shipping_options")}


@router.get("/agencies")
def agencies(province_code: str, postal_code: str | None = None):
    province = validate_province_code(province_code)
    if postal_code:
        postal_code = validate_postal_code(postal_code)
    return _carrier_result(get_carrier().get_agencies(province, postal_code))


@router.get("/tracking/{shipping_id}")
def tracking(shipping_id: str):
    return _carrier_result(get_carrier().get_tracking(shipping_id))


@router.post("/import", status_code=201)
def import_shipment(body: ShipmentImportRequest):
    return _carrier_result(get_carrier().import_shipment(ShipmentRequest(**body.model_dump())))
