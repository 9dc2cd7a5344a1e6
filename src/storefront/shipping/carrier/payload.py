"""Translation between storefront shapes and Correo Argentino's JSON.

Shared by the HTTP client and the fake adapter so both accept and reject
exactly the same shipments.
"""

from storefront.shipping.carrier.port import CarrierResponse, ShipmentRequest

HOME_DELIVERY = "D"
BRANCH_DELIVERY = "S"

_REQUIRED_ADDRESS_FIELDS = ("street_name", "street_number", "city", "province_code", "postal_code")


def check_shipment(shipment: ShipmentRequest) -> CarrierResponse | None:
    """Return a failure response when the shipment cannot be imported, else None."""
    if shipment.delivery_type == HOME_DELIVERY:
        if not all(getattr(shipment, name) for name in _REQUIRED_ADDRESS_FIELDS):
            return CarrierResponse.fail("MISSING_ADDRESS", "Envío a domicilio requiere dirección completa")
    elif shipment.delivery_type == BRANCH_DELIVERY:
        if not shipment.agency:
            return CarrierResponse.fail("MISSING_AGENCY", "Envío a sucursal requiere código de sucursal")
    else:
        return CarrierResponse.fail(
            "VALIDATION_ERROR",
            f"Tipo de entrega desconocido: {shipment.delivery_type}",
            details={"delivery_type": shipment.delivery_type},
        )
    return None


def _clip(value: str | None) -> str | None:
    # Carrier rejects floor/apartment longer than 3 characters
    return value[:3] if value else value


def import_body(shipment: ShipmentRequest, customer_id: str) -> dict:
    address = None
    if shipment.delivery_type == HOME_DELIVERY:
        address = {
            "streetName": shipment.street_name,
            "streetNumber": shipment.street_number,
            "floor": _clip(shipment.floor),
            "apartment": _clip(shipment.apartment),
            "city": shipment.city,
            "provinceCode": shipment.province_code,
            "postalCode": shipment.postal_code,
        }

    return {
        "customerId": customer_id,
        "extOrderId": shipment.order_id,
        "orderNumber": shipment.order_id,
        "recipient": {
            "name": shipment.recipient_name,
            "phone": shipment.recipient_phone or "",
            "email": shipment.recipient_email,
        },
        "shipping": {
            "deliveryType": shipment.delivery_type,
            "productType": "CP",
            "agency": shipment.agency if shipment.delivery_type == BRANCH_DELIVERY else None,
            "address": address,
            "weight": round(shipment.weight),
            "declaredValue": shipment.declared_value,
            "height": round(shipment.height),
            "length": round(shipment.length),
            "width": round(shipment.width),
            **shipment.extra,
        },
    }


def parse_import(data: dict | None) -> dict:
    data = data or {}
    return {
        "tracking_number": data.get("trackingNumber"),
        "shipment_id": data.get("shipmentId") or data.get("id"),
        "created_at": data.get("createdAt"),
    }


def parse_tracking(data: dict | list | None, shipping_id: str) -> dict:
    """Normalise a tracking payload; events keep the carrier's newest-first order."""
    if isinstance(data, list):
        data = data[0] if data else {}
    data = data or {}
    events = [
        {
            "status": event.get("status"),
            "description": event.get("eventDescription") or event.get("event"),
            "event_date": event.get("eventDate") or event.get("date"),
            "branch_name": event.get("branchName") or event.get("branch"),
            "branch_code": event.get("branchCode"),
        }
        for event in data.get("events") or []
    ]
    return {
        "shipping_id": data.get("shippingId") or shipping_id,
        "status": data.get("status"),
        "events": events,
    }


def parse_agency(agency: dict) -> dict:
    address = (agency.get("location") or {}).get("address") or {}
    services = agency.get("services") or {}
    return {
        "code": agency.get("code"),
        "name": agency.get("name"),
        "phone": agency.get("phone"),
        "street_name": address.get("streetName"),
        "street_number": address.get("streetNumber"),
        "city": address.get("city") or address.get("locality"),
        "province_code": address.get("provinceCode"),
        "postal_code": address.get("postalCode"),
        "pickup_available": bool(services.get("pickupAvailability")),
    }
