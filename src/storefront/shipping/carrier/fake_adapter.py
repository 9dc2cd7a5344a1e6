"""Fake carrier adapter: deterministic carrier for testing and development.

Tracking histories can be scripted per shipping id with ``set_tracking``;
unknown ids report a generic in-transit history.
"""

from uuid import uuid4

from storefront.shipping.carrier.payload import check_shipment
from storefront.shipping.carrier.port import CarrierPort, CarrierResponse, ShipmentRequest
from storefront.shipping.provinces import validate_province_code


class FakeCarrier(CarrierPort):
    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Carrier unavailable"
        self.failing_ids: set[str] = set()
        self.tracking: dict[str, list[dict]] = {}
        self.agencies: list[dict] = [
            {
                "code": "B0001",
                "name": "Sucursal Tigre",
                "phone": None,
                "street_name": "Av. Cazón",
                "street_number": "1100",
                "city": "Tigre",
                "province_code": "B",
                "postal_code": "1648",
                "pickup_available": True,
            },
            {
                "code": "C0001",
                "name": "Sucursal Palermo",
                "phone": None,
                "street_name": "Av. Santa Fe",
                "street_number": "3400",
                "city": "CABA",
                "province_code": "C",
                "postal_code": "1425",
                "pickup_available": True,
            },
        ]
        self.imported: list[ShipmentRequest] = []
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool = True, failure_reason: str = "Carrier unavailable"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def set_tracking(self, shipping_id: str, events: list[dict]) -> None:
        """Script the history for a shipment, newest event first."""
        self.tracking[shipping_id] = events

    def fail_tracking_for(self, shipping_id: str) -> None:
        self.failing_ids.add(shipping_id)

    def authenticate(self) -> CarrierResponse:
        self.calls.append({"method": "authenticate"})
        if not self.should_succeed:
            return CarrierResponse.fail("AUTH_FAILED", self.failure_reason)
        return CarrierResponse.ok({"token": f"fake-{uuid4().hex[:8]}", "expires": None})

    def validate_user(self) -> CarrierResponse:
        self.calls.append({"method": "validate_user"})
        if not self.should_succeed:
            return CarrierResponse.fail("AUTH_FAILED", self.failure_reason)
        return CarrierResponse.ok({"customer_id": "fake-customer"})

    def get_agencies(self, province_code: str, postal_code: str | None = None) -> CarrierResponse:
        province_code = validate_province_code(province_code)
        self.calls.append({"method": "get_agencies", "province_code": province_code, "postal_code": postal_code})
        if not self.should_succeed:
            return CarrierResponse.fail("AGENCIES_ERROR", self.failure_reason)
        agencies = [a for a in self.agencies if a["province_code"] == province_code]
        if postal_code:
            agencies = [a for a in agencies if a["postal_code"] == postal_code] or agencies
        return CarrierResponse.ok(agencies)

    def get_tracking(self, shipping_id: str) -> CarrierResponse:
        self.calls.append({"method": "get_tracking", "shipping_id": shipping_id})
        if not self.should_succeed or shipping_id in self.failing_ids:
            return CarrierResponse.fail("TRACKING_ERROR", self.failure_reason)

        events = self.tracking.get(
            shipping_id,
            [
                {
                    "status": "EN_TRANSITO",
                    "description": "En tránsito",
                    "event_date": "2024-01-02T10:00:00",
                    "branch_name": "CTP Monte Grande",
                    "branch_code": "B9999",
                }
            ],
        )
        return CarrierResponse.ok(
            {
                "shipping_id": shipping_id,
                "status": events[0]["status"] if events else None,
                "events": events,
            }
        )

    def import_shipment(self, shipment: ShipmentRequest) -> CarrierResponse:
        self.calls.append({"method": "import_shipment", "order_id": shipment.order_id})
        rejected = check_shipment(shipment)
        if rejected is not None:
            return rejected
        if not self.should_succeed:
            return CarrierResponse.fail("IMPORT_ERROR", self.failure_reason)

        self.imported.append(shipment)
        return CarrierResponse.ok(
            {
                "tracking_number": f"FAKE{uuid4().hex[:10].upper()}",
                "shipment_id": f"ship-{uuid4().hex[:8]}",
                "created_at": None,
            }
        )
