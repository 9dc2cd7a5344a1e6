"""Domain tests for carrier statuses, provinces, payload translation and the token cache."""

import pytest

from storefront.errors import ValidationError
from storefront.ordering.order import OrderStatus
from storefront.shipping.carrier.payload import check_shipment, import_body, parse_tracking
from storefront.shipping.carrier.port import ShipmentRequest
from storefront.shipping.provinces import validate_province_code
from storefront.shipping.token_cache import InMemoryTokenCache
from storefront.shipping.tracking_status import is_notifiable, map_carrier_status


class TestTrackingStatus:
    def test_delivered(self):
        assert map_carrier_status("entregado") == OrderStatus.DELIVERED

    def test_unknown_status_is_in_flight(self):
        assert map_carrier_status("ALGO_NUEVO") == OrderStatus.PROCESSED

    @pytest.mark.parametrize("status", ["EN_TRANSITO", "en sucursal", "ENTREGADO"])
    def test_notifiable(self, status):
        assert is_notifiable(status)

    def test_distribution_is_not_notifiable(self):
        assert not is_notifiable("EN_DISTRIBUCION")


class TestProvinces:
    def test_valid_code(self):
        assert validate_province_code(" b ") == "B"

    @pytest.mark.parametrize("code", ["I", "BA", "", None])
    def test_invalid_code(self, code):
        with pytest.raises(ValidationError):
            validate_province_code(code)


def _shipment(**overrides):
    values = {
        "order_id": "o-1",
        "delivery_type": "D",
        "recipient_name": "Ana",
        "recipient_email": "ana@example.com",
        "street_name": "Mitre",
        "street_number": "100",
        "floor": "10mo",
        "apartment": "Depto B",
        "city": "Tigre",
        "province_code": "B",
        "postal_code": "1648",
        "weight": 1250.4,
    }
    values.update(overrides)
    return ShipmentRequest(**values)


class TestPayload:
    def test_home_delivery_needs_address(self):
        rejected = check_shipment(_shipment(street_name=None))
        assert rejected.error.code == "MISSING_ADDRESS"

    def test_branch_delivery_needs_agency(self):
        rejected = check_shipment(_shipment(delivery_type="S"))
        assert rejected.error.code == "MISSING_AGENCY"

    def test_unknown_delivery_type(self):
        assert check_shipment(_shipment(delivery_type="X")).error.code == "VALIDATION_ERROR"

    def test_complete_shipment_passes(self):
        assert check_shipment(_shipment()) is None

    def test_import_body_clips_floor_and_apartment(self):
        body = import_body(_shipment(), "cust-1")
        assert body["customerId"] == "cust-1"
        address = body["shipping"]["address"]
        assert address["floor"] == "10m"
        assert address["apartment"] == "Dep"
        assert body["shipping"]["weight"] == 1250

    def test_parse_tracking_keeps_newest_first(self):
        parsed = parse_tracking(
            [
                {
                    "shippingId": "TN-1",
                    "events": [
                        {"status": "ENTREGADO", "eventDescription": "Entregado", "eventDate": "2024-01-03"},
                        {"status": "EN_TRANSITO", "eventDescription": "En camino", "eventDate": "2024-01-02"},
                    ],
                }
            ],
            "TN-1",
        )
        assert [e["status"] for e in parsed["events"]] == ["ENTREGADO", "EN_TRANSITO"]
        assert parsed["events"][0]["description"] == "Entregado"


class TestTokenCache:
    def test_expiry(self):
        now = [100.0]
        cache = InMemoryTokenCache(clock=lambda: now[0])
        cache.set("k", "token", ttl_seconds=10)
        assert cache.get("k") == "token"
        now[0] = 110.0
        assert cache.get("k") is None

    def test_invalidate(self):
        cache = InMemoryTokenCache()
        cache.set("k", "token", ttl_seconds=60)
        cache.invalidate("k")
        assert cache.get("k") is None
