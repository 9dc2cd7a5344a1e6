"""Carrier port: abstract interface for the postal carrier integration.

Every operation answers with a CarrierResponse instead of raising, so callers
can surface the carrier's own message to the admin UI.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CarrierError:
    code: str
    message: str
    details: dict | None = None


@dataclass(frozen=True)
class CarrierResponse:
    success: bool
    data: dict | list | None = None
    error: CarrierError | None = None

    @classmethod
    def ok(cls, data: dict | list | None = None) -> "CarrierResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: str, message: str, details: dict | None = None) -> "CarrierResponse":
        return cls(success=False, error=CarrierError(code=code, message=message, details=details))

    def as_dict(self) -> dict:
        result: dict = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = {
                "code": self.error.code,
                "message": self.error.message,
                "details": self.error.details,
            }
        return result


@dataclass(frozen=True)
class ShipmentRequest:
    """An outbound parcel to register with the carrier.

    ``delivery_type`` is "D" for home delivery and "S" for branch pickup.
    Dimensions are in centimetres, weight in grams.
    """

    order_id: str
    delivery_type: str
    recipient_name: str
    recipient_email: str
    recipient_phone: str | None = None
    street_name: str | None = None
    street_number: str | None = None
    floor: str | None = None
    apartment: str | None = None
    city: str | None = None
    province_code: str | None = None
    postal_code: str | None = None
    agency: str | None = None
    weight: float = 1000
    height: float = 10
    width: float = 20
    length: float = 30
    declared_value: float = 0
    extra: dict = field(default_factory=dict)


class CarrierPort(ABC):
    @abstractmethod
    def authenticate(self) -> CarrierResponse:
        """Obtain a bearer token. data: {token, expires}"""
        ...

    @abstractmethod
    def validate_user(self) -> CarrierResponse:
        """Resolve the carrier customer id. data: {customer_id}"""
        ...

    @abstractmethod
    def get_agencies(self, province_code: str, postal_code: str | None = None) -> CarrierResponse:
        """List branches in a province. data: [{code, name, address, ...}]"""
        ...

    @abstractmethod
    def get_tracking(self, shipping_id: str) -> CarrierResponse:
        """Tracking history, newest event first.

        data: {shipping_id, status, events: [{status, description, event_date, branch_name, branch_code}]}
        """
        ...

    @abstractmethod
    def import_shipment(self, shipment: ShipmentRequest) -> CarrierResponse:
        """Register a shipment. data: {tracking_number, ...}"""
        ...
