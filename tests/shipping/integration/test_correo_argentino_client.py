"""Integration tests for the Correo Argentino client against a mocked HTTP session."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from storefront.shipping.carrier.correo_argentino import BASE_URLS, CorreoArgentinoClient
from storefront.shipping.carrier.port import ShipmentRequest
from storefront.shipping.token_cache import InMemoryTokenCache


def _response(status, body=None):
    response = requests.Response()
    response.status_code = status
    response._content = json.dumps(body).encode() if body is not None else b""
    return response


@pytest.fixture()
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture()
def client(session):
    return CorreoArgentinoClient(
        username="rastuci",
        password="secret",
        customer_id="cust-9",
        environment="test",
        token_cache=InMemoryTokenCache(),
        session=session,
        timeout=5,
    )


def _urls(session):
    return [c.args[1] for c in session.request.call_args_list]


class TestAuthentication:
    def test_token_is_cached(self, client, session):
        session.request.side_effect = [
            _response(200, {"token": "tok-1", "expires": None}),
            _response(200, [{"shippingId": "TN-1", "events": []}]),
            _response(200, [{"shippingId": "TN-1", "events": []}]),
        ]

        client.get_tracking("TN-1")
        client.get_tracking("TN-1")

        assert _urls(session) == [
            f"{BASE_URLS['test']}/token",
            f"{BASE_URLS['test']}/shipping/tracking",
            f"{BASE_URLS['test']}/shipping/tracking",
        ]
        first_call = session.request.call_args_list[0]
        assert first_call.kwargs["auth"] == ("rastuci", "secret")
        assert session.request.call_args_list[1].kwargs["headers"] == {"Authorization": "Bearer tok-1"}

    def test_rejected_credentials(self, client, session):
        session.request.return_value = _response(401, {"message": "Credenciales inválidas"})

        result = client.authenticate()

        assert not result.success
        assert result.error.code == "AUTH_FAILED"
        assert result.error.message == "Credenciales inválidas"

    def test_expired_token_reauthenticates_once(self, client, session):
        session.request.side_effect = [
            _response(200, {"token": "old"}),
            _response(401, {"message": "token expired"}),
            _response(200, {"token": "new"}),
            _response(200, [{"shippingId": "TN-1", "status": "EN_TRANSITO", "events": []}]),
        ]

        result = client.get_tracking("TN-1")

        assert result.success
        assert session.request.call_args_list[3].kwargs["headers"] == {"Authorization": "Bearer new"}

    def test_second_401_is_a_failure(self, client, session):
        session.request.side_effect = [
            _response(200, {"token": "old"}),
            _response(401, {"message": "no"}),
            _response(200, {"token": "new"}),
            _response(401, {"message": "still no"}),
        ]

        result = client.get_tracking("TN-1")

        assert not result.success
        assert session.request.call_count == 4


class TestOperations:
    def test_tracking_is_normalised(self, client, session):
        session.request.side_effect = [
            _response(200, {"token": "tok"}),
            _response(
                200,
                [
                    {
                        "shippingId": "TN-1",
                        "status": "ENTREGADO",
                        "events": [
                            {"status": "ENTREGADO", "eventDescription": "Entregado", "eventDate": "2024-01-03"},
                            {"status": "EN_TRANSITO", "eventDescription": "En viaje", "eventDate": "2024-01-02"},
                        ],
                    }
                ],
            ),
        ]

        result = client.get_tracking("TN-1")

        assert result.data["status"] == "ENTREGADO"
        assert result.data["events"][0]["description"] == "Entregado"
        assert session.request.call_args_list[1].kwargs["params"] == {"shippingId": "TN-1"}

    def test_carrier_error_message_is_kept(self, client, session):
        session.request.side_effect = [
            _response(200, {"token": "tok"}),
            _response(400, {"message": "El envío no existe"}),
        ]

        result = client.get_tracking("TN-404")

        assert result.error.code == "TRACKING_ERROR"
        assert result.error.message == "El envío no existe"
        assert result.error.details["status"] == 400

    def test_network_error(self, client, session):
        session.request.side_effect = [_response(200, {"token": "tok"}), requests.ConnectionError("boom")]

        result = client.get_tracking("TN-1")

        assert result.error.code == "TRACKING_ERROR"
        assert result.error.message == "Error obteniendo tracking"

    def test_agencies_filtered_by_postal_code(self, client, session):
        session.request.side_effect = [
            _response(200, {"token": "tok"}),
            _response(
                200,
                [
                    {"code": "B1", "name": "Tigre", "location": {"address": {"postalCode": "1648", "provinceCode": "B"}}},
                    {"code": "B2", "name": "Pacheco", "location": {"address": {"postalCode": "1617", "provinceCode": "B"}}},
                ],
            ),
        ]

        result = client.get_agencies("b", "1617")

        assert [a["code"] for a in result.data] == ["B2"]
        assert session.request.call_args_list[1].kwargs["params"] == {"customerId": "cust-9", "provinceCode": "B"}

    def test_import_rejects_incomplete_address_without_calling(self, client, session):
        shipment = ShipmentRequest(order_id="o-1", delivery_type="D", recipient_name="Ana", recipient_email="a@x.com")

        result = client.import_shipment(shipment)

        assert result.error.code == "MISSING_ADDRESS"
        session.request.assert_not_called()

    def test_import_shipment(self, client, session):
        session.request.side_effect = [
            _response(200, {"token": "tok"}),
            _response(200, {"trackingNumber": "TN-99", "shipmentId": "s-1"}),
        ]
        shipment = ShipmentRequest(
            order_id="o-1",
            delivery_type="S",
            recipient_name="Ana",
            recipient_email="a@x.com",
            agency="B0001",
        )

        result = client.import_shipment(shipment)

        assert result.data["tracking_number"] == "TN-99"
        sent = session.request.call_args_list[1].kwargs["json"]
        assert sent["customerId"] == "cust-9"
        assert sent["shipping"]["agency"] == "B0001"

    def test_validate_user_fetches_customer_id(self, session):
        client = CorreoArgentinoClient(
            username="rastuci",
            password="secret",
            token_cache=InMemoryTokenCache(),
            session=session,
            timeout=5,
        )
        session.request.side_effect = [
            _response(200, {"token": "tok"}),
            _response(200, {"customerId": "cust-1"}),
        ]

        assert client.validate_user().data == {"customer_id": "cust-1"}
        assert client.validate_user().data == {"customer_id": "cust-1"}
        assert session.request.call_count == 2
