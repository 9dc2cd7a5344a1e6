"""Integration tests for the MercadoPago webhook endpoint."""

import pytest

from storefront.payments.signature import sign

SECRET = "mp-secret"


@pytest.fixture()
def webhook_secret(monkeypatch):
    monkeypatch.setenv("MP_WEBHOOK_SECRET", SECRET)
    return SECRET


@pytest.fixture()
def order_id(make_product, place_order):
    product_id = make_product(stock=5)
    return place_order([{"product_id": product_id, "quantity": 1}], payment_method="mercadopago")


def _signed_headers(data_id, request_id="req-1", ts="1700000000", secret=SECRET):
    return {"x-signature": f"ts={ts},v1={sign(secret, data_id, request_id, ts)}", "x-request-id": request_id}


def _notification(data_id, topic="payment"):
    return {"type": topic, "action": "payment.updated", "data": {"id": data_id}}


class TestMercadoPagoWebhook:
    def test_signed_notification_is_applied(self, client, webhook_secret, order_id, gateway, load_order):
        gateway.add_payment("777", "approved", external_reference=order_id)

        response = client.post("/api/webhooks/mercadopago", json=_notification("777"), headers=_signed_headers("777"))

        assert response.status_code == 200
        assert response.json()["data"]["processed"] is True
        assert load_order(order_id).status == "PENDING_PAYMENT"

    def test_data_id_from_query_string(self, client, webhook_secret, order_id, gateway, load_order):
        gateway.add_payment("778", "approved", external_reference=order_id)

        response = client.post(
            "/api/webhooks/mercadopago",
            params={"data.id": "778", "type": "payment"},
            json={},
            headers=_signed_headers("778"),
        )

        assert response.status_code == 200
        assert load_order(order_id).status == "PENDING_PAYMENT"

    def test_bad_signature_is_rejected(self, client, webhook_secret, order_id, gateway, load_order):
        gateway.add_payment("777", "approved", external_reference=order_id)

        response = client.post(
            "/api/webhooks/mercadopago",
            json=_notification("777"),
            headers=_signed_headers("777", secret="forged"),
        )

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"
        assert load_order(order_id).status == "PENDING"
        assert not any(c["method"] == "get_payment" for c in gateway.calls)

    def test_missing_secret_fails_closed(self, client, order_id, gateway, load_order):
        gateway.add_payment("777", "approved", external_reference=order_id)

        response = client.post("/api/webhooks/mercadopago", json=_notification("777"), headers=_signed_headers("777"))

        assert response.status_code == 401
        assert load_order(order_id).status == "PENDING"

    def test_unsigned_allowed_in_development(self, client, monkeypatch, order_id, gateway, load_order):
        monkeypatch.setenv("PAYMENT_ALLOW_UNSIGNED_WEBHOOKS", "true")
        gateway.add_payment("777", "approved", external_reference=order_id)

        response = client.post("/api/webhooks/mercadopago", json=_notification("777"))

        assert response.status_code == 200
        assert load_order(order_id).status == "PENDING_PAYMENT"

    def test_other_topics_are_ignored(self, client, webhook_secret, gateway):
        response = client.post(
            "/api/webhooks/mercadopago",
            json=_notification("55", topic="merchant_order"),
            headers=_signed_headers("55"),
        )

        assert response.status_code == 200
        assert response.json()["data"]["processed"] is False
        assert gateway.calls == []

    def test_gateway_failure_is_502(self, client, webhook_secret, gateway):
        gateway.configure(should_succeed=False)

        response = client.post("/api/webhooks/mercadopago", json=_notification("9"), headers=_signed_headers("9"))

        assert response.status_code == 502
        assert response.json()["code"] == "EXTERNAL_SERVICE_ERROR"
