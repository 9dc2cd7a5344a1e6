"""Integration tests for the per-client request limits on public endpoints."""

import pytest

from storefront.api.rate_limit import PAYMENT_WEBHOOK, InMemoryRateLimitStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture()
def clock(rate_limits):
    from storefront.api.rate_limit import set_rate_limit_store

    fake = FakeClock()
    set_rate_limit_store(InMemoryRateLimitStore(clock=fake))
    return fake


def _order_body(product_id):
    return {
        "customer_name": "Ana Pérez",
        "customer_email": "ana@example.com",
        "items": [{"product_id": product_id, "quantity": 1}],
        "payment_method": "cash",
    }


class TestInMemoryStore:
    def test_counts_within_window_then_restarts(self):
        clock = FakeClock()
        store = InMemoryRateLimitStore(clock=clock)

        assert store.hit("k", 60).count == 1
        clock.now += 30
        hit = store.hit("k", 60)
        assert hit.count == 2
        assert hit.retry_after == 30

        clock.now += 30
        assert store.hit("k", 60).count == 1

    def test_keys_are_independent(self):
        store = InMemoryRateLimitStore(clock=FakeClock())
        store.hit("a", 60)
        store.hit("a", 60)
        assert store.hit("b", 60).count == 1

    def test_clear(self):
        store = InMemoryRateLimitStore(clock=FakeClock())
        store.hit("a", 60)
        store.clear()
        assert store.hit("a", 60).count == 1


class TestPlaceOrderLimit:
    def test_sixth_order_in_a_minute_is_rejected(self, client, make_product, clock):
        product_id = make_product(stock=20)
        for _ in range(5):
            assert client.post("/api/orders", json=_order_body(product_id)).status_code == 201

        response = client.post("/api/orders", json=_order_body(product_id))

        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"
        assert response.json()["status"] == 429
        assert response.headers["Retry-After"] == "60"

        clock.now += 61
        assert client.post("/api/orders", json=_order_body(product_id)).status_code == 201

    def test_limit_is_per_client(self, client, make_product, clock):
        product_id = make_product(stock=20)
        headers = {"x-forwarded-for": "10.0.0.1"}
        for _ in range(5):
            client.post("/api/orders", json=_order_body(product_id), headers=headers)

        blocked = client.post("/api/orders", json=_order_body(product_id), headers=headers)
        other = client.post(
            "/api/orders", json=_order_body(product_id), headers={"x-forwarded-for": "10.0.0.2, 1.1.1.1"}
        )

        assert blocked.status_code == 429
        assert other.status_code == 201

    def test_rejected_request_places_nothing(self, client, make_product, load_product, clock):
        product_id = make_product(stock=20)
        for _ in range(5):
            client.post("/api/orders", json=_order_body(product_id))

        client.post("/api/orders", json=_order_body(product_id))

        assert load_product(product_id).stock == 15

    def test_can_be_switched_off(self, client, make_product, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
        product_id = make_product(stock=20)

        statuses = {client.post("/api/orders", json=_order_body(product_id)).status_code for _ in range(7)}

        assert statuses == {201}


class TestProductListingLimit:
    def test_listing_is_limited(self, client, clock):
        for _ in range(50):
            assert client.get("/api/products").status_code == 200

        response = client.get("/api/products")
        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"

    def test_other_routes_share_no_budget(self, client, clock):
        for _ in range(50):
            client.get("/api/products")

        assert client.get("/api/shipping/options").status_code == 200


class TestPaymentWebhookLimit:
    def test_over_limit_is_acknowledged_without_processing(self, client, monkeypatch, gateway, rate_limits):
        monkeypatch.setenv("PAYMENT_ALLOW_UNSIGNED_WEBHOOKS", "true")
        for _ in range(PAYMENT_WEBHOOK.limit):
            rate_limits.hit(f"{PAYMENT_WEBHOOK.key}:testclient", PAYMENT_WEBHOOK.window_seconds)

        response = client.post(
            "/api/webhooks/mercadopago",
            json={"type": "payment", "action": "payment.updated", "data": {"id": "777"}},
        )

        assert response.status_code == 200
        assert response.json()["data"]["processed"] is False
        assert response.json()["data"]["detail"] == {"reason": "rate_limited"}
        assert gateway.calls == []

