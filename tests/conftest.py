import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def run_around_tests(storefront_bed):
    """Push the domain context before each test, wipe all stores after."""
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "CRON_SECRET",
        "MP_WEBHOOK_SECRET",
        "PAYMENT_ALLOW_UNSIGNED_WEBHOOKS",
        "CORREO_ARGENTINO_WEBHOOK_SECRET",
        "ORDER_PAYMENT_WINDOW_MINUTES",
        "RATE_LIMIT_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TRACKING_POLL_DELAY_SECONDS", "0")


@pytest.fixture(autouse=True)
def carrier():
    from storefront.shipping.carrier import reset_carrier, set_carrier
    from storefront.shipping.carrier.fake_adapter import FakeCarrier

    fake = FakeCarrier()
    set_carrier(fake)
    yield fake
    reset_carrier()


@pytest.fixture(autouse=True)
def gateway():
    from storefront.payments.gateway import reset_gateway, set_gateway
    from storefront.payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def mailer():
    from storefront.notifications.channel import reset_mailer, set_mailer
    from storefront.notifications.channel.fake_email import FakeEmailAdapter

    fake = FakeEmailAdapter()
    set_mailer(fake)
    yield fake
    reset_mailer()


@pytest.fixture(autouse=True)
def rate_limits():
    from storefront.api.rate_limit import InMemoryRateLimitStore, reset_rate_limit_store, set_rate_limit_store

    store = InMemoryRateLimitStore()
    set_rate_limit_store(store)
    yield store
    reset_rate_limit_store()


@pytest.fixture()
def app():
    from fastapi import FastAPI, Request

    from storefront.api import ROUTERS, register_exception_handlers
    from storefront.domain import storefront

    app = FastAPI()

    @app.middleware("http")
    async def _domain_context(request: Request, call_next):
        with storefront.domain_context():
            return await call_next(request)

    for router in ROUTERS:
        app.include_router(router)
    register_exception_handlers(app)
    return app


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


# ---------------------------------------------------------------------------
# Catalog builders shared by every test package
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    from protean import current_domain

    from storefront.catalogue.management import AddProduct, AddVariant

    counter = {"n": 0}

    def _make(name="Remera", price=1000.0, stock=10, variants=(), **kwargs):
        counter["n"] += 1
        kwargs.setdefault("slug", f"{name.lower()}-{counter['n']}")
        product_id = current_domain.process(
            AddProduct(name=name, price=price, stock=stock, **kwargs),
            asynchronous=False,
        )
        for color, size, variant_stock in variants:
            current_domain.process(
                AddVariant(product_id=product_id, color=color, size=size, stock=variant_stock),
                asynchronous=False,
            )
        return product_id

    return _make


@pytest.fixture()
def load_product():
    from protean import current_domain

    from storefront.catalogue.product import Product

    def _load(product_id):
        return current_domain.repository_for(Product).get(product_id)

    return _load


@pytest.fixture()
def place_order():
    import json

    from protean import current_domain

    from storefront.ordering.placement import PlaceOrder

    def _place(items, payment_method="transfer", **kwargs):
        return current_domain.process(
            PlaceOrder(
                customer_name=kwargs.pop("customer_name", "Ana Pérez"),
                customer_email=kwargs.pop("customer_email", "ana@example.com"),
                items=json.dumps(items),
                payment_method=payment_method,
                **kwargs,
            ),
            asynchronous=False,
        )

    return _place


@pytest.fixture()
def load_order():
    from storefront.ordering.queries import load_order as _load

    return _load
