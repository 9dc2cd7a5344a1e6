"""Application tests for checkout: stock validation and reservation."""

import pytest
from protean import current_domain

from storefront.errors import InsufficientStockError, NotFoundError, ValidationError, VariantNotFoundError
from storefront.ordering.order import Order, OrderStatus
from storefront.ordering.stock import CartLine, validate_stock


class TestValidateStock:
    def test_empty_cart(self):
        with pytest.raises(ValidationError) as exc:
            validate_stock([])
        assert exc.value.message == "No hay productos en el carrito"

    def test_unknown_product(self):
        with pytest.raises(NotFoundError) as exc:
            validate_stock([CartLine(product_id="ghost", quantity=1)])
        assert exc.value.message == "Producto no encontrado: ghost"

    def test_invalid_quantity(self, make_product):
        product_id = make_product()
        with pytest.raises(ValidationError):
            validate_stock([CartLine(product_id=product_id, quantity=0)])

    def test_resolves_variant_and_price(self, make_product):
        product_id = make_product(price=1000.0, sale_price=800.0, on_sale=True, variants=[("Rojo", "4", 3)])
        [resolved] = validate_stock([CartLine(product_id=product_id, quantity=2, color="Rojo", size="4")])
        assert resolved.variant.color == "Rojo"
        assert resolved.unit_price == 800.0
        assert resolved.subtotal == 1600.0

    def test_missing_variant(self, make_product):
        product_id = make_product(variants=[("Rojo", "4", 3)])
        with pytest.raises(VariantNotFoundError):
            validate_stock([CartLine(product_id=product_id, quantity=1, color="Azul", size="4")])


class TestPlaceOrder:
    def test_reserves_flat_stock(self, make_product, load_product, place_order, load_order):
        product_id = make_product(stock=5, price=1000.0)
        order_id = place_order([{"product_id": product_id, "quantity": 2}], shipping_cost=500.0)

        order = load_order(order_id)
        assert order.status == OrderStatus.WAITING_TRANSFER_PROOF.value
        assert order.total == 2500.0
        assert order.items[0].product_name == "Remera"
        assert load_product(product_id).stock == 3

    def test_reserves_variant_stock(self, make_product, load_product, place_order):
        product_id = make_product(stock=0, variants=[("Rojo", "4", 3), ("Azul", "6", 1)])
        place_order([{"product_id": product_id, "quantity": 2, "color": "Rojo", "size": "4"}])

        product = load_product(product_id)
        assert product.find_variant("Rojo", "4").stock == 1
        assert product.find_variant("Azul", "6").stock == 1

    def test_insufficient_stock_changes_nothing(self, make_product, load_product, place_order):
        plenty = make_product(name="Buzo", stock=10)
        scarce = make_product(name="Gorro", stock=1)

        with pytest.raises(InsufficientStockError) as exc:
            place_order([{"product_id": plenty, "quantity": 2}, {"product_id": scarce, "quantity": 2}])

        assert exc.value.message == "Stock insuficiente para Gorro. Disponible: 1, Solicitado: 2"
        assert load_product(plenty).stock == 10
        assert load_product(scarce).stock == 1
        assert current_domain.repository_for(Order)._dao.query.all().items == []

    def test_same_product_twice_counts_both_lines(self, make_product, load_product, place_order):
        product_id = make_product(stock=3)
        with pytest.raises(InsufficientStockError):
            place_order([{"product_id": product_id, "quantity": 2}, {"product_id": product_id, "quantity": 2}])
        assert load_product(product_id).stock == 3

    def test_price_is_snapshotted(self, make_product, place_order, load_order):
        product_id = make_product(price=1000.0, sale_price=700.0, on_sale=True)
        order = load_order(place_order([{"product_id": product_id, "quantity": 1}]))
        assert order.items[0].unit_price == 700.0

    def test_cash_order_starts_pending_payment(self, make_product, place_order, load_order):
        product_id = make_product()
        order = load_order(place_order([{"product_id": product_id, "quantity": 1}], payment_method="cash"))
        assert order.status == OrderStatus.PENDING_PAYMENT.value
        assert order.expires_at is None

    def test_shipping_address_is_kept(self, make_product, place_order, load_order):
        import json

        product_id = make_product()
        order = load_order(
            place_order(
                [{"product_id": product_id, "quantity": 1}],
                shipping_address=json.dumps({"street_name": "Mitre", "street_number": "100", "postal_code": "1611"}),
            )
        )
        assert order.shipping_address.street_name == "Mitre"
        assert order.shipping_address.postal_code == "1611"

    def test_malformed_cart(self):
        from storefront.ordering.placement import PlaceOrder

        with pytest.raises(ValidationError):
            current_domain.process(
                PlaceOrder(customer_name="A", customer_email="a@example.com", items="not json"),
                asynchronous=False,
            )
