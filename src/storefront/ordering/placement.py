"""PlaceOrder: checkout command and handler.

Validation, stock reservation and order creation share one unit of work:
either every product is decremented and the order exists, or nothing changed.
"""

import json
from datetime import timedelta

import structlog
from protean import handle
from protean.fields import Float, String, Text
from protean.utils.globals import current_domain

from storefront import config
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import ValidationError
from storefront.ordering.order import Order, PaymentMethod, ShippingAddress
from storefront.ordering.stock import CartLine, validate_stock

logger = structlog.get_logger(__name__)

_ADDRESS_FIELDS = ("street_name", "street_number", "floor", "apartment", "city", "province_code", "postal_code")


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_name = String(required=True, max_length=200)
    customer_email = String(required=True, max_length=254)
    customer_phone = String(max_length=50)
    items = Text(required=True)  # JSON: [{product_id, quantity, color?, size?}]
    payment_method = String(max_length=20, default=PaymentMethod.MERCADOPAGO.value)
    shipping_method = String(max_length=50)
    shipping_cost = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    shipping_address = Text()  # JSON address dict


def parse_cart(raw: str) -> list[CartLine]:
    try:
        entries = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Formato de carrito inválido") from exc
    if not isinstance(entries, list):
        raise ValidationError("Formato de carrito inválido")

    lines = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("product_id"):
            raise ValidationError("Cada producto debe indicar product_id")
        try:
            quantity = int(entry.get("quantity", 0))
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Cantidad inválida para el producto {entry['product_id']}") from exc
        lines.append(
            CartLine(
                product_id=str(entry["product_id"]),
                quantity=quantity,
                color=entry.get("color") or None,
                size=entry.get("size") or None,
            )
        )
    return lines


def _parse_address(raw: str | None) -> ShippingAddress | None:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ValidationError("Formato de dirección inválido") from exc
    return ShippingAddress(**{k: data[k] for k in _ADDRESS_FIELDS if data.get(k) is not None})


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        resolved = validate_stock(parse_cart(command.items))

        touched: dict[str, Product] = {}
        for entry in resolved:
            entry.product.reserve_stock(entry.line.quantity, entry.line.color, entry.line.size)
            touched[str(entry.product.id)] = entry.product

        order = Order.place(
            customer_name=command.customer_name,
            customer_email=command.customer_email,
            customer_phone=command.customer_phone,
            items_data=[
                {
                    "product_id": str(entry.product.id),
                    "product_name": entry.product.name,
                    "quantity": entry.line.quantity,
                    "unit_price": entry.unit_price,
                    "color": entry.line.color,
                    "size": entry.line.size,
                }
                for entry in resolved
            ],
            payment_method=command.payment_method or PaymentMethod.MERCADOPAGO.value,
            shipping_method=command.shipping_method,
            shipping_cost=command.shipping_cost or 0.0,
            discount=command.discount or 0.0,
            shipping_address=_parse_address(command.shipping_address),
            payment_window=timedelta(minutes=config.payment_window_minutes()),
        )

        product_repo = current_domain.repository_for(Product)
        for product in touched.values():
            product_repo.add(product)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            status=order.status,
            total=order.total,
            products=list(touched),
        )
        return str(order.id)
