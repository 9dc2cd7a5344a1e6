"""Catalogue domain events."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Category")
class CategoryAdded:
    __version__ = 1

    category_id = Identifier(required=True)
    name = String(required=True)
    slug = String(required=True)


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    slug = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    category_id = Identifier()
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class VariantAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    color = String(required=True)
    size = String(required=True)
    stock = Integer(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """Flat or variant stock changed. ``delta`` is negative for reservations."""

    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier()
    delta = Integer(required=True)
    new_stock = Integer(required=True)
    reason = String(max_length=50)
    adjusted_at = DateTime(required=True)
