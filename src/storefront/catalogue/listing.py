"""Catalogue read layer: listing, filtering and stats for the storefront."""

import math
from collections import Counter
from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from storefront.catalogue.management import load_product
from storefront.catalogue.product import Product
from storefront.errors import ValidationError
from storefront.utils.db import fetch_all

SORT_KEYS = {
    "newest": (lambda p: p.created_at.timestamp() if p.created_at else 0.0, True),
    "price_asc": (lambda p: p.effective_price, False),
    "price_desc": (lambda p: p.effective_price, True),
    "name": (lambda p: (p.name or "").lower(), False),
}


@dataclass
class ProductFilters:
    category_id: str | None = None
    search: str | None = None
    on_sale: bool | None = None
    featured: bool | None = None
    in_stock: bool | None = None
    min_price: float | None = None
    max_price: float | None = None
    sort: str = "newest"
    page: int = 1
    limit: int = 12

    def matches(self, product: Product) -> bool:
        if self.category_id and product.category_id != self.category_id:
            return False
        if self.search and self.search.strip().lower() not in (product.name or "").lower():
            return False
        if self.on_sale is not None and bool(product.on_sale) != self.on_sale:
            return False
        if self.featured is not None and bool(product.featured) != self.featured:
            return False
        if self.in_stock is not None and (product.total_stock > 0) != self.in_stock:
            return False
        if self.min_price is not None and product.effective_price < self.min_price:
            return False
        if self.max_price is not None and product.effective_price > self.max_price:
            return False
        return True


@dataclass
class ProductPage:
    items: list[Product] = field(default_factory=list)
    total: int = 0
    page: int = 1
    pages: int = 0


def list_products(filters: ProductFilters | None = None) -> ProductPage:
    filters = filters or ProductFilters()
    if filters.sort not in SORT_KEYS:
        raise ValidationError(f"Orden no soportado: {filters.sort}")
    if filters.page < 1 or filters.limit < 1:
        raise ValidationError("Paginación inválida")

    query = current_domain.repository_for(Product)._dao.query.filter(is_active=True).order_by(["-created_at", "id"])
    if filters.category_id:
        query = query.filter(category_id=filters.category_id)
    if filters.search and filters.search.strip():
        query = query.filter(name__icontains=filters.search.strip())
    # Prices depend on the sale flag, so the remaining criteria run on the loaded rows
    matching = [p for p in fetch_all(query) if filters.matches(p)]

    key, reverse = SORT_KEYS[filters.sort]
    matching.sort(key=key, reverse=reverse)

    start = (filters.page - 1) * filters.limit
    return ProductPage(
        items=matching[start : start + filters.limit],
        total=len(matching),
        page=filters.page,
        pages=math.ceil(len(matching) / filters.limit),
    )


def get_product(product_id: str) -> Product:
    return load_product(product_id)


def catalog_stats() -> dict:
    products = fetch_all(current_domain.repository_for(Product)._dao.query.order_by(["created_at", "id"]))
    active = [p for p in products if p.is_active]
    return {
        "total_products": len(products),
        "active_products": len(active),
        "out_of_stock": sum(1 for p in active if p.total_stock == 0),
        "on_sale": sum(1 for p in active if p.on_sale and p.sale_price),
        "total_stock_units": sum(p.total_stock for p in active),
        "by_category": dict(Counter(p.category_id or "uncategorized" for p in active)),
    }
