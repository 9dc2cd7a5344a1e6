"""Stock & variant validation for checkout.

Resolves cart lines against products and their variants in a single batch
read, without mutating anything. Placement reuses the resolved products to
reserve stock inside the same unit of work.
"""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, Variant
from storefront.errors import NotFoundError, ValidationError
from storefront.utils.db import fetch_all


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int
    color: str | None = None
    size: str | None = None


@dataclass(frozen=True)
class ResolvedLine:
    line: CartLine
    product: Product
    variant: Variant | None

    @property
    def unit_price(self) -> float:
        return self.product.effective_price

    @property
    def subtotal(self) -> float:
        return round(self.unit_price * self.line.quantity, 2)


def fetch_products(product_ids: list[str]) -> dict[str, Product]:
    """Load every referenced product, variants included, in one query."""
    unique_ids = list(dict.fromkeys(product_ids))
    results = fetch_all(current_domain.repository_for(Product)._dao.query.filter(id__in=unique_ids).order_by("id"))
    return {str(p.id): p for p in results}


def validate_stock(lines: list[CartLine]) -> list[ResolvedLine]:
    """Check every cart line against available stock.

    Raises NotFoundError for an unknown product, VariantNotFoundError for an
    unknown color/size combination, and InsufficientStockError when the
    product or variant holds fewer units than requested.
    """
    if not lines:
        raise ValidationError("No hay productos en el carrito")

    for line in lines:
        if line.quantity is None or line.quantity < 1:
            raise ValidationError(f"Cantidad inválida para el producto {line.product_id}")

    products = fetch_products([line.product_id for line in lines])

    resolved = []
    for line in lines:
        product = products.get(str(line.product_id))
        if product is None:
            raise NotFoundError(f"Producto no encontrado: {line.product_id}")

        variant = product.variant_for(line.color, line.size)
        product.ensure_available(line.quantity, line.color, line.size)
        resolved.append(ResolvedLine(line=line, product=product, variant=variant))

    return resolved
