"""Product aggregate: catalogue item with a flat stock counter or per-variant stock.

A product with variants tracks stock per (color, size). Lines that name both
selectors are checked and decremented against the variant; everything else
falls back to the flat ``stock`` counter.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.catalogue.events import ProductAdded, StockAdjusted, VariantAdded
from storefront.domain import storefront
from storefront.errors import ConflictError, InsufficientStockError, ValidationError, VariantNotFoundError


@storefront.entity(part_of="Product")
class Variant:
    color = String(required=True, max_length=50)
    size = String(required=True, max_length=20)
    stock = Integer(default=0, min_value=0)
    sku = String(max_length=60)

    def matches(self, color: str, size: str) -> bool:
        return self.color == color and self.size == size


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)
    on_sale = Boolean(default=False)
    stock = Integer(default=0, min_value=0)
    category_id = Identifier()
    is_active = Boolean(default=True)
    featured = Boolean(default=False)
    variants = HasMany(Variant)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        price: float,
        stock: int = 0,
        sale_price: float | None = None,
        on_sale: bool = False,
        category_id: str | None = None,
        description: str | None = None,
        featured: bool = False,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            slug=slug,
            price=price,
            stock=stock,
            sale_price=sale_price,
            on_sale=on_sale,
            category_id=category_id,
            description=description,
            featured=featured,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                slug=slug,
                price=price,
                stock=stock,
                category_id=category_id,
                added_at=now,
            )
        )
        return product

    @property
    def effective_price(self) -> float:
        """Sale price while the product is on sale, list price otherwise."""
        if self.on_sale and self.sale_price:
            return self.sale_price
        return self.price

    @property
    def has_variants(self) -> bool:
        return bool(self.variants)

    @property
    def total_stock(self) -> int:
        if self.has_variants:
            return sum(v.stock or 0 for v in self.variants)
        return self.stock or 0

    def find_variant(self, color: str, size: str) -> Variant | None:
        return next((v for v in (self.variants or []) if v.matches(color, size)), None)

    def variant_for(self, color: str | None, size: str | None) -> Variant | None:
        """Resolve the stock holder for a line.

        Returns the matching variant when the product has variants and both
        selectors are given, ``None`` when the flat counter applies.
        """
        if not (self.has_variants and color and size):
            return None
        variant = self.find_variant(color, size)
        if variant is None:
            raise VariantNotFoundError(self.name, color, size)
        return variant

    def add_variant(self, color: str, size: str, stock: int = 0, sku: str | None = None) -> Variant:
        if self.find_variant(color, size) is not None:
            raise ConflictError(f"La variante {color} - {size} ya existe para {self.name}")
        variant = Variant(color=color, size=size, stock=stock, sku=sku)
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            VariantAdded(
                product_id=str(self.id),
                variant_id=str(variant.id),
                color=color,
                size=size,
                stock=stock,
            )
        )
        return variant

    def ensure_available(self, quantity: int, color: str | None = None, size: str | None = None) -> None:
        """Raise InsufficientStockError if ``quantity`` units cannot be served."""
        variant = self.variant_for(color, size)
        if variant is not None:
            if (variant.stock or 0) < quantity:
                raise InsufficientStockError(
                    f"Stock insuficiente para {self.name} ({variant.color} {variant.size}). "
                    f"Disponible: {variant.stock or 0}",
                    product_id=str(self.id),
                    available=variant.stock or 0,
                    requested=quantity,
                )
            return

        if (self.stock or 0) < quantity:
            raise InsufficientStockError(
                f"Stock insuficiente para {self.name}. Disponible: {self.stock or 0}, Solicitado: {quantity}",
                product_id=str(self.id),
                available=self.stock or 0,
                requested=quantity,
            )

    def reserve_stock(self, quantity: int, color: str | None = None, size: str | None = None) -> None:
        """Decrement stock for a placed order, never below zero."""
        if quantity <= 0:
            raise ValidationError("La cantidad debe ser mayor a cero")
        self.ensure_available(quantity, color, size)
        self._adjust(-quantity, self.variant_for(color, size), reason="reserved")

    def release_stock(self, quantity: int, color: str | None = None, size: str | None = None) -> None:
        """Give back stock held by a cancelled order.

        A variant that disappeared since the order was placed returns its
        units to the flat counter.
        """
        try:
            variant = self.variant_for(color, size)
        except VariantNotFoundError:
            variant = None
        self._adjust(quantity, variant, reason="released")

    def set_stock(self, stock: int, color: str | None = None, size: str | None = None) -> None:
        if stock < 0:
            raise ValidationError("El stock no puede ser negativo")
        variant = self.variant_for(color, size)
        current = variant.stock if variant is not None else self.stock
        self._adjust(stock - (current or 0), variant, reason="manual")

    def _adjust(self, delta: int, variant: Variant | None, reason: str) -> None:
        now = datetime.now(UTC)
        if variant is not None:
            variant.stock = (variant.stock or 0) + delta
            new_stock = variant.stock
        else:
            self.stock = (self.stock or 0) + delta
            new_stock = self.stock
        self.updated_at = now
        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                variant_id=str(variant.id) if variant is not None else None,
                delta=delta,
                new_stock=new_stock,
                reason=reason,
                adjusted_at=now,
            )
        )
