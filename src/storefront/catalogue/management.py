"""Catalogue management: commands and handlers for the admin back office."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import ConflictError, NotFoundError


@storefront.command(part_of="Category")
class AddCategory:
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=120)
    description = Text()


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)
    on_sale = Boolean(default=False)
    stock = Integer(default=0, min_value=0)
    category_id = Identifier()
    description = Text()
    featured = Boolean(default=False)


@storefront.command(part_of="Product")
class AddVariant:
    product_id = Identifier(required=True)
    color = String(required=True, max_length=50)
    size = String(required=True, max_length=20)
    stock = Integer(default=0, min_value=0)
    sku = String(max_length=60)


@storefront.command(part_of="Product")
class UpdateStock:
    product_id = Identifier(required=True)
    stock = Integer(required=True, min_value=0)
    color = String(max_length=50)
    size = String(max_length=20)


def load_product(product_id: str) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError as exc:
        raise NotFoundError(f"Producto no encontrado: {product_id}") from exc


@storefront.command_handler(part_of=Category)
class CategoryCommandHandler:
    @handle(AddCategory)
    def add_category(self, command):
        repo = current_domain.repository_for(Category)
        if repo._dao.query.filter(slug=command.slug).all().items:
            raise ConflictError(f"Ya existe una categoría con el slug '{command.slug}'")

        category = Category.create(name=command.name, slug=command.slug, description=command.description)
        repo.add(category)
        return str(category.id)


@storefront.command_handler(part_of=Product)
class ProductCommandHandler:
    @handle(AddProduct)
    def add_product(self, command):
        repo = current_domain.repository_for(Product)
        if repo._dao.query.filter(slug=command.slug).all().items:
            raise ConflictError(f"Ya existe un producto con el slug '{command.slug}'")

        if command.category_id:
            try:
                current_domain.repository_for(Category).get(command.category_id)
            except ObjectNotFoundError as exc:
                raise NotFoundError(f"Categoría no encontrada: {command.category_id}") from exc

        product = Product.create(
            name=command.name,
            slug=command.slug,
            price=command.price,
            stock=command.stock,
            sale_price=command.sale_price,
            on_sale=command.on_sale,
            category_id=command.category_id,
            description=command.description,
            featured=command.featured,
        )
        repo.add(product)
        return str(product.id)

    @handle(AddVariant)
    def add_variant(self, command):
        product = load_product(command.product_id)
        variant = product.add_variant(
            color=command.color,
            size=command.size,
            stock=command.stock,
            sku=command.sku,
        )
        current_domain.repository_for(Product).add(product)
        return str(variant.id)

    @handle(UpdateStock)
    def update_stock(self, command):
        product = load_product(command.product_id)
        product.set_stock(command.stock, color=command.color, size=command.size)
        current_domain.repository_for(Product).add(product)
