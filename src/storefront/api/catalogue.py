"""FastAPI endpoints for the product catalog."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.rate_limit import LIST_PRODUCTS, rate_limit
from storefront.api.schemas import (
    AddCategoryRequest,
    AddProductRequest,
    AddVariantRequest,
    Envelope,
    IdView,
    ProductPageView,
    ProductView,
    UpdateStockRequest,
)
from storefront.catalogue.listing import ProductFilters, catalog_stats, get_product, list_products
from storefront.catalogue.management import AddCategory, AddProduct, AddVariant, UpdateStock

product_router = APIRouter(prefix="/api/products", tags=["products"])
category_router = APIRouter(prefix="/api/categories", tags=["categories"])


# --- Product endpoints ---


@product_router.get("", response_model=Envelope[ProductPageView], dependencies=[Depends(rate_limit(LIST_PRODUCTS))])
async def get_products(
    category_id: str | None = None,
    search: str | None = None,
    on_sale: bool | None = None,
    featured: bool | None = None,
    in_stock: bool | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    sort: str = "newest",
    page: int = 1,
    limit: int = 12,
) -> Envelope[ProductPageView]:
    result = list_products(
        ProductFilters(
            category_id=category_id,
            search=search,
            on_sale=on_sale,
            featured=featured,
            in_stock=in_stock,
            min_price=min_price,
            max_price=max_price,
            sort=sort,
            page=page,
            limit=limit,
        )
    )
    return Envelope(
        data=ProductPageView(
            items=[ProductView.from_product(p) for p in result.items],
            total=result.total,
            page=result.page,
            pages=result.pages,
        )
    )


@product_router.get("/stats")
async def product_stats():
    return {"success": True, "data": catalog_stats()}


@product_router.get("/{product_id}", response_model=Envelope[ProductView])
async def get_one_product(product_id: str) -> Envelope[ProductView]:
    return Envelope(data=ProductView.from_product(get_product(product_id)))


@product_router.post("", status_code=201, response_model=Envelope[IdView])
async def add_product(body: AddProductRequest) -> Envelope[IdView]:
    command = AddProduct(**body.model_dump(exclude_none=True))
    product_id = current_domain.process(command, asynchronous=False)
    return Envelope(data=IdView(id=product_id))


@product_router.post("/{product_id}/variants", status_code=201, response_model=Envelope[IdView])
async def add_variant(product_id: str, body: AddVariantRequest) -> Envelope[IdView]:
    command = AddVariant(product_id=product_id, **body.model_dump(exclude_none=True))
    variant_id = current_domain.process(command, asynchronous=False)
    return Envelope(data=IdView(id=variant_id))


@product_router.put("/{product_id}/stock", response_model=Envelope[ProductView])
async def update_stock(product_id: str, body: UpdateStockRequest) -> Envelope[ProductView]:
    command = UpdateStock(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return Envelope(data=ProductView.from_product(get_product(product_id)))


# --- Category endpoints ---


@category_router.post("", status_code=201, response_model=Envelope[IdView])
async def add_category(body: AddCategoryRequest) -> Envelope[IdView]:
    category_id = current_domain.process(AddCategory(**body.model_dump(exclude_none=True)), asynchronous=False)
    return Envelope(data=IdView(id=category_id))
