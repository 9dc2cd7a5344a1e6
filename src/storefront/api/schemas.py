"""Pydantic request/response schemas for the storefront HTTP API.

Every response is wrapped in ``{success, data}``; errors use the envelope
built in ``storefront.api.errors``.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CartItemRequest(BaseModel):
    product_id: str
    quantity: int
    color: str | None = None
    size: str | None = None


class AddressRequest(BaseModel):
    street_name: str | None = Field(None, max_length=255)
    street_number: str | None = Field(None, max_length=20)
    floor: str | None = Field(None, max_length=10)
    apartment: str | None = Field(None, max_length=10)
    city: str | None = Field(None, max_length=100)
    province_code: str | None = Field(None, max_length=1)
    postal_code: str | None = Field(None, max_length=10)


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "Ana Pérez",
                    "customer_email": "ana@example.com",
                    "customer_phone": "+54 11 5555-0000",
                    "items": [{"product_id": "prod-001", "quantity": 2, "color": "Rojo", "size": "4"}],
                    "payment_method": "transfer",
                    "shipping_method": "standard",
                    "shipping_cost": 1200,
                    "shipping_address": {
                        "street_name": "Av. Siempre Viva",
                        "street_number": "742",
                        "city": "Don Torcuato",
                        "province_code": "B",
                        "postal_code": "1611",
                    },
                }
            ]
        }
    }

    customer_name: str = Field(..., max_length=200)
    customer_email: str = Field(..., max_length=254)
    customer_phone: str | None = Field(None, max_length=50)
    items: list[CartItemRequest] = Field(default_factory=list)
    payment_method: str = "mercadopago"
    shipping_method: str | None = Field(None, max_length=50)
    shipping_cost: float = Field(0.0, ge=0)
    discount: float = Field(0.0, ge=0)
    shipping_address: AddressRequest | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class ConfirmTransferRequest(BaseModel):
    sender_name: str = Field(..., max_length=200)
    transaction_id: str = Field(..., max_length=100)


class RejectTransferRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class AssignTrackingRequest(BaseModel):
    tracking_number: str = Field(..., max_length=100)


class OrderItemView(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    subtotal: float
    color: str | None = None
    size: str | None = None


class OrderView(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str | None = None
    status: str
    payment_method: str
    payment_id: str | None = None
    payment_status: str | None = None
    items: list[OrderItemView] = Field(default_factory=list)
    shipping_method: str | None = None
    shipping_cost: float = 0.0
    shipping_address: dict | None = None
    discount: float = 0.0
    total: float = 0.0
    tracking_number: str | None = None
    last_tracking_event: dict | None = None
    transfer_proof: dict | None = None
    estimated_delivery: datetime | None = None
    expires_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> OrderView:
        return cls(
            id=str(order.id),
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            status=order.status,
            payment_method=order.payment_method,
            payment_id=order.payment_id,
            payment_status=order.payment_status,
            items=[OrderItemView(**item.as_line(), subtotal=item.subtotal) for item in order.items or []],
            shipping_method=order.shipping_method,
            shipping_cost=order.shipping_cost or 0.0,
            shipping_address=order.shipping_address.to_dict() if order.shipping_address else None,
            discount=order.discount or 0.0,
            total=order.total or 0.0,
            tracking_number=order.tracking_number,
            last_tracking_event=json.loads(order.last_tracking_event) if order.last_tracking_event else None,
            transfer_proof=order.transfer_proof.to_dict() if order.transfer_proof else None,
            estimated_delivery=order.estimated_delivery,
            expires_at=order.expires_at,
            cancellation_reason=order.cancellation_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class PlacedOrderView(BaseModel):
    order_id: str
    status: str
    total: float
    checkout_url: str | None = None
    preference_id: str | None = None


class TransitionView(BaseModel):
    order_id: str
    status: str


class CancelledOrderView(TransitionView):
    restored_stock: int = 0


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------
class PaymentNotificationRequest(BaseModel):
    """MercadoPago notification body; ``data.id`` is the payment id."""

    type: str | None = None
    action: str | None = None
    data: dict[str, Any] | None = None


class CarrierWebhookRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "tracking_number": "000500076393019A3G0C701",
                    "status": "ENTREGADO",
                    "event_description": "Envío entregado",
                    "event_date": "2025-03-14T10:22:00",
                    "branch_name": "CORREO DON TORCUATO",
                }
            ]
        }
    }

    tracking_number: str
    status: str
    event_description: str | None = None
    event_date: str | None = None
    branch_name: str | None = None


class WebhookResult(BaseModel):
    received: bool = True
    processed: bool = False
    detail: dict | None = None


# ---------------------------------------------------------------------------
# Shipping
# ---------------------------------------------------------------------------
class ShippingQuoteRequest(BaseModel):
    postal_code: str
    weight_kg: float | None = None


class ShippingQuoteView(BaseModel):
    id: str
    name: str
    description: str
    price: float
    estimated_days: str


class ShippingRatesView(BaseModel):
    postal_code: str
    zone: str
    options: list[ShippingQuoteView]


class ShipmentImportRequest(BaseModel):
    order_id: str
    delivery_type: str = "D"
    recipient_name: str
    recipient_email: str
    recipient_phone: str | None = None
    street_name: str | None = None
    street_number: str | None = None
    floor: str | None = None
    apartment: str | None = None
    city: str | None = None
    province_code: str | None = None
    postal_code: str | None = None
    agency: str | None = None
    weight: float = Field(1000, gt=0)
    height: float = Field(10, gt=0)
    width: float = Field(20, gt=0)
    length: float = Field(30, gt=0)
    declared_value: float = Field(0, ge=0)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class AddCategoryRequest(BaseModel):
    name: str = Field(..., max_length=100)
    slug: str = Field(..., max_length=120)
    description: str | None = None


class AddProductRequest(BaseModel):
    name: str = Field(..., max_length=255)
    slug: str = Field(..., max_length=255)
    price: float = Field(..., ge=0)
    sale_price: float | None = Field(None, ge=0)
    on_sale: bool = False
    stock: int = Field(0, ge=0)
    category_id: str | None = None
    description: str | None = None
    featured: bool = False


class AddVariantRequest(BaseModel):
    color: str = Field(..., max_length=50)
    size: str = Field(..., max_length=20)
    stock: int = Field(0, ge=0)
    sku: str | None = Field(None, max_length=60)


class UpdateStockRequest(BaseModel):
    stock: int = Field(..., ge=0)
    color: str | None = None
    size: str | None = None


class VariantView(BaseModel):
    id: str
    color: str
    size: str
    stock: int
    sku: str | None = None


class ProductView(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    price: float
    sale_price: float | None = None
    on_sale: bool = False
    effective_price: float
    stock: int
    total_stock: int
    category_id: str | None = None
    is_active: bool = True
    featured: bool = False
    variants: list[VariantView] = Field(default_factory=list)
    created_at: datetime | None = None

    @classmethod
    def from_product(cls, product) -> ProductView:
        return cls(
            id=str(product.id),
            name=product.name,
            slug=product.slug,
            description=product.description,
            price=product.price,
            sale_price=product.sale_price,
            on_sale=bool(product.on_sale),
            effective_price=product.effective_price,
            stock=product.stock or 0,
            total_stock=product.total_stock,
            category_id=product.category_id,
            is_active=bool(product.is_active),
            featured=bool(product.featured),
            variants=[
                VariantView(id=str(v.id), color=v.color, size=v.size, stock=v.stock or 0, sku=v.sku)
                for v in product.variants or []
            ],
            created_at=product.created_at,
        )


class ProductPageView(BaseModel):
    items: list[ProductView]
    total: int
    page: int
    pages: int


class IdView(BaseModel):
    id: str


# ---------------------------------------------------------------------------
# Vacation
# ---------------------------------------------------------------------------
class StartVacationRequest(BaseModel):
    title: str = Field(..., max_length=200)
    message: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    show_email_collection: bool = True


class EndVacationRequest(BaseModel):
    reason: str | None = Field(None, max_length=200)


class SubscribeRequest(BaseModel):
    email: str = Field(..., max_length=254)


class VacationView(BaseModel):
    id: str
    title: str
    message: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    show_email_collection: bool = True
    is_active: bool = True
    subscriber_count: int = 0

    @classmethod
    def from_period(cls, period) -> VacationView:
        return cls(
            id=str(period.id),
            title=period.title,
            message=period.message,
            start_date=period.start_date,
            end_date=period.end_date,
            show_email_collection=bool(period.show_email_collection),
            is_active=bool(period.is_active),
            subscriber_count=len(period.subscribers or []),
        )


class VacationStatusView(BaseModel):
    active: bool
    period: VacationView | None = None


class NotifyResultView(BaseModel):
    notified: int
    failed: int
