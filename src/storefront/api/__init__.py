"""Storefront HTTP API package.

Routes that reach the payment gateway, the carrier or the mailer, directly or
through command handlers, are plain ``def`` so FastAPI runs them in its
threadpool instead of on the event loop.
"""

from storefront.api.catalogue import category_router, product_router
from storefront.api.cron import router as cron_router
from storefront.api.errors import register_exception_handlers
from storefront.api.orders import router as order_router
from storefront.api.settings import router as settings_router
from storefront.api.shipping import router as shipping_router
from storefront.api.vacation import router as vacation_router
from storefront.api.webhooks import router as webhook_router

ROUTERS = [
    product_router,
    category_router,
    order_router,
    webhook_router,
    shipping_router,
    cron_router,
    settings_router,
    vacation_router,
]

__all__ = ["ROUTERS", "register_exception_handlers"]
