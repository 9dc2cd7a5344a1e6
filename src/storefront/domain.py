"""Storefront bounded context: catalogue, checkout, orders, shipping and payments.

Everything lives in one domain because placing or cancelling an order changes
Order and Product in a single unit of work.
"""

from protean.domain import Domain

# Domain Composition Root
storefront = Domain(name="storefront")
