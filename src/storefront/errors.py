"""Storefront error taxonomy.

Every error carries the machine-readable ``code`` and HTTP ``status`` that
the API layer puts in the ``{success, error, code, status}`` envelope.
"""


class StorefrontError(Exception):
    """Base exception for storefront errors."""

    code = "INTERNAL_ERROR"
    status = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(StorefrontError):
    """Malformed input, such as a bad postal code or an empty cart."""

    code = "VALIDATION_ERROR"
    status = 400


class NotFoundError(StorefrontError):
    code = "NOT_FOUND"
    status = 404


class VariantNotFoundError(NotFoundError):
    """The requested color/size combination does not exist for the product."""

    code = "VARIANT_NOT_FOUND"

    def __init__(self, product_name: str, color: str, size: str):
        self.product_name = product_name
        self.color = color
        self.size = size
        super().__init__(f"La variante {color} - {size} de {product_name} ya no está disponible.")


class ConflictError(StorefrontError):
    """A precondition on current state was not met (duplicate slug, already active, ...)."""

    code = "CONFLICT"
    status = 409


class InvalidTransitionError(ConflictError):
    """An order status change was attempted from the wrong predecessor state."""

    code = "BAD_REQUEST"
    status = 400

    def __init__(self, current: str, target: str, required: list[str]):
        self.current = current
        self.target = target
        self.required = required
        expected = " o ".join(required) if required else "ninguno"
        super().__init__(
            f"El pedido debe estar en estado {expected}. Estado actual: {current}",
            details={"current": current, "target": target, "required": required},
        )


class InsufficientStockError(StorefrontError):
    code = "INSUFFICIENT_STOCK"
    status = 400

    def __init__(self, message: str, product_id: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            message,
            details={"product_id": product_id, "available": available, "requested": requested},
        )


class ExternalServiceError(StorefrontError):
    """The carrier or the payment processor failed or answered non-2xx."""

    code = "EXTERNAL_SERVICE_ERROR"
    status = 502

    def __init__(self, service: str, message: str, details: dict | None = None):
        self.service = service
        super().__init__(message, details)


class RateLimitedError(StorefrontError):
    code = "RATE_LIMITED"
    status = 429

    def __init__(self, retry_after: float = 0.0):
        self.retry_after = retry_after
        super().__init__(
            "Demasiadas solicitudes, intentá de nuevo en unos minutos",
            details={"retry_after": retry_after},
        )


class InternalError(StorefrontError):
    code = "INTERNAL_ERROR"
    status = 500
