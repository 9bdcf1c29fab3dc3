"""Error taxonomy shared by every bounded context.

The classes extend Protean's exception hierarchy so callers can keep
catching ``ValidationError`` / ``ObjectNotFoundError`` /
``InvalidOperationError`` the way the rest of the platform does, while the
API layer maps each family to an HTTP status:

    ValidationError   → 400   malformed or missing request fields
    NotFoundError     → 404   unknown order, voucher, product or variant
    ConflictError     → 409   stock/voucher exhaustion, illegal transition
    SignatureError    → 400   forged or tampered gateway callback (no detail)
    TransientError    → 503   persistence/connectivity failure, retryable
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError
from protean.exceptions import ValidationError as _ProteanValidationError


class ValidationError(_ProteanValidationError):
    """Request data is malformed. ``messages`` maps field → list of messages."""


class NotFoundError(ObjectNotFoundError):
    def __init__(self, entity: str, identifier) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__({entity: [f"{entity} {identifier} does not exist"]})


class CatalogItemUnavailable(NotFoundError):
    """A cart line references a product or variant the catalog no longer has."""

    def __init__(self, product_id, variant_id) -> None:
        self.product_id = product_id
        self.variant_id = variant_id
        super().__init__("catalog_item", f"{product_id}/{variant_id}")


class ConflictError(InvalidOperationError):
    """Client-facing conflict. Not retried automatically."""

    code = "conflict"

    def __init__(self, message: str, **details) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.details}


class InsufficientStock(ConflictError):
    code = "insufficient_stock"

    def __init__(self, product_id, variant_id, requested: int, available: int | None = None) -> None:
        message = f"Insufficient stock for product {product_id} variant {variant_id}: requested {requested}"
        if available is not None:
            message += f", {available} available"
        super().__init__(
            message,
            product_id=product_id,
            variant_id=variant_id,
            requested=requested,
            available=available,
        )


class VoucherExhausted(ConflictError):
    code = "voucher_exhausted"

    def __init__(self, code: str) -> None:
        super().__init__(f"Voucher {code} has no remaining uses", voucher_code=code)


class VoucherNotActive(ConflictError):
    code = "voucher_not_active"

    def __init__(self, code: str) -> None:
        super().__init__(f"Voucher {code} is not within its validity window", voucher_code=code)


class InvalidTransition(ConflictError):
    code = "invalid_transition"

    def __init__(self, order_code: str, current: str, target: str) -> None:
        super().__init__(
            f"Order {order_code} cannot move from {current} to {target}",
            order_code=order_code,
            current_status=current,
            target_status=target,
        )


class PriceChanged(ConflictError):
    """The catalog moved between the gateway redirect and the callback."""

    code = "price_changed"

    def __init__(self, expected, actual) -> None:
        super().__init__(
            f"Order total changed from {expected} to {actual}",
            expected=str(expected),
            actual=str(actual),
        )


class SignatureError(Exception):
    """A gateway callback failed verification. Treated as a security event."""


class TransientError(Exception):
    """The unit of work failed for infrastructure reasons and was rolled back."""
