# storefront/domain/errors.py
from typing import Any


class DomainError(ValueError):
    """Blad domeny z kodem i danymi dla klienta, router zamienia go na 4xx."""

    default_code = "DOMAIN_ERROR"

    def __init__(self, message: str = "Operation failed", code: str | None = None, data: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.data = data or {}


class CartError(DomainError):
    default_code = "CART_ERROR"

    def __init__(self, message: str = "Cart operation failed", code: str | None = None, data: dict[str, Any] | None = None):
        super().__init__(message, code, data)


class InvalidQuantity(CartError):
    default_code = "INVALID_QUANTITY"


class QuantityExceedsMaximum(CartError):
    default_code = "CART_LIMIT_EXCEEDED"


class CartItemLimitExceeded(CartError):
    default_code = "CART_LIMIT_EXCEEDED"


class ProductUnavailable(CartError):
    default_code = "PRODUCT_UNAVAILABLE"


class CatalogError(DomainError):
    default_code = "CATALOG_ERROR"


class CatalogConflict(CatalogError):
    """Nazwa/slug/sku juz zajete."""

    default_code = "CATALOG_CONFLICT"


class InvalidParentCategory(CatalogError):
    default_code = "INVALID_PARENT"


class DeletionConstraint(CatalogError):
    default_code = "DELETION_CONSTRAINT"


class NotFound(LookupError):
    pass


class CartItemNotFound(NotFound):
    pass


class ProductNotFound(NotFound):
    pass


class BrandNotFound(NotFound):
    pass


class CategoryNotFound(NotFound):
    pass
