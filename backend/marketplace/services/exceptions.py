"""Errors raised by the cart, order and notification services."""


class MarketplaceError(Exception):
    """Base class for every error a service raises to its caller."""

    pass


class NotFoundError(MarketplaceError):
    """Referenced entity is absent or not owned by the caller."""

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        msg = f"{entity} not found"
        if entity_id is not None:
            msg = f"{entity} not found: {entity_id}"
        super().__init__(msg)


class EmptyCartError(MarketplaceError):
    def __init__(self):
        super().__init__("Cart is empty")


class ProductUnavailableError(MarketplaceError):
    """Product is inactive or no longer in the `available` state."""

    def __init__(self, product_ids=None, message: str = "Some products are not available"):
        self.product_ids = sorted(product_ids or [])
        if self.product_ids:
            message = f"{message}: {self.product_ids}"
        super().__init__(message)


class InvalidStatusError(MarketplaceError):
    def __init__(self, status, allowed):
        self.status = status
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid status {status!r}. Allowed: {', '.join(self.allowed)}"
        )


class InvalidQuantityError(MarketplaceError):
    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__("Quantity must be greater than 0")


class StorageError(MarketplaceError):
    """Opaque persistence failure; the current unit of work was rolled back."""

    pass
