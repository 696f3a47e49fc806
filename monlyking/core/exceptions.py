"""Marketplace domain errors.

Services raise these; ``monlyking.main`` maps them to JSON responses using
the status code each class carries.
"""
from decimal import Decimal

from fastapi import status


class MarketplaceError(Exception):
    """Base class for marketplace errors."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(MarketplaceError):
    """Raised when a requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class PermissionDeniedError(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN


class AccountSuspendedError(MarketplaceError):
    """Raised when a banned or disabled user tries to act."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Account is suspended"):
        super().__init__(message)


class DuplicateUserError(MarketplaceError):
    pass


class InvalidRequestError(MarketplaceError):
    pass


class InsufficientBalanceError(MarketplaceError):
    """Raised when a wallet cannot cover a purchase or withdrawal."""

    def __init__(self, available: Decimal, requested: Decimal):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient wallet balance: available {available}, requested {requested}"
        )


class SelfPurchaseError(MarketplaceError):
    def __init__(self):
        super().__init__("You cannot purchase your own account")


class ListingUnavailableError(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT


class InvalidOrderTransitionError(MarketplaceError):
    """Raised when an order action does not fit the order's current status."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, order_id: int, current: str, action: str):
        self.order_id = order_id
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} order {order_id} in status '{current}'")


class WithdrawalBelowMinimumError(MarketplaceError):
    def __init__(self, minimum: Decimal):
        self.minimum = minimum
        super().__init__(f"Minimum withdrawal amount is {minimum}")
