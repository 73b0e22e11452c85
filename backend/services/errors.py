# backend/services/errors.py
"""
Domain errors raised by the service layer.

Each error carries the HTTP status the API answers with; the single handler
registered in main.py turns them into the same {"detail": ...} body that
HTTPException produces.
"""


class MarketplaceError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(MarketplaceError):
    """Bad input: unknown status, illegal transition, empty order, missing fields."""
    status_code = 422


class AuthorizationError(MarketplaceError):
    """The actor has no rights for the requested read or mutation."""
    status_code = 403


class AuthenticationError(MarketplaceError):
    status_code = 401


class NotFoundError(MarketplaceError):
    status_code = 404


class ConcurrencyConflictError(MarketplaceError):
    """Another writer committed first; the caller should re-fetch and retry."""
    status_code = 409


class TransientDeliveryError(MarketplaceError):
    """Outbound email could not be delivered. Logged, never surfaced to users."""
    status_code = 502
