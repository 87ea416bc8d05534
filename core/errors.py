"""Exceptions raised by the order and payment services.

Each carries a stable ``kind`` and the HTTP status the error handler in
``main.py`` answers with.
"""


class MarketplaceError(Exception):
    """Base exception for all marketplace errors."""

    kind = "error"
    status_code = 500

    def __init__(self, message):
        self.message = message
        super().__init__(message)

    def to_dict(self):
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(MarketplaceError):
    """Raised when a required field is missing or malformed."""

    kind = "validation_error"
    status_code = 400


class InvalidArgument(MarketplaceError):
    """Raised when an identifier does not have the storage id format."""

    kind = "invalid_argument"
    status_code = 400


class NotFound(MarketplaceError):
    """Raised when an order or product is absent or not owned by the caller."""

    kind = "not_found"
    status_code = 404


class Conflict(MarketplaceError):
    """Raised when the requested transition is not allowed from the current state."""

    kind = "conflict"
    status_code = 409


class Unauthorized(MarketplaceError):
    """Raised when a payment signature does not verify."""

    kind = "unauthorized"
    status_code = 401


class UpstreamError(MarketplaceError):
    """Raised when the payment gateway is unreachable or rejects a call."""

    kind = "upstream_error"
    status_code = 502
