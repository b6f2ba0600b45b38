"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class RestaurantAPIError(Exception):
    """Raised when restaurant server calls fail or return malformed data."""


class RestaurantRequestError(RestaurantAPIError):
    """Raised for restaurant request failures with category/status metadata."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code


class OrderSelectionError(Exception):
    """Raised when a dish selection contains no orderable menu items."""


class JournalError(Exception):
    """Raised when writing to journal files fails."""


class OrderTrackingError(Exception):
    """Raised when the order countdown stops before reaching ready or cancelled."""
