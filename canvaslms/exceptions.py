"""Custom exception classes for the Canvas client."""


class CanvasError(Exception):
    """Base exception for Canvas errors."""
    pass


class ConfigurationError(CanvasError):
    """Raised when required configuration is missing or invalid."""
    pass


class ValidationError(CanvasError):
    """Raised when input validation fails."""
    pass


class TransportError(CanvasError):
    """Raised when a request could not be completed."""
    pass


class NetworkError(TransportError):
    """Raised when network requests fail."""
    pass


class APIError(TransportError):
    """Raised when API returns an error."""
    pass


class ParseError(CanvasError):
    """Raised when a Link header advertises a page that cannot be read."""
    pass


class PageCountUnavailableError(CanvasError):
    """Raised when the first page does not say how many pages there are."""
    pass


class DecodeError(CanvasError):
    """Raised when a page body cannot be turned into domain objects."""

    def __init__(self, message: str, page: int | None = None) -> None:
        super().__init__(message)
        self.page = page
