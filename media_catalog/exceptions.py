"""Exceptions raised by the media catalog."""

from typing import Optional


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class FetchError(CatalogError):
    """Raised when the catalog could not be fetched, decoded or built."""


class NetworkError(FetchError):
    """Raised when the catalog endpoint is unreachable or answers with an error."""

    def __init__(self, message: str, url: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.url = url


class ParseError(FetchError):
    """Raised when the response body is not a catalog document."""


class RecordError(FetchError):
    """Raised when a single catalog record is missing a required field."""

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        field: Optional[str] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message, details)
        self.index = index
        self.field = field


class AssetError(CatalogError, OSError):
    """Raised when a bundled asset cannot be read."""

    def __init__(self, message: str, asset_name: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.asset_name = asset_name
