"""Exceptions raised by the enrichment and merge tools."""

from typing import Optional


class EnrichmentError(Exception):
    """Base pipeline exception."""


class ConfigError(EnrichmentError):
    """Raised when required configuration is missing or invalid."""


class DatasetError(EnrichmentError):
    """Raised when a provider dataset file cannot be read or is malformed."""


class PlacesAPIError(EnrichmentError):
    """Raised when a Places API request fails (HTTP error, timeout, transport)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
