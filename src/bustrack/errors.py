"""Exceptions raised while fetching and resolving departures."""


class GTFSError(Exception):
    """Base exception for departure lookups."""

    message = "Departure lookup failed"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class InvalidURL(GTFSError):
    """Raised when the configured feed URL cannot be used."""

    message = "Invalid API URL"


class InvalidResponse(GTFSError):
    """Raised on transport failures and non-200 responses. Safe to retry."""

    message = "Invalid API response"


class DecodingError(GTFSError):
    """Raised when the feed body cannot be decoded."""

    message = "Failed to parse API data"


class NoDataForStop(GTFSError):
    """Raised by single-stop lookups when the feed has nothing for the stop."""

    message = "No departures found for this stop"
