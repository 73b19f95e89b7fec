"""Error taxonomy shared by the client, cascade and normalizer."""

from typing import Optional


class ShowcaseError(Exception):
    """Base class for blobshowcase errors."""


class InvalidInputError(ShowcaseError, ValueError):
    """Malformed address or object id. Raised before any request is sent."""


class RemoteError(ShowcaseError):
    """Transport or JSON-RPC failure reported by the full node."""

    def __init__(self, message: str, *, method: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.method = method
        self.status_code = status_code


class DecodeError(ShowcaseError):
    """Structural problem in a raw object detail. Always recovered locally."""

    def __init__(self, message: str, *, missing_key: Optional[str] = None):
        super().__init__(message)
        self.missing_key = missing_key
