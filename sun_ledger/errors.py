"""
Error taxonomy for Sun Ledger

Failures are contained at the smallest scope possible:
- AdapterError:   one provider failed for one date (network, status, payload,
                  or a malformed sunrise/sunset pair). Recovered locally.
- GeocodingError: the place name could not be resolved. Aborts a collection
                  before any provider is called.

categorize_error() turns raw exceptions into an ErrorType so that every
provider reports failures in the same vocabulary.
"""

from enum import Enum
from typing import Tuple

import httpx


class ErrorType(Enum):
    """Categories of provider failures for logging and reporting."""
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    API_ERROR = "api_error"
    STATUS_ERROR = "status_error"
    PARSE_ERROR = "parse_error"
    INVALID_RECORD = "invalid_record"
    UNKNOWN = "unknown"


class SunLedgerError(Exception):
    """Base class for all Sun Ledger errors."""


class AdapterError(SunLedgerError):
    """A single source adapter failed to produce a usable observation."""

    def __init__(self, source: str, error_type: ErrorType, message: str):
        self.source = source
        self.error_type = error_type
        self.message = message
        super().__init__(f"[{source}] {error_type.value}: {message}")


class GeocodingError(SunLedgerError):
    """The place name did not resolve to coordinates."""

    def __init__(self, place: str):
        self.place = place
        super().__init__(f"Could not find coordinates for '{place}'")


def categorize_error(exception: Exception) -> Tuple[ErrorType, str]:
    """Map an adapter-side exception to (ErrorType, short message)."""
    if isinstance(exception, AdapterError):
        return exception.error_type, exception.message

    error_msg = str(exception)[:200]
    if isinstance(exception, httpx.TimeoutException):
        return ErrorType.TIMEOUT, f"Timeout: {error_msg}"
    if isinstance(exception, httpx.RequestError):
        return ErrorType.API_ERROR, f"Request error: {error_msg}"
    # json.JSONDecodeError is a ValueError
    if isinstance(exception, (KeyError, ValueError, TypeError, AttributeError)):
        return ErrorType.PARSE_ERROR, f"Parse error: {error_msg}"
    return ErrorType.UNKNOWN, error_msg
