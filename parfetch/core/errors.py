from typing import Optional


class ParFetchError(Exception):
    """Base class for every error raised by parfetch."""


class ConfigError(ParFetchError):
    """Missing or out-of-bounds configuration. Fatal for the whole run."""


class FetchError(ParFetchError):
    def __init__(self, message: str, url: str = "", status_code: int = 0):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class NetworkError(FetchError):
    """Transport failure or timeout; no usable response."""


class ResponseTooLarge(FetchError):
    """Response body exceeded the configured cap."""


class RateLimited(FetchError):
    """Remote answered with a throttling status (429)."""


class BadStatus(FetchError):
    """Any other non-2xx response."""


class ExtractionError(ParFetchError):
    """Required table (or standings entry) absent from the payload."""


class SchemaMismatch(ParFetchError):
    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = list(missing or [])


class JoinAmbiguity(ParFetchError):
    """Two rows in the same table share an identity key."""
