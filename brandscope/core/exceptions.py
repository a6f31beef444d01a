"""Error taxonomy for the analysis pipeline and its HTTP surface."""

from fastapi import HTTPException


class BrandScopeError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(BrandScopeError):
    """No usable provider configuration: nothing enabled, or a missing/malformed credential."""


class ProviderError(BrandScopeError):
    """Provider call failed: non-success HTTP status, timeout or transport error.

    ``status_code`` is 0 when no HTTP response was received.
    """

    def __init__(self, message: str, provider: str = "", status_code: int = 0, body: str = ""):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body


class PersistenceError(BrandScopeError):
    """Writing the resource set for a request failed."""

    def __init__(self, message: str, request_id: int | None = None):
        super().__init__(message)
        self.request_id = request_id


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)
