"""
Domain errors raised by the catalog core.

Route handlers never catch these; the handlers registered in main.py turn
them into JSON responses.
"""


class CineScopeError(Exception):
    """Base class for all application-level errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UpstreamFetchError(CineScopeError):
    """The TMDB listing or detail call failed (network, HTTP error, rate limit)."""

    def __init__(self, endpoint: str, detail: str = "", status_code: int = None):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(f"TMDB API error for {endpoint}: {detail}" if detail else f"TMDB API error for {endpoint}")


class NotFoundError(UpstreamFetchError):
    """TMDB confirmed that the requested id does not exist."""

    def __init__(self, endpoint: str, detail: str = "Resource not found"):
        super().__init__(endpoint, detail, status_code=404)


class ValidationError(CineScopeError):
    """The caller supplied an unusable query."""
    pass
