"""
Error types for roadwork route generation and dispatch.
"""

from __future__ import annotations


class RoadworkError(Exception):
    """Base exception for all roadwork errors."""

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class ConfigurationError(RoadworkError):
    """
    Raised when routes cannot be generated from the given setup.

    Examples:
    - No HTTP server given to the Api
    - Missing or malformed base model
    - Options that do not match the generate options shape
    - Registering an empty authentication plugin
    """

    pass


class RecordNotFoundError(RoadworkError):
    """
    Raised by model implementations when a record does not exist.

    Handlers render it as a 404 reply.
    """

    status_code = 404

    def __init__(self, message: str = "Not found", detail: str | None = None):
        super().__init__(message, detail)


class AuthorizationError(RoadworkError):
    """
    Raised when a request fails a route's auth block.

    ``status_code`` is 401 when the caller did not authenticate and 403 when
    the caller lacks every required scope.
    """

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code
