"""Custom exception hierarchy for the loyalty proxy."""

from typing import Any


class ProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        message: Human readable error message
        status_code: HTTP status returned to the caller
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def payload(self) -> Any:
        """Body sent back to the caller."""
        return {"message": self.message}


class MissingField(ProxyError):
    """A required request field is absent."""

    status_code = 400


class InvalidPayload(ProxyError):
    """Request body is not valid JSON or has the wrong shape."""

    status_code = 400


class RequestTooLarge(ProxyError):
    """Request body exceeds size limit."""

    status_code = 413


class AuthError(ProxyError):
    """Raised when the platform adapter cannot resolve the caller.

    Attributes:
        detail: Error payload returned by the adapter (relayed as-is)
        platform: Name of the platform adapter that failed
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        detail: Any = None,
        platform: str | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.detail = detail
        self.platform = platform

    def payload(self) -> Any:
        if self.detail is not None:
            return self.detail
        return {"message": self.message}


class UnknownPlatform(AuthError):
    """Configured platform has no registered adapter."""

    def __init__(self, platform: str) -> None:
        super().__init__(f"No user adapter registered for platform '{platform}'", platform=platform)


class UpstreamTransportError(ProxyError):
    """Raised when the upstream call fails before a response arrives."""

    def __init__(self, message: str, error: str = "RequestError") -> None:
        super().__init__(message, status_code=500)
        self.error = error

    def payload(self) -> Any:
        return {"message": self.message, "error": self.error}


class UpstreamTimeoutError(UpstreamTransportError):
    """Raised when an upstream request times out."""


class BadUpstreamResponse(ProxyError):
    """Upstream answered with a body that is not decodable JSON."""

    status_code = 502

    def __init__(self, message: str, upstream_status: int) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status

    def payload(self) -> Any:
        return {"message": self.message, "upstream_status": self.upstream_status}
