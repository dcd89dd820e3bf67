"""Core exceptions for the proxy.

Every failure a request can hit maps to exactly one subclass here, and each
subclass knows its HTTP status and JSON body.
"""

from typing import Any, Optional


class ProxyError(Exception):
    """Base exception for proxy errors."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}


class ConfigurationError(ProxyError):
    """Raised when required secrets are missing from the environment."""

    def __init__(self, error: str, missing: list[str]) -> None:
        keys = " and ".join(missing)
        super().__init__(f"Please set {keys} in your environment variables")
        self.error = error
        self.missing = list(missing)


class InvalidRequestError(ProxyError):
    """Raised when the request body cannot be parsed or has the wrong shape."""

    status_code = 400
    error = "Invalid JSON in request body"


class MissingParameterError(ProxyError):
    """Raised when a required request field is absent or empty."""

    status_code = 400

    def __init__(self, parameter: str) -> None:
        super().__init__(f"Missing required parameter: {parameter}")
        self.parameter = parameter

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class UpstreamStatusError(ProxyError):
    """Raised when the upstream API answers with a non-success status."""

    def __init__(
        self,
        status_code: int,
        reason: str,
        details: str,
        label: str = "API Error",
    ) -> None:
        super().__init__(f"{label}: {reason}")
        self.status_code = status_code
        self.reason = reason
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details}


class UpstreamTimeoutError(ProxyError):
    """Raised when the upstream call exceeds its wall-clock bound."""

    status_code = 504
    error = "Gateway Timeout"

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        super().__init__(message)
        self.timeout = timeout


class UpstreamTransportError(ProxyError):
    """Raised on network-level failures talking to the upstream API."""

    error = "Request Failed"


class InternalProxyError(ProxyError):
    """Catch-all for unexpected failures inside an endpoint."""
