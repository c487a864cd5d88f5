"""Error taxonomy shared by providers, the gateway handler and transports."""
from __future__ import annotations


class GatewayError(Exception):
    """Base error carrying the HTTP status reported to the caller."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(GatewayError):
    """Bad or missing input. Never reaches a provider."""

    status_code = 400


class MethodNotAllowedError(GatewayError):
    status_code = 405


class ConfigurationError(GatewayError):
    """No credential configured for the provider; an operator must fix it."""

    status_code = 500


class UpstreamRequestError(GatewayError):
    """Provider rejected the request; status and message are passed through."""


class UpstreamModelUnavailable(UpstreamRequestError):
    """Provider rejected the model itself. Consumed by the fallback loop."""


class UpstreamEmptyError(GatewayError):
    status_code = 502


class UpstreamUnreachableError(GatewayError):
    status_code = 500
