"""Exception types raised by the API wrapper."""


class ApiWrapperError(RuntimeError):
    """Base class for every failure surfaced by this package."""

    code = "API_WRAPPER_ERROR"


class ConfigurationError(ApiWrapperError):
    """A connection entry or setting is missing or incomplete."""

    code = "MISSING_CONNECTION"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class AuthError(ApiWrapperError):
    """The credential source could not supply a token."""

    code = "AUTH_FAILED"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StateError(ApiWrapperError):
    """An operation was called before the wrapper reached the required state."""

    code = "NO_RESPONSE"


class DecodeError(ApiWrapperError):
    """The response body is not valid JSON."""

    code = "DECODE_FAILED"


class TransportError(ApiWrapperError):
    """The HTTP client failed before a response was received."""

    code = "TRANSPORT_FAILED"
