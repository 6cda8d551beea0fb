"""
Custom Exceptions.

Client-specific exception classes for consistent error handling.
Every error raised by the client derives from TFEError and carries a
machine-readable code alongside the human-readable message.
"""


class TFEError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ConfigError(TFEError):
    """Raised when the client configuration is missing or invalid."""

    def __init__(self, message: str = "Invalid client config") -> None:
        super().__init__(message, code="CFG_INVALID_CONFIG")


class TransportError(TFEError):
    """Raised when the request could not be sent or the response not read."""

    def __init__(self, message: str = "Transport error") -> None:
        super().__init__(message, code="NET_TRANSPORT_ERROR")


class NotFoundError(TFEError):
    """Raised when the API answers 404."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class UnexpectedStatusError(TFEError):
    """Raised when the API answers with a non-2xx status other than 404."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Unexpected status code: {status_code}\n\nBody:\n{body}",
            code="HTTP_UNEXPECTED_STATUS",
        )


class DecodeError(TFEError):
    """Raised when a response payload is malformed or does not fit the target model."""

    def __init__(self, message: str = "Could not decode payload") -> None:
        super().__init__(message, code="DATA_DECODE_ERROR")


class EncodeError(TFEError):
    """Raised when an input value cannot be encoded as a JSON:API document."""

    def __init__(self, message: str = "Could not encode payload") -> None:
        super().__init__(message, code="DATA_ENCODE_ERROR")
