"""Exceptions raised by transit adapters.

Business outcomes (no trips, service down, unknown location) are reported
through result statuses. Exceptions are reserved for genuine faults.
"""


class TransitAdapterError(Exception):
    """Base exception for transit adapter errors."""

    pass


class UnsupportedOperationError(TransitAdapterError):
    """Raised when an operation is invoked that the adapter does not declare."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Unsupported operation: {operation}")
        self.operation = operation


class ParserError(TransitAdapterError):
    """Raised when a backend response cannot be understood."""

    def __init__(self, message: str, url: str | None = None, page: str | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.page = page

    def __str__(self) -> str:
        text = super().__str__()
        if self.url:
            text = f"{text} (url: {self.url})"
        return text


class UnknownErrorCodeError(ParserError):
    """Raised when a method-level error code is missing from the error taxonomy."""

    def __init__(
        self,
        method: str,
        code: str,
        text: str | None = None,
        url: str | None = None,
        page: str | None = None,
    ) -> None:
        super().__init__(f"{method}: unknown error {code} ({text})", url, page)
        self.method = method
        self.code = code
        self.text = text


class TransportError(TransitAdapterError):
    """Raised when the backend cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RefDecodeError(TransitAdapterError):
    """Raised when a persisted trip or journey reference cannot be restored."""

    pass
