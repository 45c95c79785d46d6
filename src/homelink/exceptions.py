"""Exceptions raised by homelink."""


class HomelinkError(Exception):
    """Base exception for all homelink errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class NotFoundError(HomelinkError):
    """No device record matches the given id or query."""

    def __init__(self, message: str = "Device not found", details: str | None = None):
        super().__init__(message, details)


class UnsupportedError(HomelinkError):
    """No control backend exists for the device's current binding."""

    def __init__(
        self, message: str = "Operation not supported", details: str | None = None
    ):
        super().__init__(message, details)


class BackendError(HomelinkError):
    """A protocol backend or presence source failed or was unreachable."""

    def __init__(self, backend: str, details: str | None = None):
        super().__init__(f"{backend} backend failed", details)
        self.backend = backend


class ValidationError(HomelinkError):
    """User input rejected by a device field validator."""

    pass
