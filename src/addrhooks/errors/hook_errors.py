"""HookError — base exception class for all addrhooks errors."""

from __future__ import annotations


class HookError(Exception):
    """Base error for all callback registry and listener operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "hook-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class SerializationError(HookError):
    """Stored JSON could not be encoded or decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500, code="serialization-error")


class DeliveryError(HookError):
    """Transport-level failure while posting a callback."""

    def __init__(self, message: str, *, url: str = "") -> None:
        super().__init__(message, status_code=502, code="delivery-error")
        self.url = url
