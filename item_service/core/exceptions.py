"""Exception hierarchy for the item service.

HTTP-facing errors derive from :class:`AppException` and are rendered as
RFC 7807 Problem Details by the handlers in ``item_service.app``.
Infrastructure errors that never reach a client (publish and cache failures)
derive from plain :class:`Exception`.
"""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
        raise AppException(
            status_code=404,
            detail="Item 42 not found",
            type="item-not-found",
            extra={"item_id": 42},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for HTTP status code.

        Args:
            status_code: HTTP status code.

        Returns:
            Human-readable title for the status code.
        """
        titles = {
            400: "Bad Request",
            404: "Not Found",
            409: "Conflict",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class NotFoundException(AppException):
    """Raised when a requested resource does not exist.

    Example:
        raise NotFoundException(
            detail="Item 42 not found",
            type="item-not-found",
            extra={"item_id": 42},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "not-found",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=404,
            detail=detail,
            type=type,
            title="Not Found",
            instance=instance,
            extra=extra,
        )


class TransactionError(AppException):
    """The primary store could not begin or commit a unit of work.

    Raised for connectivity loss and write conflicts. The transaction is left
    open so the caller can retry or roll back explicitly.
    """

    def __init__(self, detail: str = "The operation could not be committed", *, operation: str) -> None:
        self.operation = operation
        super().__init__(
            status_code=503,
            detail=detail,
            type="transaction-failed",
            title="Service Unavailable",
            extra={"operation": operation},
        )


class SerializationError(AppException):
    """A domain event could not be encoded for the outbox."""

    def __init__(self, detail: str, *, event_type: str | None = None) -> None:
        self.event_type = event_type
        super().__init__(
            status_code=500,
            detail=detail,
            type="event-serialization-failed",
            title="Internal Server Error",
        )


class PublishError(Exception):
    """The broker rejected or failed to accept a single outbox message."""

    def __init__(self, message: str, *, event_type: str | None = None) -> None:
        self.event_type = event_type
        super().__init__(message)


class CacheError(Exception):
    """The response cache backend is unavailable or returned bad data."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)


__all__ = [
    "AppException",
    "CacheError",
    "NotFoundException",
    "PublishError",
    "SerializationError",
    "TransactionError",
]
