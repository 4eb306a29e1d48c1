"""
Error types for the abattoir ledger.

This module defines all exception types raised by the core:
- LedgerError: Base exception (generic error)
- InvalidPayloadError: Caller-supplied data violates a precondition
- NotFoundError: A referenced entity does not exist
- StorageError: The SQLite layer failed (I/O, corruption)
- RecordTooLargeError: A record encodes beyond the store's size bound

Invariants:
    - All errors inherit from LedgerError
    - InvalidPayloadError and NotFoundError are raised before any store mutation
    - Error codes are stable; adapters map them to transport status codes
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "LEDGER_ERROR"
        self.details = details or {}


class InvalidPayloadError(LedgerError):
    """Payload validation failed.

    Raised when:
    - Required field is missing or empty
    - Numeric field is out of range
    - Status value is not allowed for the record kind
    """

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code="INVALID_PAYLOAD",
            details={"field": field_name, "errors": errors or []},
        )
        self.field_name = field_name
        self.errors = errors or []


class NotFoundError(LedgerError):
    """Referenced entity does not exist."""

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: int,
    ) -> None:
        super().__init__(
            message,
            code="NOT_FOUND",
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
            },
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class StorageError(LedgerError):
    """The storage layer failed; fatal for the current call."""

    def __init__(self, message: str, store: str | None = None) -> None:
        super().__init__(message, code="STORAGE_ERROR", details={"store": store})
        self.store = store


class RecordTooLargeError(LedgerError):
    """Encoded record exceeds the store's byte bound.

    Attributes:
        kind: Record kind being encoded
        size: Encoded size in bytes
        max_size: Configured bound
    """

    def __init__(self, kind: str, size: int, max_size: int) -> None:
        super().__init__(
            f"{kind} record encodes to {size} bytes, limit is {max_size}",
            code="RECORD_TOO_LARGE",
            details={"kind": kind, "size": size, "max_size": max_size},
        )
        self.kind = kind
        self.size = size
        self.max_size = max_size
