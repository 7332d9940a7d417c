"""
Error kinds and the result type used inside the tracker core.

Ledger and repository operations report their outcome as a ``Result``
carrying either a value or an ``ErrorKind``. The public operations adapt
that result to the plain sentinel values (``None``, ``False``, ``0`` or an
empty list) callers rely on, while tests and internal code can still tell
a storage failure apart from an operation that had nothing to do.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    STORAGE = "storage"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"


class StorageError(Exception):
    """Raised by storage backends when a query or connection fails."""


class HabitValidationError(ValueError):
    """Raised when habit fields are rejected before any write happens."""


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = "") -> "Result[T]":
        return cls(error=error, message=message)

    def unwrap_or(self, default: T) -> T:
        """Return the value on success, ``default`` on failure or ``None``."""
        if self.error is not None or self.value is None:
            return default
        return self.value
