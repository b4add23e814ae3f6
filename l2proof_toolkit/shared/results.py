"""
Result types for explicit success/failure tracking in proof construction.

The proof assembler raises typed exceptions; the facade in proofs.manager
converts them into Result values so callers (CLI, scripts) can branch on
success without losing the original error.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from l2proof_toolkit.shared.exceptions import NonRetryableException

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Severity levels for processing errors."""

    ERROR = "error"  # Request failed, may be retried later
    CRITICAL = "critical"  # Request can never succeed as issued


@dataclass
class ProcessingError:
    """
    Represents a single processing error with context.

    Attributes:
        source: Stage that generated the error (e.g., "state_root", "text_proof")
        message: Human-readable error description
        severity: How severe the error is
        context: Additional context like resolver, node, record key
        exception: Original exception if available
    """

    source: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None

    @classmethod
    def from_exception(
        cls,
        source: str,
        exception: Exception,
        context: Optional[Dict[str, Any]] = None,
    ) -> "ProcessingError":
        """Build an error whose severity follows the exception category."""
        severity = (
            ErrorSeverity.CRITICAL
            if isinstance(exception, NonRetryableException)
            else ErrorSeverity.ERROR
        )
        return cls(
            source=source,
            message=f"{type(exception).__name__}: {exception}",
            severity=severity,
            context=context or {},
            exception=exception,
        )


@dataclass
class Result(Generic[T]):
    """
    Result type that carries success/failure information.

    Attributes:
        success: Whether the operation succeeded
        data: The result data if successful
        errors: List of errors encountered
    """

    success: bool
    data: Optional[T] = None
    errors: List[ProcessingError] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Create a successful result with data."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ProcessingError) -> "Result[T]":
        """Create a failed result with an error."""
        return cls(success=False, errors=[error])

    def get_error_messages(self) -> List[str]:
        """Get all error messages as strings."""
        return [e.message for e in self.errors]

    def unwrap(self) -> T:
        """
        Return the data, or raise the first error.

        The original exception is re-raised when one was captured, so
        callers can still catch e.g. StateRootNotFound.
        """
        if self.success:
            return self.data
        for error in self.errors:
            if error.exception is not None:
                raise error.exception
        raise RuntimeError("; ".join(self.get_error_messages()))
