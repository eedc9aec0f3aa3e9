"""Exception types raised by qcore."""

from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .validator import ValidationError


class QCoreError(Exception):
    """Base class for all qcore errors."""


class InvalidGateError(QCoreError, ValueError):
    """Raised when a gate is malformed or does not fit its circuit/state."""


class InvalidQubitCountError(QCoreError, ValueError):
    """Raised when a register size is outside the supported range."""


class InvalidStateError(QCoreError, ValueError):
    """Raised when an amplitude vector or its parameters are malformed."""


class OperationError(QCoreError, RuntimeError):
    """Generic execution-time failure of ``operation``."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.message = message


class NoCompatibleBackendError(OperationError):
    """Raised when no backend in a pool can execute a circuit."""

    def __init__(self, message: str) -> None:
        super().__init__("backend selection", message)


class OperationCancelledError(OperationError):
    """Raised when a cooperative cancellation request is observed."""


class CircuitValidationError(QCoreError, ValueError):
    """Raised by :func:`qcore.validator.ensure_valid` with every violation."""

    def __init__(self, errors: Sequence["ValidationError"]) -> None:
        from .validator import format_validation_errors

        self.errors = list(errors)
        super().__init__(format_validation_errors(self.errors))


class NotImplementedFeatureError(QCoreError, NotImplementedError):
    """A requested subroutine has no backend-executable realisation yet."""

    def __init__(self, feature: str, hint: str | None = None) -> None:
        text = f"{feature} is not implemented"
        if hint:
            text = f"{text} ({hint})"
        super().__init__(text)
        self.feature = feature
        self.hint = hint


__all__ = [
    "QCoreError",
    "InvalidGateError",
    "InvalidQubitCountError",
    "InvalidStateError",
    "OperationError",
    "NoCompatibleBackendError",
    "OperationCancelledError",
    "CircuitValidationError",
    "NotImplementedFeatureError",
]
