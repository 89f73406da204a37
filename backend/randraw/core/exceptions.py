"""Exception hierarchy for randraw.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

# Standard library (alphabetical)
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .types import ErrorCategory, RecoveryStrategy

__all__ = (
    'RandrawError',
    'PlanningError',
    'UnknownGeneratorError',
    'InvalidCanvasError',
    'StoreError',
    'StoreUnavailableError',
    'MalformedPayloadError',
    'ServiceError',
    'ClockSyncError',
    'classify_error',
)


class RandrawError(Exception):
    """Base exception for all randraw errors.

    Attributes:
        context: Additional context for debugging.
        recoverable: Whether the display can continue with a fallback.
    """

    def __init__(self, message: str, *, context: dict[str, Any] | None = None, recoverable: bool = True) -> None:
        self.context = context or {}
        self.recoverable = recoverable
        super().__init__(message)


# =============================================================================
# Planning Exceptions
# =============================================================================
class PlanningError(RandrawError):
    """Base exception for stroke planning errors."""


class UnknownGeneratorError(PlanningError):
    """Raised when a generator id is not in the registry."""

    def __init__(self, generator_id: str) -> None:
        self.generator_id = generator_id
        super().__init__(
            f'Unknown generator: {generator_id}', context={'generator_id': generator_id}, recoverable=False
        )


class InvalidCanvasError(PlanningError):
    """Raised when a plan is requested for a degenerate canvas."""

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        super().__init__(
            f'Canvas must have positive size, got {width}x{height}', context={'width': width, 'height': height}
        )


# =============================================================================
# Storage Exceptions
# =============================================================================
class StoreError(RandrawError):
    """Base exception for key-value store errors."""


class StoreUnavailableError(StoreError):
    """Raised when the key-value store cannot be reached."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f'Store {operation} failed: {message}', context={'operation': operation})


class MalformedPayloadError(StoreError):
    """Raised when cached or remote data cannot be decoded."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f'Malformed payload for {key}: {message}', context={'key': key})


# =============================================================================
# Service Exceptions
# =============================================================================
class ServiceError(RandrawError):
    """Raised when a remote service call fails."""

    def __init__(self, service: str, message: str, *, status_code: int | None = None) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(
            f'[{service}] {message}', context={'service': service, 'status_code': status_code}
        )


class ClockSyncError(ServiceError):
    """Raised when the time oracle returns an unusable response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__('time', message, status_code=status_code)


def classify_error(exc: Exception) -> tuple[ErrorCategory, RecoveryStrategy]:
    """Classify errors into recovery categories and strategies."""
    if isinstance(exc, UnknownGeneratorError):
        return 'fatal', 'abort'
    if isinstance(exc, MalformedPayloadError):
        return 'recoverable', 'skip'
    if isinstance(exc, (StoreUnavailableError, ServiceError)):
        return 'transient', 'fallback'
    if isinstance(exc, RandrawError):
        return ('recoverable', 'fallback') if exc.recoverable else ('fatal', 'abort')
    return 'transient', 'retry'
