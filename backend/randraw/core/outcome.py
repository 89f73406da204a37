"""Explicit results for best-effort operations.

Network and storage calls never raise into the render path. They return
either ``Ok`` carrying the value or ``Unavailable`` carrying the reason, and
the caller picks its fallback.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from dataclasses import dataclass
from typing import Generic, TypeVar

# Third-party (alphabetical)
from typing_extensions import TypeAliasType

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("Ok", "Unavailable", "Outcome", "value_or")

T = TypeVar("T")


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful best-effort call."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Unavailable:
    """Failed or disabled best-effort call."""

    reason: str

    @property
    def ok(self) -> bool:
        return False


Outcome = TypeAliasType("Outcome", Ok[T] | Unavailable, type_params=(T,))


# =============================================================================
# Section 12: Functions
# =============================================================================
def value_or(outcome: Ok[T] | Unavailable, default: T) -> T:
    """Unwrap an outcome, returning ``default`` when unavailable."""
    if isinstance(outcome, Ok):
        return outcome.value
    return default
