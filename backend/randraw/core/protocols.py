"""Protocol definitions for external collaborators.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import ResolvedRecipe, Segment
    from .outcome import Ok, Unavailable

__all__ = ("DrawingSurface", "KeyValueStore", "RecipeSourceProtocol")


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for the best-effort key-value collaborator.

    Implementations never raise for transport or storage failures; they return
    ``Unavailable`` so callers can fall back to deterministic behavior. The
    same protocol backs the shared store and the local bandit store.

    Example Implementation:
        >>> class DictStore:
        ...     async def get(self, key: str) -> Ok[str | None] | Unavailable:
        ...         return Ok(self._data.get(key))
    """

    @abstractmethod
    async def get(self, key: str) -> Ok[str | None] | Unavailable:
        """Read a value.

        Args:
            key: Store key.

        Returns:
            ``Ok(None)`` for a missing key, ``Ok(value)`` when present.
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> Ok[None] | Unavailable:
        """Write a value (last write wins)."""
        ...

    @abstractmethod
    async def increment(self, key: str) -> Ok[int] | Unavailable:
        """Atomically increment an integer counter and return the new value."""
        ...


@runtime_checkable
class DrawingSurface(Protocol):
    """Protocol for the canvas-like surface strokes are drawn onto.

    Coordinates are logical; any device-pixel scaling is the surface's concern.
    """

    @property
    @abstractmethod
    def width(self) -> float:
        """Logical width."""
        ...

    @property
    @abstractmethod
    def height(self) -> float:
        """Logical height."""
        ...

    @abstractmethod
    def fill_background(self, color: str) -> None:
        """Clear the surface and fill it with ``color``."""
        ...

    @abstractmethod
    def stroke(self, segment: Segment) -> None:
        """Draw one stroke primitive."""
        ...

    @abstractmethod
    def resize(self, width: float, height: float) -> None:
        """Change the logical size; contents are discarded."""
        ...


@runtime_checkable
class RecipeSourceProtocol(Protocol):
    """Anything that turns a cycle index into a recipe without raising."""

    @abstractmethod
    async def resolve(self, cycle_index: int) -> ResolvedRecipe:
        """Resolve the recipe for ``cycle_index``."""
        ...
