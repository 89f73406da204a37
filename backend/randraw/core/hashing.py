"""Integer hashing and seeded random streams.

Both helpers must agree bit-for-bit across clients: the mix function derives
the per-cycle seed, and the linear congruential generator drives every seeded
choice the planner makes.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from collections.abc import Sequence
from typing import TypeVar

# Local imports (core first, then alphabetical)
from .constants import GLOBAL_SALT, LEVEL_CYCLES, LEVEL_SALT_MULTIPLIER, MIX_MULTIPLIER, MIX_PRE_XOR, UINT32_MASK

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("Lcg", "level_for_cycle", "mix", "seed_for_cycle")

T = TypeVar("T")

_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223
_LCG_MODULUS = 4294967296


# =============================================================================
# Section 11: Classes
# =============================================================================
class Lcg:
    """32-bit linear congruential generator returning floats in ``[0, 1)``."""

    __slots__ = ("_state",)

    def __init__(self, seed: int) -> None:
        self._state = seed & UINT32_MASK

    def __call__(self) -> float:
        return self.next()

    def next(self) -> float:
        self._state = (self._state * _LCG_MULTIPLIER + _LCG_INCREMENT) & UINT32_MASK
        return self._state / _LCG_MODULUS

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.next()

    def randint(self, low: int, high: int) -> int:
        """Integer in ``[low, high]`` inclusive."""
        return low + int(self.next() * (high - low + 1))

    def choice(self, items: Sequence[T]) -> T:
        return items[int(self.next() * len(items))]


# =============================================================================
# Section 12: Functions
# =============================================================================
def mix(a: int, b: int) -> int:
    """Combine two 32-bit values: multiplicative mixing of ``a``, then XOR with ``b``."""
    left = (a ^ MIX_PRE_XOR) & UINT32_MASK
    return ((left * MIX_MULTIPLIER) & UINT32_MASK) ^ (b & UINT32_MASK)


def level_for_cycle(cycle_index: int) -> int:
    return cycle_index // LEVEL_CYCLES


def seed_for_cycle(cycle_index: int, salt: int = GLOBAL_SALT) -> int:
    """Seed for a cycle; the salt is perturbed by the cycle's level."""
    level = level_for_cycle(cycle_index)
    level_salt = salt ^ ((level * LEVEL_SALT_MULTIPLIER) & UINT32_MASK)
    return mix(cycle_index, level_salt)
