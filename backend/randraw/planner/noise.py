"""Seeded 2-D value noise.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
import math

# Local imports (core first, then alphabetical)
from randraw.core.hashing import Lcg, mix

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("ValueNoise",)

_TABLE_SIZE = 256
_NOISE_SALT = 0x5BD1E995


# =============================================================================
# Section 11: Classes
# =============================================================================
class ValueNoise:
    """Lattice value noise with smoothstep interpolation.

    The lattice is built from its own stream so sampling never disturbs the
    generator's random sequence. Values lie in ``[0, 1]``.
    """

    __slots__ = ("_perm", "_values")

    def __init__(self, seed: int) -> None:
        rng = Lcg(mix(seed, _NOISE_SALT))
        perm = list(range(_TABLE_SIZE))
        # Fisher-Yates driven by the seeded stream
        for i in range(_TABLE_SIZE - 1, 0, -1):
            j = int(rng.next() * (i + 1))
            perm[i], perm[j] = perm[j], perm[i]
        self._perm = perm + perm
        self._values = [rng.next() for _ in range(_TABLE_SIZE)]

    def sample(self, x: float, y: float) -> float:
        x0, y0 = math.floor(x), math.floor(y)
        fx, fy = _smooth(x - x0), _smooth(y - y0)
        xi, yi = x0 & (_TABLE_SIZE - 1), y0 & (_TABLE_SIZE - 1)
        v00 = self._lattice(xi, yi)
        v10 = self._lattice(xi + 1, yi)
        v01 = self._lattice(xi, yi + 1)
        v11 = self._lattice(xi + 1, yi + 1)
        top = v00 + (v10 - v00) * fx
        bottom = v01 + (v11 - v01) * fx
        return top + (bottom - top) * fy

    def fractal(self, x: float, y: float, octaves: int = 3) -> float:
        """Sum of octaves, renormalized to ``[0, 1]``."""
        total, amplitude, frequency, norm = 0.0, 1.0, 1.0, 0.0
        for _ in range(octaves):
            total += self.sample(x * frequency, y * frequency) * amplitude
            norm += amplitude
            amplitude *= 0.5
            frequency *= 2.0
        return total / norm

    def _lattice(self, xi: int, yi: int) -> float:
        return self._values[self._perm[self._perm[xi & (_TABLE_SIZE - 1)] + (yi & (_TABLE_SIZE - 1))]]


def _smooth(t: float) -> float:
    return t * t * (3.0 - 2.0 * t)
