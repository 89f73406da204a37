"""Deterministic stroke planning.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Local imports (core first, then alphabetical)
from .primitives import StrokeBuffer, choose_palette, palette_for_seed, palette_id_for_seed
from .registry import GENERATORS, GeneratorId, get_builder, plan

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "GENERATORS",
    "GeneratorId",
    "StrokeBuffer",
    "choose_palette",
    "get_builder",
    "palette_for_seed",
    "palette_id_for_seed",
    "plan",
)
