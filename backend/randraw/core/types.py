"""Type aliases and type variables for randraw.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from typing import Any, Literal, TypeVar

# Third-party (alphabetical)
from typing_extensions import TypeAliasType

# =============================================================================
# Section 2: Module Type Variables
# =============================================================================
T = TypeVar("T")
"""Type variable for outcome payloads."""

# =============================================================================
# Section 3: Module Exports
# =============================================================================
__all__ = (
    "CycleIndex",
    "Seed",
    "Color",
    "Palette",
    "JsonDict",
    "ResolverMode",
    "RecipeSource",
    "RenderPhase",
    "FlowMode",
    "ErrorCategory",
    "RecoveryStrategy",
    "T",
)

# =============================================================================
# Section 4: Type Aliases
# =============================================================================
CycleIndex = TypeAliasType("CycleIndex", int)
Seed = TypeAliasType("Seed", int)
Color = TypeAliasType("Color", str)

Palette = TypeAliasType("Palette", tuple[str, ...])
JsonDict = TypeAliasType("JsonDict", dict[str, Any])

ResolverMode = TypeAliasType("ResolverMode", Literal["deterministic", "adaptive", "service"])
RecipeSource = TypeAliasType("RecipeSource", Literal["cache", "policy", "deterministic", "service"])
RenderPhase = TypeAliasType("RenderPhase", Literal["idle", "drawing", "cooldown"])
FlowMode = TypeAliasType(
    "FlowMode",
    Literal[
        "radial-orbit",
        "sinusoidal-vine",
        "off-center-eddy",
        "horizontal-wave",
        "petal-radial",
        "crossed-weave",
    ],
)
ErrorCategory = TypeAliasType(
    "ErrorCategory",
    Literal["transient", "recoverable", "fatal"],
)
RecoveryStrategy = TypeAliasType(
    "RecoveryStrategy",
    Literal["retry", "fallback", "skip", "abort"],
)
