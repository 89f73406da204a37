"""Recipe resolution and generator selection.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

from .bandit import ArmSummary, BanditRepository, Ucb1Policy
from .catalog import ABSTRACTS, ALL_GENERATORS, CATEGORIES, LANDSCAPES, SUBJECTS
from .resolver import (
    AdaptiveResolver,
    DeterministicResolver,
    RecipeResolver,
    ServiceRecipeResolver,
    build_recipe,
    deterministic_generator,
    recipe_key,
    resolve_deterministic,
)

__all__ = (
    "ABSTRACTS",
    "ALL_GENERATORS",
    "CATEGORIES",
    "LANDSCAPES",
    "SUBJECTS",
    "AdaptiveResolver",
    "ArmSummary",
    "BanditRepository",
    "DeterministicResolver",
    "RecipeResolver",
    "ServiceRecipeResolver",
    "Ucb1Policy",
    "build_recipe",
    "deterministic_generator",
    "recipe_key",
    "resolve_deterministic",
)
