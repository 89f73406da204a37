"""Generator categories in deterministic rotation order.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from typing import Final

# Local imports (core first, then alphabetical)
from randraw.planner.registry import GeneratorId

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("ABSTRACTS", "ALL_GENERATORS", "CATEGORIES", "LANDSCAPES", "SUBJECTS")

# =============================================================================
# Section 3: Constants
# =============================================================================
SUBJECTS: Final[tuple[str, ...]] = (
    GeneratorId.PERSON.value,
    GeneratorId.PERSON_FIELD.value,
    GeneratorId.FACE.value,
    GeneratorId.HOUSE.value,
    GeneratorId.LIGHTHOUSE.value,
    GeneratorId.SAILBOAT.value,
    GeneratorId.CAR.value,
    GeneratorId.MOUNTAIN_CABIN.value,
)
LANDSCAPES: Final[tuple[str, ...]] = (
    GeneratorId.MOUNTAINS.value,
    GeneratorId.CITY.value,
    GeneratorId.WAVES.value,
    GeneratorId.MEADOW.value,
)
ABSTRACTS: Final[tuple[str, ...]] = (
    GeneratorId.ABSTRACT_FLOW.value,
    GeneratorId.FLOW_ORBIT.value,
    GeneratorId.FLOW_VINE.value,
    GeneratorId.FLOW_EDDY.value,
    GeneratorId.FLOW_WAVE.value,
    GeneratorId.FLOW_PETAL.value,
    GeneratorId.FLOW_WEAVE.value,
)

CATEGORIES: Final[tuple[tuple[str, ...], ...]] = (SUBJECTS, LANDSCAPES, ABSTRACTS)
"""Cycle ``i`` draws from ``CATEGORIES[i % 3]``."""

ALL_GENERATORS: Final[tuple[str, ...]] = SUBJECTS + LANDSCAPES + ABSTRACTS
"""Catalog order; also the bandit's tie-break order."""
