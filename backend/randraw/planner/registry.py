"""Generator registry and the planning entry point.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from collections.abc import Callable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Final

# Local imports (core first, then alphabetical)
from randraw.core.exceptions import InvalidCanvasError, UnknownGeneratorError
from randraw.core.hashing import Lcg
from randraw.core.models import Plan
from randraw.infra.instrumentation import traced

from .flow import flow_builder, plan_scatter
from .landscapes import plan_city, plan_meadow, plan_mountains, plan_waves
from .motifs import (
    plan_car,
    plan_face,
    plan_house,
    plan_lighthouse,
    plan_mountain_cabin,
    plan_person,
    plan_person_field,
    plan_sailboat,
)
from .primitives import choose_palette

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("GENERATORS", "GeneratorId", "PlanBuilder", "get_builder", "plan")

PlanBuilder = Callable[[float, float, int, tuple[str, ...]], Plan]
"""``(width, height, seed, palette) -> Plan``."""


# =============================================================================
# Enumerations
# =============================================================================
class GeneratorId(str, Enum):
    """Every generator a recipe may name."""

    PERSON = "person"
    PERSON_FIELD = "person-field"
    FACE = "face"
    HOUSE = "house"
    LIGHTHOUSE = "lighthouse"
    SAILBOAT = "sailboat"
    CAR = "car"
    MOUNTAIN_CABIN = "mountain-cabin"
    MOUNTAINS = "mountains"
    CITY = "city"
    WAVES = "waves"
    MEADOW = "meadow"
    ABSTRACT_FLOW = "abstract-flow"
    FLOW_ORBIT = "flow-orbit"
    FLOW_VINE = "flow-vine"
    FLOW_EDDY = "flow-eddy"
    FLOW_WAVE = "flow-wave"
    FLOW_PETAL = "flow-petal"
    FLOW_WEAVE = "flow-weave"


# =============================================================================
# Section 3: Constants
# =============================================================================
GENERATORS: Final[Mapping[GeneratorId, PlanBuilder]] = MappingProxyType(
    {
        GeneratorId.PERSON: plan_person,
        GeneratorId.PERSON_FIELD: plan_person_field,
        GeneratorId.FACE: plan_face,
        GeneratorId.HOUSE: plan_house,
        GeneratorId.LIGHTHOUSE: plan_lighthouse,
        GeneratorId.SAILBOAT: plan_sailboat,
        GeneratorId.CAR: plan_car,
        GeneratorId.MOUNTAIN_CABIN: plan_mountain_cabin,
        GeneratorId.MOUNTAINS: plan_mountains,
        GeneratorId.CITY: plan_city,
        GeneratorId.WAVES: plan_waves,
        GeneratorId.MEADOW: plan_meadow,
        GeneratorId.ABSTRACT_FLOW: plan_scatter,
        GeneratorId.FLOW_ORBIT: flow_builder("flow-orbit", "radial-orbit"),
        GeneratorId.FLOW_VINE: flow_builder("flow-vine", "sinusoidal-vine"),
        GeneratorId.FLOW_EDDY: flow_builder("flow-eddy", "off-center-eddy"),
        GeneratorId.FLOW_WAVE: flow_builder("flow-wave", "horizontal-wave"),
        GeneratorId.FLOW_PETAL: flow_builder("flow-petal", "petal-radial"),
        GeneratorId.FLOW_WEAVE: flow_builder("flow-weave", "crossed-weave"),
    }
)


# =============================================================================
# Section 12: Functions
# =============================================================================
def get_builder(generator_id: str) -> PlanBuilder:
    """Return the builder for ``generator_id``.

    Raises:
        UnknownGeneratorError: If the id is not registered.
    """
    try:
        return GENERATORS[GeneratorId(generator_id)]
    except ValueError:
        raise UnknownGeneratorError(generator_id) from None


@traced("planner.plan", record_result=False)
def plan(generator_id: str, width: float, height: float, seed: int) -> Plan:
    """Build the stroke plan for a recipe on a ``width`` x ``height`` canvas.

    Pure: equal arguments always give an equal plan. The palette is the first
    draw of the seeded stream, so ``Recipe.palette_id`` always names the
    palette the plan uses.

    Raises:
        UnknownGeneratorError: If ``generator_id`` is not registered.
        InvalidCanvasError: If either dimension is not positive.
    """
    builder = get_builder(generator_id)
    if not (width > 0 and height > 0):
        raise InvalidCanvasError(width, height)
    _, palette = choose_palette(Lcg(seed))
    return builder(width, height, seed, palette)
