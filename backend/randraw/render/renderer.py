"""Progressive reveal of a plan onto a drawing surface.

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
from dataclasses import dataclass

# Local imports (core first, then alphabetical)
from randraw.core.models import Plan, ResolvedRecipe
from randraw.core.protocols import DrawingSurface
from randraw.infra.instrumentation import operation_span

from .governor import BrushKit

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("ProgressiveRenderer", "RenderSession")


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass
class RenderSession:
    """The cycle currently on screen and how far its reveal has got."""

    resolved: ResolvedRecipe
    plan: Plan
    kit: BrushKit
    throughput: float
    drawn: int = 0
    scored: bool = False

    @property
    def cycle_index(self) -> int:
        return self.resolved.recipe.cycle_index

    @property
    def complete(self) -> bool:
        return self.drawn >= len(self.plan)


# =============================================================================
# Section 11: Classes
# =============================================================================
class ProgressiveRenderer:
    """Draws plan segments strictly in index order.

    The renderer keeps no cursor of its own; callers pass the count already
    drawn and store the returned count, which never decreases.
    """

    def __init__(self, surface: DrawingSurface) -> None:
        self.surface = surface

    def reveal(self, plan: Plan, progress: float, already_drawn: int) -> int:
        """Draw ``[already_drawn, floor(n * progress))`` and return the new cursor."""
        clamped = min(1.0, max(0.0, progress))
        target = math.floor(len(plan.segments) * clamped)
        for index in range(already_drawn, target):
            self.surface.stroke(plan.segments[index])
        return max(already_drawn, target)

    def catch_up(self, plan: Plan, progress: float) -> int:
        """Fill the background once, then draw everything due by ``progress`` in one burst."""
        with operation_span("renderer.catch_up", segments=len(plan), progress=progress) as span:
            self.surface.fill_background(plan.background_color)
            drawn = self.reveal(plan, progress, 0)
            span.set_attribute("drawn", drawn)
            return drawn

    def flush(self, plan: Plan, drawn: int) -> int:
        """Draw every segment not yet drawn."""
        return self.reveal(plan, 1.0, drawn)
