"""Feedback loop: score each finished picture and report the reward.

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

# Third-party (alphabetical)
import logfire

# Local imports (core first, then alphabetical)
from randraw.core.models import FeedbackRequest, Recipe
from randraw.core.outcome import Ok
from randraw.adapters.services import ServiceClient
from randraw.infra.instrumentation import Metrics
from randraw.infra.logging import get_logger
from randraw.recipes.bandit import BanditRepository
from randraw.render.surface import RasterSurface

from .scoring import score_raster

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("FeedbackLoop", "FeedbackResult")

logger = get_logger("feedback.loop")


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass(frozen=True, slots=True)
class FeedbackResult:
    reward: float
    stored_locally: bool
    reported: bool


@dataclass
class FeedbackLoop:
    """Scores completed cycles and feeds the reward to the bandits.

    Both sinks are optional and best-effort: the local repository keeps this
    client's own statistics, the service merges the reward into the shared
    state.
    """

    repository: BanditRepository | None = None
    services: ServiceClient | None = None

    async def record(self, recipe: Recipe, raster: RasterSurface) -> FeedbackResult:
        with logfire.span("feedback.record", cycle_index=recipe.cycle_index, generator=recipe.generator_id):
            reward = score_raster(raster)
            stored = False
            if self.repository is not None:
                stored = isinstance(await self.repository.record(recipe.generator_id, reward), Ok)
            reported = False
            if self.services is not None:
                request = FeedbackRequest(cycle_index=recipe.cycle_index, generator_id=recipe.generator_id, reward=reward)
                reported = isinstance(await self.services.send_feedback(request), Ok)
            if not (stored or reported):
                logger.debug("feedback_not_persisted", cycle_index=recipe.cycle_index)
            Metrics.record_feedback(recipe.cycle_index, recipe.generator_id, reward, stored or reported)
            return FeedbackResult(reward=reward, stored_locally=stored, reported=reported)
