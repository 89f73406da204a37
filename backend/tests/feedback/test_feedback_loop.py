"""Tests for the feedback loop.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

import json
from collections.abc import Callable

import httpx
import pytest
from dirty_equals import IsFloat

from randraw.adapters.kv import DisabledKeyValueStore, InMemoryKeyValueStore
from randraw.adapters.services import ServiceClient
from randraw.core.constants import BANDIT_KEY
from randraw.core.models import BanditState, Recipe
from randraw.feedback.loop import FeedbackLoop
from randraw.feedback.scoring import rasterize, score_raster
from randraw.planner import plan
from randraw.recipes.bandit import BanditRepository
from randraw.recipes.resolver import resolve_deterministic
from randraw.render.surface import RasterSurface

__all__ = ()

pytestmark = pytest.mark.anyio


def _finished_picture() -> tuple[Recipe, RasterSurface]:
    recipe = resolve_deterministic(4).recipe
    raster = rasterize(plan(recipe.generator_id, 320, 240, recipe.seed), 320, 240, resolution=32)
    return recipe, raster


class TestFeedbackLoop:
    """Tests for scoring and reporting completed cycles."""

    async def test_stores_locally(self, memory_store: InMemoryKeyValueStore) -> None:
        """The reward is merged into the local bandit state."""
        recipe, raster = _finished_picture()

        result = await FeedbackLoop(repository=BanditRepository(memory_store)).record(recipe, raster)

        assert result.reward == IsFloat(ge=0.0, le=1.0)
        assert result.reward == score_raster(raster)
        assert result.stored_locally is True
        assert result.reported is False
        state = BanditState.from_json(memory_store.snapshot()[BANDIT_KEY])
        assert state.stats_for(recipe.generator_id).reward_sum == pytest.approx(result.reward)

    async def test_reports_to_service(self, make_client: Callable[..., httpx.AsyncClient]) -> None:
        """The reward is posted for the recipe's cycle and generator."""
        recipe, raster = _finished_picture()
        bodies: list[dict[str, object]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "stored": True})

        async with make_client(handler) as client:
            result = await FeedbackLoop(services=ServiceClient(client)).record(recipe, raster)

        assert result.reported is True
        assert bodies[0]["cycleIndex"] == 4
        assert bodies[0]["generatorId"] == recipe.generator_id

    async def test_failures_are_best_effort(self, failing_client: httpx.AsyncClient) -> None:
        """Unavailable sinks never raise."""
        recipe, raster = _finished_picture()
        loop = FeedbackLoop(repository=BanditRepository(DisabledKeyValueStore()), services=ServiceClient(failing_client))

        result = await loop.record(recipe, raster)

        assert result.stored_locally is False
        assert result.reported is False
