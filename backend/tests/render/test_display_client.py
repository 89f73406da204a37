"""Tests for the display client's render loop.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

import asyncio
import gc
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from randraw.adapters.kv import FileKeyValueStore, InMemoryKeyValueStore
from randraw.core.constants import BANDIT_KEY
from randraw.core.models import BanditState, ResolvedRecipe
from randraw.core.settings import RandrawSettings
from randraw.feedback.loop import FeedbackLoop
from randraw.recipes.bandit import BanditRepository
from randraw.recipes.resolver import (
    AdaptiveResolver,
    DeterministicResolver,
    RecipeResolver,
    ServiceRecipeResolver,
    resolve_deterministic,
)
from randraw.render.client import FALLBACK_MESSAGE, DisplayClient
from randraw.render.governor import PerformanceGovernor
from randraw.render.surface import RecordingSurface
from randraw.timing.scheduler import CycleScheduler

__all__ = ()

pytestmark = pytest.mark.anyio


class _Clock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class _GatedResolver:
    """Resolver that waits until released."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.calls: list[int] = []

    async def resolve(self, cycle_index: int) -> ResolvedRecipe:
        self.calls.append(cycle_index)
        await self.gate.wait()
        return resolve_deterministic(cycle_index)


class _HangingResolver:
    """Resolver that never answers."""

    def __init__(self) -> None:
        self.calls: list[int] = []

    async def resolve(self, cycle_index: int) -> ResolvedRecipe:
        self.calls.append(cycle_index)
        await asyncio.Event().wait()
        return resolve_deterministic(cycle_index)


class _FailingResolver:
    async def resolve(self, cycle_index: int) -> ResolvedRecipe:
        raise RuntimeError("resolver crashed")


def _client(
    clock: _Clock,
    surface: RecordingSurface,
    resolver: object | None = None,
    feedback: FeedbackLoop | None = None,
    resolve_timeout_ms: int = 5_000,
) -> DisplayClient:
    return DisplayClient(
        scheduler=CycleScheduler(epoch_ms=0, draw_ms=40_000),
        resolver=resolver or RecipeResolver(DeterministicResolver()),  # type: ignore[arg-type]
        surface=surface,
        governor=PerformanceGovernor(throughput=1_000.0),
        feedback=feedback,
        now=clock,
        resolve_timeout_ms=resolve_timeout_ms,
    )


async def _settle() -> None:
    for _ in range(3):
        await asyncio.sleep(0)


class TestDisplayClient:
    """Tests for the tick-driven state machine."""

    async def test_first_ticks_start_a_caught_up_session(self, recording_surface: RecordingSurface) -> None:
        """A late joiner catches up to the current progress in one burst."""
        client = _client(_Clock(10_000), recording_surface)

        await client.tick()
        assert client.resolving is True
        await _settle()
        status = await client.tick()

        session = client.session
        assert session is not None
        assert session.cycle_index == 0
        assert session.drawn == len(session.plan) // 4
        assert recording_surface.backgrounds == [session.plan.background_color]
        assert len(recording_surface.strokes) == session.drawn
        assert status.generator_id == resolve_deterministic(0).recipe.generator_id
        assert status.degraded is False
        assert status.global_count == 1

    async def test_progress_reveals_more(self, recording_surface: RecordingSurface) -> None:
        """Later ticks in the same cycle extend the reveal."""
        clock = _Clock(0)
        client = _client(clock, recording_surface)
        await client.tick()
        await _settle()
        await client.tick()

        clock.now = 20_000
        status = await client.tick()

        assert client.session is not None
        assert client.session.drawn == len(client.session.plan) // 2
        assert status.progress == 0.5

    async def test_cycle_change_flushes_and_scores(self, recording_surface: RecordingSurface) -> None:
        """The old picture completes and is scored once before the next cycle starts."""
        store = InMemoryKeyValueStore()
        clock = _Clock(1_000)
        client = _client(clock, recording_surface, feedback=FeedbackLoop(repository=BanditRepository(store)))
        await client.tick()
        await _settle()
        await client.tick()
        first = client.session
        assert first is not None

        clock.now = 41_000
        await client.tick()

        assert first.complete is True
        assert len(recording_surface.strokes) == len(first.plan)
        state = BanditState.from_json(store.snapshot()[BANDIT_KEY])
        assert state.stats_for(first.resolved.recipe.generator_id).pulls == 1

        await _settle()
        await client.tick()
        assert client.session is not None
        assert client.session.cycle_index == 1

    async def test_resize_replans_without_resolving(self, recording_surface: RecordingSurface) -> None:
        """Resizing rebuilds the current cycle's plan for the new canvas."""
        clock = _Clock(30_000)
        client = _client(clock, recording_surface)
        await client.tick()
        await _settle()
        await client.tick()
        before = client.session
        assert before is not None

        client.resize(320, 240)
        assert client.generation == 1
        await client.tick()

        after = client.session
        assert after is not None
        assert client.resolving is False
        assert after.resolved == before.resolved
        assert after.plan != before.plan
        assert recording_surface.resizes == [(320, 240)]
        assert len(recording_surface.backgrounds) == 2

    async def test_resize_discards_pending_resolution(self, recording_surface: RecordingSurface) -> None:
        """A resolution started before a resize is never applied."""
        resolver = _GatedResolver()
        client = _client(_Clock(5_000), recording_surface, resolver=resolver)

        await client.tick()
        await _settle()
        client.resize(500, 400)
        assert client.resolving is False

        await client.tick()
        resolver.gate.set()
        await _settle()
        await client.tick()

        assert resolver.calls == [0, 0]
        assert client.session is not None
        assert client.generation == 1

    async def test_resolver_crash_degrades(self, recording_surface: RecordingSurface) -> None:
        """An escaping resolver error shows the deterministic recipe with a notice."""
        client = _client(_Clock(0), recording_surface, resolver=_FailingResolver())

        await client.tick()
        await _settle()
        status = await client.tick()

        assert status.degraded is True
        assert status.message == FALLBACK_MESSAGE
        assert client.session is not None
        assert client.session.resolved == resolve_deterministic(0, degraded=True)

    async def test_outdated_resolution_is_ignored(self, recording_surface: RecordingSurface) -> None:
        """A recipe for a cycle that already ended is not drawn."""
        resolver = _GatedResolver()
        clock = _Clock(39_000)
        client = _client(clock, recording_surface, resolver=resolver)

        await client.tick()
        clock.now = 40_500
        resolver.gate.set()
        await _settle()
        await client.tick()

        assert client.session is None
        await client.tick()
        await _settle()
        assert resolver.calls == [0, 1]

    async def test_close_stops_ticking(self, recording_surface: RecordingSurface) -> None:
        """Closed clients cancel pending work and ignore ticks."""
        resolver = _GatedResolver()
        client = _client(_Clock(0), recording_surface, resolver=resolver)
        await client.tick()

        await client.close()
        await client.tick()

        assert client.resolving is False
        assert client.session is None


class TestStalledResolution:
    """Tests for resolutions that are slow, hung or failed."""

    async def test_stalled_resolution_falls_back_at_deadline(self, recording_surface: RecordingSurface) -> None:
        """A resolver that never answers yields the fallback drawing once the deadline passes."""
        resolver = _HangingResolver()
        clock = _Clock(10_000)
        client = _client(clock, recording_surface, resolver=resolver, resolve_timeout_ms=2_000)

        await client.tick()
        await _settle()
        clock.now = 11_000
        await client.tick()
        assert client.resolving is True
        assert client.session is None

        clock.now = 20_000
        status = await client.tick()

        session = client.session
        assert session is not None
        assert session.resolved == resolve_deterministic(0, degraded=True)
        assert session.drawn == len(session.plan) // 2
        assert status.degraded is True
        assert status.message == FALLBACK_MESSAGE
        assert client.resolving is False
        await client.close()

    async def test_hung_resolver_still_draws_every_cycle(self, recording_surface: RecordingSurface) -> None:
        """Three cycles with a hung resolver still produce three fresh pictures."""
        resolver = _HangingResolver()
        clock = _Clock(10_000)
        client = _client(clock, recording_surface, resolver=resolver, resolve_timeout_ms=2_000)

        for now in range(10_000, 131_000, 1_000):
            clock.now = now
            await client.tick()
            await _settle()

        assert resolver.calls == [0, 1, 2, 3]
        assert client.session is not None
        assert client.session.cycle_index == 3
        assert len(recording_surface.backgrounds) == 4
        await client.close()

    async def test_cycle_change_abandons_pending_resolution(self, recording_surface: RecordingSurface) -> None:
        """A resolution still running when its cycle ends is dropped for the current cycle."""
        resolver = _HangingResolver()
        clock = _Clock(39_000)
        client = _client(clock, recording_surface, resolver=resolver)

        await client.tick()
        await _settle()
        clock.now = 40_500
        await client.tick()
        await _settle()

        assert resolver.calls == [0, 1]
        assert client.resolving is True
        await client.close()

    async def test_close_after_failed_resolution(self, recording_surface: RecordingSurface) -> None:
        """A resolution that failed before the next tick does not escape close."""
        client = _client(_Clock(0), recording_surface, resolver=_FailingResolver())

        await client.tick()
        await _settle()
        await client.close()

        assert client.resolving is False
        assert client.session is None

    async def test_failed_resolution_dropped_on_resize_is_retrieved(
        self, recording_surface: RecordingSurface
    ) -> None:
        """The event loop never reports an unretrieved exception for a dropped resolution."""
        loop = asyncio.get_running_loop()
        reported: list[dict[str, object]] = []
        previous = loop.get_exception_handler()
        loop.set_exception_handler(lambda _loop, context: reported.append(context))
        try:
            client = _client(_Clock(0), recording_surface, resolver=_FailingResolver())
            await client.tick()
            await _settle()
            client.resize(320, 240)
            await _settle()
            gc.collect()
        finally:
            loop.set_exception_handler(previous)

        assert reported == []


class TestFromSettings:
    """Tests for wiring a display from settings."""

    def test_service_mode(
        self, tmp_path: Path, recording_surface: RecordingSurface, make_client: Callable[..., httpx.AsyncClient]
    ) -> None:
        """Service mode resolves and reports through the service; local statistics go to bandit_path."""
        settings = RandrawSettings(
            _env_file=None,
            mode="service",
            bandit_path=str(tmp_path / "brain.json"),
            frame_interval_ms=40,
            resolve_timeout_ms=1_500,
        )
        http = make_client(lambda request: httpx.Response(404))

        client = DisplayClient.from_settings(settings, recording_surface, http=http)

        assert isinstance(client.resolver, RecipeResolver)
        assert isinstance(client.resolver.strategy, ServiceRecipeResolver)
        assert client.clock is not None
        assert client.clock.client is http
        assert client.frame_interval_ms == 40
        assert client.resolve_timeout_ms == 1_500
        assert client.scheduler == CycleScheduler.from_settings(settings)
        assert client.feedback is not None
        assert client.feedback.services is not None
        assert client.feedback.repository is not None
        store = client.feedback.repository.store
        assert isinstance(store, FileKeyValueStore)
        assert store.path == tmp_path / "brain.json"

    def test_adaptive_mode_uses_shared_store(
        self,
        tmp_path: Path,
        recording_surface: RecordingSurface,
        memory_store: InMemoryKeyValueStore,
        make_client: Callable[..., httpx.AsyncClient],
    ) -> None:
        """Adaptive mode reads the shared store and remembers the last generator locally."""
        settings = RandrawSettings(_env_file=None, mode="adaptive", bandit_path=str(tmp_path / "brain.json"))

        client = DisplayClient.from_settings(
            settings, recording_surface, http=make_client(lambda request: httpx.Response(404)), store=memory_store
        )

        assert isinstance(client.resolver, RecipeResolver)
        strategy = client.resolver.strategy
        assert isinstance(strategy, AdaptiveResolver)
        assert strategy.store is memory_store
        assert isinstance(strategy.local_store, FileKeyValueStore)
        assert client.feedback is not None
        assert client.feedback.services is None

    async def test_owns_http_client_built_from_api_base_url(
        self, tmp_path: Path, recording_surface: RecordingSurface
    ) -> None:
        """Without a client one is built for api_base_url and closed with the display."""
        settings = RandrawSettings(
            _env_file=None, api_base_url="https://randraw.example/", bandit_path=str(tmp_path / "brain.json")
        )

        client = DisplayClient.from_settings(settings, recording_surface)
        assert client.clock is not None
        http = client.clock.client
        assert str(http.base_url).rstrip("/") == "https://randraw.example"

        await client.close()
        assert http.is_closed is True

    async def test_borrowed_http_client_stays_open(
        self, tmp_path: Path, recording_surface: RecordingSurface, make_client: Callable[..., httpx.AsyncClient]
    ) -> None:
        settings = RandrawSettings(_env_file=None, bandit_path=str(tmp_path / "brain.json"))
        http = make_client(lambda request: httpx.Response(404))

        client = DisplayClient.from_settings(settings, recording_surface, http=http)
        await client.close()

        assert http.is_closed is False
        await http.aclose()
