"""Display client: the render loop that keeps one screen in step with the world.

Each tick re-reads the synchronized clock and the cycle grid; nothing else
drives state changes. A new cycle flushes and scores the old picture, then
resolves the new recipe in a background task while the current frame stays
on screen. Once the recipe arrives, the plan is built, densified for the
level, fitted to this machine and caught up to the current progress. A
resolution that outlives its deadline or its cycle is abandoned and the
deterministic recipe is drawn instead.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""


from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

# Third-party (alphabetical)
import httpx
import logfire

# Local imports (core first, then alphabetical)
from randraw.core.constants import DEFAULT_RESOLVE_TIMEOUT_MS, GLOBAL_SALT
from randraw.core.exceptions import PlanningError, classify_error
from randraw.core.models import CycleInfo, DisplayStatus, ResolvedRecipe
from randraw.core.protocols import DrawingSurface, KeyValueStore, RecipeSourceProtocol
from randraw.core.settings import KvSettings, RandrawSettings
from randraw.core.types import RenderPhase
from randraw.adapters.kv import FileKeyValueStore, RestKeyValueStore, create_shared_store
from randraw.adapters.services import ServiceClient, create_service_http_client
from randraw.feedback.loop import FeedbackLoop
from randraw.feedback.scoring import rasterize
from randraw.infra.instrumentation import Metrics
from randraw.infra.logging import get_logger
from randraw.planner.registry import plan as build_plan
from randraw.recipes.bandit import BanditRepository
from randraw.recipes.resolver import RecipeResolver, resolve_deterministic
from randraw.timing.clock import ClockSynchronizer, system_now_ms
from randraw.timing.scheduler import CycleScheduler

from .governor import PerformanceGovernor, brush_kit_for, complexity_for_level, densify_plan
from .renderer import ProgressiveRenderer, RenderSession
from .surface import RasterSurface

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("DisplayClient",)

FALLBACK_MESSAGE = "Showing the local fallback drawing"

logger = get_logger("render.client")


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass(frozen=True, slots=True)
class _PendingResolution:
    generation: int
    cycle_index: int
    requested_at_ms: int
    task: asyncio.Task[ResolvedRecipe]


# =============================================================================
# Section 11: Classes
# =============================================================================
class DisplayClient:
    """Single-surface render loop.

    Example:
        >>> client = DisplayClient.from_settings(RandrawSettings(), RasterSurface(1280, 800))
        >>> await client.run()
    """

    def __init__(
        self,
        *,
        scheduler: CycleScheduler,
        resolver: RecipeSourceProtocol,
        surface: DrawingSurface,
        governor: PerformanceGovernor,
        clock: ClockSynchronizer | None = None,
        feedback: FeedbackLoop | None = None,
        now: Callable[[], int] | None = None,
        frame_interval_ms: int = 16,
        resolve_timeout_ms: int = DEFAULT_RESOLVE_TIMEOUT_MS,
        salt: int = GLOBAL_SALT,
    ) -> None:
        self.scheduler = scheduler
        self.resolver = resolver
        self.surface = surface
        self.governor = governor
        self.clock = clock
        self.feedback = feedback
        self.frame_interval_ms = frame_interval_ms
        self.resolve_timeout_ms = resolve_timeout_ms
        self.salt = salt
        self.renderer = ProgressiveRenderer(surface)
        self.session: RenderSession | None = None
        self.phase: RenderPhase = "idle"
        self._now = now or (clock.now_ms if clock is not None else system_now_ms)
        self._generation = 0
        self._pending: _PendingResolution | None = None
        self._replan: ResolvedRecipe | None = None
        self._status = DisplayStatus()
        self._closed = False
        self._closers: list[Callable[[], Awaitable[None]]] = []

    @classmethod
    def from_settings(
        cls,
        settings: RandrawSettings,
        surface: DrawingSurface,
        *,
        http: httpx.AsyncClient | None = None,
        store: KeyValueStore | None = None,
        now: Callable[[], int] | None = None,
    ) -> DisplayClient:
        """Wire a display from settings.

        The clock and, in service mode, recipes and feedback go through
        ``http`` (a client for ``settings.api_base_url`` is created and owned
        when omitted). Adaptive mode uses ``store``, or the REST store named by
        the ``KV_REST_API_*`` variables. This client's own bandit statistics
        live in the file at ``settings.bandit_path``.
        """
        closers: list[Callable[[], Awaitable[None]]] = []
        if http is None:
            http = create_service_http_client(settings)
            closers.append(http.aclose)
        if store is None and settings.mode == "adaptive":
            store = create_shared_store(
                KvSettings(), timeout=settings.http_timeout, ttl_seconds=settings.recipe_ttl_seconds
            )
            if isinstance(store, RestKeyValueStore):
                closers.append(store.aclose)

        local_store = FileKeyValueStore(settings.bandit_path)
        services = ServiceClient(http)
        client = cls(
            scheduler=CycleScheduler.from_settings(settings),
            resolver=RecipeResolver.from_settings(
                settings, store=store, local_store=local_store, services=services
            ),
            surface=surface,
            governor=PerformanceGovernor.from_settings(settings),
            clock=ClockSynchronizer(http),
            feedback=FeedbackLoop(
                repository=BanditRepository(local_store),
                services=services if settings.mode == "service" else None,
            ),
            now=now,
            frame_interval_ms=settings.frame_interval_ms,
            resolve_timeout_ms=settings.resolve_timeout_ms,
            salt=settings.global_salt,
        )
        client._closers = closers
        return client

    @property
    def status(self) -> DisplayStatus:
        return self._status

    @property
    def generation(self) -> int:
        """Bumped by every resize and by close; stale work compares against it."""
        return self._generation

    @property
    def resolving(self) -> bool:
        return self._pending is not None

    async def start(self) -> None:
        """Synchronize the clock once before the first tick."""
        if self.clock is not None:
            await self.clock.sync()

    async def run(self) -> None:
        """Tick until ``close`` is called."""
        await self.start()
        while not self._closed:
            await self.tick()
            await asyncio.sleep(self.frame_interval_ms / 1000)

    async def tick(self) -> DisplayStatus:
        """Advance the display by one frame."""
        if self._closed:
            return self._status
        now = self._now()
        info = self.scheduler.info(now)
        self.phase = "drawing" if info.in_drawing_phase else "cooldown"

        if self._pending is not None and self._collect_pending(info, now):
            return self._status

        session = self.session
        if session is not None and session.cycle_index == info.cycle_index:
            session.drawn = self.renderer.reveal(session.plan, info.progress, session.drawn)
            self._status = self._status.model_copy(update={"progress": info.progress})
            return self._status

        if self._replan is not None and self._replan.recipe.cycle_index == info.cycle_index:
            resolved, self._replan = self._replan, None
            self._begin_session(resolved, info)
            return self._status
        self._replan = None

        if session is not None:
            await self._finish(session)
            self.session = None
        self._request(info.cycle_index, now)
        return self._status

    def resize(self, width: float, height: float) -> None:
        """Resize the surface; the current cycle is re-planned and caught up on the next tick."""
        self._invalidate()
        if self.session is not None:
            self._replan = self.session.resolved
            self.session = None
        self.surface.resize(width, height)

    async def close(self) -> None:
        """Stop the loop, discard any in-flight resolution and release owned clients."""
        self._closed = True
        pending = self._pending
        self._invalidate()
        if pending is not None:
            await asyncio.wait({pending.task})
        closers, self._closers = self._closers, []
        for aclose in closers:
            await aclose()

    # =========================================================================
    # Private Methods
    # =========================================================================
    def _request(self, cycle_index: int, now: int) -> None:
        task = asyncio.create_task(self.resolver.resolve(cycle_index), name=f"resolve-{cycle_index}")
        self._pending = _PendingResolution(self._generation, cycle_index, now, task)

    def _invalidate(self) -> None:
        self._generation += 1
        if self._pending is not None:
            _discard(self._pending.task)
            self._pending = None

    def _collect_pending(self, info: CycleInfo, now: int) -> bool:
        """Settle the pending resolution; returns True when this tick has nothing more to do."""
        pending = self._pending
        if pending is None:
            return False
        task = pending.task
        if not task.done():
            if pending.cycle_index != info.cycle_index:
                logger.info("resolution_abandoned", cycle_index=pending.cycle_index, current=info.cycle_index)
                _discard(task)
                self._pending = None
                return False
            if now - pending.requested_at_ms < self.resolve_timeout_ms:
                return True
            logger.warning(
                "resolution_timed_out", cycle_index=pending.cycle_index, waited_ms=now - pending.requested_at_ms
            )
            _discard(task)
            self._pending = None
            self._begin_session(resolve_deterministic(info.cycle_index, self.salt, degraded=True), info)
            return True

        self._pending = None
        if pending.generation != self._generation or task.cancelled():
            logger.debug("stale_resolution_discarded", cycle_index=pending.cycle_index)
            return True
        exc = task.exception()
        if exc is not None:
            category, strategy = classify_error(exc)
            logger.warning(
                "resolution_failed",
                cycle_index=pending.cycle_index,
                error=str(exc),
                category=category,
                strategy=strategy,
            )
            resolved = resolve_deterministic(pending.cycle_index, self.salt, degraded=True)
        else:
            resolved = task.result()
        if pending.cycle_index != info.cycle_index:
            # the cycle ended while resolving; the next tick requests the current one
            logger.info("resolution_outdated", cycle_index=pending.cycle_index, current=info.cycle_index)
            return True
        self._begin_session(resolved, info)
        return True
    def _begin_session(self, resolved: ResolvedRecipe, info: CycleInfo) -> None:
        recipe = resolved.recipe
        with logfire.span("client.begin_session", cycle_index=recipe.cycle_index, generator=recipe.generator_id):
            try:
                plan = build_plan(recipe.generator_id, self.surface.width, self.surface.height, recipe.seed)
            except PlanningError as exc:
                logger.warning("planning_failed", generator=recipe.generator_id, error=str(exc))
                resolved = resolve_deterministic(recipe.cycle_index, self.salt, degraded=True)
                recipe = resolved.recipe
                plan = build_plan(recipe.generator_id, self.surface.width, self.surface.height, recipe.seed)
            plan = densify_plan(plan, complexity_for_level(recipe.level), recipe.seed)
            kit = brush_kit_for(recipe.level, recipe.generator_id)
            plan = self.governor.fit(plan, self.scheduler.draw_ms, kit=kit, seed=recipe.seed)
            session = RenderSession(resolved=resolved, plan=plan, kit=kit, throughput=self.governor.throughput)
            session.drawn = self.renderer.catch_up(plan, info.progress)
            self.session = session
            Metrics.record_cycle_start(recipe.cycle_index, recipe.generator_id, len(plan), info.progress)
            self._status = DisplayStatus(
                degraded=resolved.degraded,
                message=FALLBACK_MESSAGE if resolved.degraded else None,
                generator_id=recipe.generator_id,
                progress=info.progress,
                global_count=resolved.global_count,
            )

    async def _finish(self, session: RenderSession) -> None:
        """Complete the old picture, then score it once."""
        session.drawn = self.renderer.flush(session.plan, session.drawn)
        if self.feedback is None or session.scored:
            return
        session.scored = True
        surface = self.surface
        raster = (
            surface
            if isinstance(surface, RasterSurface)
            else rasterize(session.plan, surface.width, surface.height)
        )
        await self.feedback.record(session.resolved.recipe, raster)


# =============================================================================
# Section 12: Functions
# =============================================================================
def _discard(task: asyncio.Task[ResolvedRecipe]) -> None:
    """Cancel ``task`` and make sure its outcome is retrieved whenever it settles."""
    task.cancel()
    task.add_done_callback(_log_discarded)


def _log_discarded(task: asyncio.Task[ResolvedRecipe]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("discarded_resolution_failed", task=task.get_name(), error=str(exc))
