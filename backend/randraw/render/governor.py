"""Performance governor: fit a plan to what this machine can draw in time.

The governor benchmarks stroke throughput once, estimates how much drawing
work each segment costs at the cycle's level, and thins or densifies the plan
so the reveal finishes inside the drawing phase.

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
import random
import time
from collections.abc import Callable
from dataclasses import dataclass

# Third-party (alphabetical)
import logfire

# Local imports (core first, then alphabetical)
from randraw.core.constants import (
    BENCHMARK_STROKES,
    DEFAULT_SAFETY_MARGIN,
    DEFAULT_THROUGHPUT,
    MAX_COMPLEXITY,
    MAX_SEGMENTS,
    MIN_OPS_PER_SEGMENT,
    MIN_SEGMENTS,
    THIN_KEEP_FRACTION,
    UINT32_MASK,
)
from randraw.core.hashing import Lcg
from randraw.core.models import Plan, Segment
from randraw.core.protocols import DrawingSurface
from randraw.core.settings import RandrawSettings
from randraw.infra.instrumentation import Metrics
from randraw.infra.logging import get_logger

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "BrushKit",
    "PerformanceGovernor",
    "brush_kit_for",
    "complexity_for_level",
    "densify_plan",
    "estimate_ops_per_segment",
    "measure_throughput",
    "segment_budget",
    "thin_plan",
)

DENSIFY_SALT = 0xABC0FFEE

_HATCH_MOTIFS = ("mountain", "city", "meadow", "tree", "person")
_SPLATTER_MOTIFS = ("lighthouse", "waves", "abstract", "volcano")

logger = get_logger("render.governor")


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass(frozen=True, slots=True)
class BrushKit:
    """Painterly layers a segment is drawn with at a given level."""

    detail: float
    use_dry: bool
    use_wash: bool
    use_splatter: bool
    use_hatch: bool
    hatch_angle_deg: float


# =============================================================================
# Section 11: Classes
# =============================================================================
class PerformanceGovernor:
    """Holds the measured throughput and budget limits for one client.

    Example:
        >>> governor = PerformanceGovernor.from_settings(settings, throughput=12.0)
        >>> fitted = governor.fit(plan, settings.draw_ms, kit=brush_kit_for(3, 'waves'), seed=recipe.seed)
    """

    def __init__(
        self,
        throughput: float | None = None,
        *,
        safety_margin: float = DEFAULT_SAFETY_MARGIN,
        min_segments: int = MIN_SEGMENTS,
        max_segments: int = MAX_SEGMENTS,
        surface_factory: Callable[[], DrawingSurface] | None = None,
    ) -> None:
        self._throughput = throughput
        self.safety_margin = safety_margin
        self.min_segments = min_segments
        self.max_segments = max_segments
        self.surface_factory = surface_factory

    @classmethod
    def from_settings(
        cls,
        settings: RandrawSettings,
        *,
        throughput: float | None = None,
        surface_factory: Callable[[], DrawingSurface] | None = None,
    ) -> PerformanceGovernor:
        return cls(
            throughput,
            safety_margin=settings.safety_margin,
            min_segments=settings.min_segments,
            max_segments=settings.max_segments,
            surface_factory=surface_factory,
        )

    @property
    def throughput(self) -> float:
        """Measured once, on first use."""
        if self._throughput is None:
            if self.surface_factory is None:
                self._throughput = DEFAULT_THROUGHPUT
            else:
                self._throughput = measure_throughput(self.surface_factory)
        return self._throughput

    def budget(self, frame_budget_ms: float, kit: BrushKit) -> int:
        return segment_budget(
            self.throughput,
            frame_budget_ms,
            estimate_ops_per_segment(kit),
            safety_margin=self.safety_margin,
            min_segments=self.min_segments,
            max_segments=self.max_segments,
        )

    def fit(self, plan: Plan, frame_budget_ms: float, *, kit: BrushKit, seed: int) -> Plan:
        """Thin ``plan`` to the budget for ``kit``; plans already within budget pass through."""
        budget = self.budget(frame_budget_ms, kit)
        Metrics.record_throughput(self.throughput, budget)
        return thin_plan(plan, budget, seed)


# =============================================================================
# Section 12: Functions
# =============================================================================
def brush_kit_for(level: int, generator_id: str) -> BrushKit:
    """Brush layers unlock as the level rises; hatching and splatter depend on the motif."""
    lv = max(0, level)
    return BrushKit(
        detail=min(3.0, 1 + lv * 0.18),
        use_dry=lv >= 1,
        use_wash=lv >= 2,
        use_splatter=lv >= 3 and any(name in generator_id for name in _SPLATTER_MOTIFS),
        use_hatch=lv >= 2 and any(name in generator_id for name in _HATCH_MOTIFS),
        hatch_angle_deg=30 + (lv % 3) * 15,
    )


def estimate_ops_per_segment(kit: BrushKit) -> float:
    """Approximate drawing operations spent on one segment."""
    ops = 6 + 10 * kit.detail
    if kit.use_dry:
        ops += 8 * kit.detail
    if kit.use_wash:
        ops += 6
    if kit.use_splatter:
        ops += 10
    if kit.use_hatch:
        ops += 8
    return ops


def complexity_for_level(level: int) -> float:
    return min(MAX_COMPLEXITY, 1 + 0.12 * max(0, level))


def measure_throughput(
    surface_factory: Callable[[], DrawingSurface], strokes: int = BENCHMARK_STROKES
) -> float:
    """Strokes per millisecond on an offscreen surface.

    Any failure, including a zero-duration measurement, yields the default.
    """
    with logfire.span("governor.measure_throughput", strokes=strokes):
        try:
            surface = surface_factory()
            start = time.perf_counter()
            for i in range(strokes):
                x, y = (i % 40) * 6 + 2, (i // 40) * 3 + 1
                surface.stroke(Segment(x1=x, y1=y, x2=x + 3, y2=y + 1, width=2, opacity=0.5, color="#000000"))
            elapsed_ms = (time.perf_counter() - start) * 1000
        except (ArithmeticError, TypeError, ValueError) as exc:
            logger.warning("throughput_benchmark_failed", error=str(exc))
            return DEFAULT_THROUGHPUT
        if elapsed_ms <= 0:
            return DEFAULT_THROUGHPUT
        return strokes / max(1.0, elapsed_ms)


def segment_budget(
    throughput: float,
    frame_budget_ms: float,
    ops_per_segment: float,
    *,
    safety_margin: float = DEFAULT_SAFETY_MARGIN,
    min_segments: int = MIN_SEGMENTS,
    max_segments: int = MAX_SEGMENTS,
) -> int:
    """Segments that fit in the drawing phase, clamped to ``[min_segments, max_segments]``."""
    raw = math.floor(throughput * frame_budget_ms * safety_margin / max(MIN_OPS_PER_SEGMENT, ops_per_segment))
    return min(max_segments, max(min_segments, raw))


def thin_plan(plan: Plan, budget: int, seed: int) -> Plan:
    """Reduce ``plan`` to exactly ``budget`` segments, preserving order.

    The leading ``THIN_KEEP_FRACTION`` of the budget is kept as-is so the
    composition's first strokes survive; the tail is selection-sampled so the
    survivors stay spread across the rest of the plan.
    """
    segments = plan.segments
    if len(segments) <= budget:
        return plan
    if budget <= 0:
        return plan.with_segments(())
    rng = random.Random(seed)
    head = min(budget, math.floor(budget * THIN_KEEP_FRACTION))
    kept = list(segments[:head])
    remaining = len(segments) - head
    for segment in segments[head:]:
        needed = budget - len(kept)
        if needed <= 0:
            break
        if rng.random() * remaining < needed:
            kept.append(segment)
        remaining -= 1
    return plan.with_segments(kept)


def densify_plan(plan: Plan, factor: float, seed: int) -> Plan:
    """Add faint jittered companions to each stroke.

    Each original is followed by ``floor(factor) - 1`` companions (at most
    one) plus one more with probability ``frac(factor)``.
    """
    if factor <= 1.01 or not plan.segments:
        return plan
    rng = Lcg((seed ^ DENSIFY_SALT) & UINT32_MASK or 1)
    copies = min(2, max(1, math.floor(factor)))
    frac = min(1.0, max(0.0, factor - math.floor(factor)))
    jitter = 0.8 * (factor - 1)
    out: list[Segment] = []
    for base in plan.segments:
        out.append(base)
        for _ in range(copies - 1):
            out.append(_companion(base, rng, jitter, 0.92, 0.55))
        if rng.next() < frac:
            out.append(_companion(base, rng, jitter, 0.9, 0.5))
    return plan.with_segments(out)


def _companion(base: Segment, rng: Lcg, jitter: float, width_scale: float, opacity_scale: float) -> Segment:
    jx = (rng.next() - 0.5) * jitter
    jy = (rng.next() - 0.5) * jitter
    return base.model_copy(
        update={
            "x1": base.x1 + jx,
            "y1": base.y1 + jy,
            "x2": base.x2 + jx,
            "y2": base.y2 + jy,
            "width": max(0.6, base.width * width_scale),
            "opacity": base.opacity * opacity_scale,
        }
    )
