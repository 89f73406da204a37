"""Tests for progressive reveal.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

from randraw.core.models import Plan, Segment
from randraw.recipes.resolver import resolve_deterministic
from randraw.render.governor import brush_kit_for
from randraw.render.renderer import ProgressiveRenderer, RenderSession
from randraw.render.surface import RecordingSurface

__all__ = ()


def _plan(n: int) -> Plan:
    segments = tuple(
        Segment(x1=i, y1=i, x2=i + 1, y2=i + 1, width=1, opacity=1, color="#ffffff") for i in range(n)
    )
    return Plan(generator_id="waves", background_color="#101010", palette_colors=("#101010",), segments=segments)


class TestProgressiveRenderer:
    """Tests for index-ordered drawing."""

    def test_reveal_draws_prefix_in_order(self, recording_surface: RecordingSurface) -> None:
        """The first floor(n * progress) segments are drawn in order."""
        plan = _plan(10)
        drawn = ProgressiveRenderer(recording_surface).reveal(plan, 0.35, 0)

        assert drawn == 3
        assert recording_surface.strokes == list(plan.segments[:3])

    def test_reveal_is_idempotent(self, recording_surface: RecordingSurface) -> None:
        """Repeating a progress reading draws nothing new."""
        renderer = ProgressiveRenderer(recording_surface)
        plan = _plan(10)
        drawn = renderer.reveal(plan, 0.5, 0)

        assert renderer.reveal(plan, 0.5, drawn) == drawn
        assert len(recording_surface.strokes) == 5

    def test_cursor_never_decreases(self, recording_surface: RecordingSurface) -> None:
        """A lower progress reading keeps the cursor."""
        renderer = ProgressiveRenderer(recording_surface)

        assert renderer.reveal(_plan(10), 0.2, 6) == 6

    def test_progress_is_clamped(self, recording_surface: RecordingSurface) -> None:
        """Out-of-range progress is clamped to [0, 1]."""
        renderer = ProgressiveRenderer(recording_surface)

        assert renderer.reveal(_plan(4), -1.0, 0) == 0
        assert renderer.reveal(_plan(4), 3.0, 0) == 4

    def test_catch_up_fills_background_once(self, recording_surface: RecordingSurface) -> None:
        """Catch-up paints the background, then draws everything due."""
        plan = _plan(8)
        drawn = ProgressiveRenderer(recording_surface).catch_up(plan, 0.75)

        assert recording_surface.backgrounds == ["#101010"]
        assert drawn == 6
        assert recording_surface.strokes == list(plan.segments[:6])

    def test_flush_completes(self, recording_surface: RecordingSurface) -> None:
        """Flushing draws the remainder."""
        renderer = ProgressiveRenderer(recording_surface)
        plan = _plan(8)

        assert renderer.flush(plan, renderer.reveal(plan, 0.5, 0)) == 8
        assert recording_surface.strokes == list(plan.segments)


class TestRenderSession:
    """Tests for session bookkeeping."""

    def test_cycle_index_and_completion(self) -> None:
        """Sessions expose their cycle and whether the reveal is complete."""
        session = RenderSession(
            resolved=resolve_deterministic(9), plan=_plan(3), kit=brush_kit_for(0, "waves"), throughput=12.5
        )

        assert session.cycle_index == 9
        assert session.complete is False
        session.drawn = 3
        assert session.complete is True
