"""Tests for the cycle scheduler.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

import pytest

from randraw.core.settings import RandrawSettings
from randraw.timing.scheduler import CycleScheduler, cycle_info

__all__ = ()


class TestCycleInfo:
    """Tests for mapping timestamps onto the cycle grid."""

    def test_mid_cycle(self, epoch_ms: int) -> None:
        """125 seconds past the epoch is 5 seconds into cycle 3."""
        info = cycle_info(epoch_ms + 125_000, epoch_ms, 40_000, 0)

        assert info.cycle_index == 3
        assert info.in_drawing_phase is True
        assert info.progress == 0.125
        assert info.phase_remaining_ms == 0

    def test_boundary_starts_next_cycle(self, epoch_ms: int) -> None:
        """A boundary instant belongs to the cycle it starts."""
        info = cycle_info(epoch_ms + 80_000, epoch_ms, 40_000, 0)

        assert info.cycle_index == 2
        assert info.progress == 0.0

    def test_cooldown_phase(self, epoch_ms: int) -> None:
        """During cooldown progress is complete and the remaining time counts down."""
        info = cycle_info(epoch_ms + 45_000, epoch_ms, 40_000, 10_000)

        assert info.cycle_index == 0
        assert info.in_drawing_phase is False
        assert info.progress == 1.0
        assert info.phase_remaining_ms == 5_000

    def test_before_epoch_is_negative(self, epoch_ms: int) -> None:
        """Timestamps before the epoch give negative cycle indices."""
        info = cycle_info(epoch_ms - 1, epoch_ms, 40_000, 0)

        assert info.cycle_index == -1
        assert 0.0 <= info.progress <= 1.0

    def test_progress_is_monotonic_within_cycle(self, epoch_ms: int) -> None:
        """Progress never decreases while the cycle index stays the same."""
        readings = [cycle_info(epoch_ms + t, epoch_ms, 40_000, 0) for t in range(0, 40_000, 997)]

        assert all(r.cycle_index == 0 for r in readings)
        assert [r.progress for r in readings] == sorted(r.progress for r in readings)

    @pytest.mark.parametrize("draw_ms", [0, -5])
    def test_rejects_non_positive_draw(self, draw_ms: int) -> None:
        """A drawing phase of zero length is a configuration error."""
        with pytest.raises(ValueError, match="draw_ms"):
            cycle_info(0, 0, draw_ms, 0)


class TestCycleScheduler:
    """Tests for the bound scheduler."""

    def test_from_settings(self, settings: RandrawSettings, epoch_ms: int) -> None:
        """Settings supply the epoch and phase durations."""
        scheduler = CycleScheduler.from_settings(settings)

        assert scheduler.epoch_ms == epoch_ms
        assert scheduler.cycle_length_ms == 40_000

    def test_boundaries(self, epoch_ms: int) -> None:
        """Cycle starts and the next boundary line up with the grid."""
        scheduler = CycleScheduler(epoch_ms=epoch_ms, draw_ms=30_000, cooldown_ms=10_000)

        assert scheduler.cycle_start_ms(2) == epoch_ms + 80_000
        assert scheduler.next_boundary_ms(epoch_ms + 95_000) == epoch_ms + 120_000

    def test_rejects_negative_cooldown(self) -> None:
        """Cooldown cannot be negative."""
        with pytest.raises(ValueError, match="cooldown_ms"):
            CycleScheduler(epoch_ms=0, draw_ms=1_000, cooldown_ms=-1)
