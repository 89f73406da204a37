"""Cycle scheduler.

Maps a timestamp onto the globally agreed cycle grid. Everything here is a
pure function of the timestamp and three constants, so two clients with the
same clock reading always agree on the cycle and its progress.

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
from typing import TYPE_CHECKING

# Local imports (core first, then alphabetical)
from randraw.core.models import CycleInfo

if TYPE_CHECKING:
    from randraw.core.settings import RandrawSettings

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("CycleScheduler", "cycle_info")


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass(frozen=True, slots=True)
class CycleScheduler:
    """Cycle grid bound to fixed epoch, draw and cooldown durations."""

    epoch_ms: int
    draw_ms: int
    cooldown_ms: int = 0

    def __post_init__(self) -> None:
        if self.draw_ms <= 0:
            raise ValueError(f"draw_ms must be positive, got {self.draw_ms}")
        if self.cooldown_ms < 0:
            raise ValueError(f"cooldown_ms must be non-negative, got {self.cooldown_ms}")

    @classmethod
    def from_settings(cls, settings: RandrawSettings) -> CycleScheduler:
        return cls(epoch_ms=settings.epoch_ms, draw_ms=settings.draw_ms, cooldown_ms=settings.cooldown_ms)

    @property
    def cycle_length_ms(self) -> int:
        return self.draw_ms + self.cooldown_ms

    def info(self, now_ms: int | float) -> CycleInfo:
        """Cycle position of ``now_ms``."""
        return cycle_info(now_ms, self.epoch_ms, self.draw_ms, self.cooldown_ms)

    def cycle_start_ms(self, cycle_index: int) -> int:
        """Instant the given cycle's drawing phase begins."""
        return self.epoch_ms + cycle_index * self.cycle_length_ms

    def next_boundary_ms(self, now_ms: int | float) -> int:
        """Instant the cycle after the one containing ``now_ms`` begins."""
        return self.cycle_start_ms(self.info(now_ms).cycle_index + 1)


# =============================================================================
# Section 12: Functions
# =============================================================================
def cycle_info(now_ms: int | float, epoch_ms: int, draw_ms: int, cooldown_ms: int) -> CycleInfo:
    """Compute the cycle index, phase and progress for a timestamp.

    Args:
        now_ms: Current (synchronized) epoch milliseconds.
        epoch_ms: Instant cycle zero begins.
        draw_ms: Drawing phase duration; must be positive.
        cooldown_ms: Cooldown duration; zero means back-to-back drawing.

    Returns:
        CycleInfo for ``now_ms``. Timestamps before the epoch yield negative
        cycle indices.
    """
    if draw_ms <= 0:
        raise ValueError(f"draw_ms must be positive, got {draw_ms}")
    cycle_length_ms = draw_ms + cooldown_ms
    since_epoch = now_ms - epoch_ms
    cycle_index = int(since_epoch // cycle_length_ms)
    into = since_epoch - cycle_index * cycle_length_ms
    in_drawing_phase = into < draw_ms
    if in_drawing_phase:
        progress = min(1.0, max(0.0, into / draw_ms))
        phase_remaining_ms = 0
    else:
        progress = 1.0
        phase_remaining_ms = int(cycle_length_ms - into)
    return CycleInfo(
        cycle_index=cycle_index,
        in_drawing_phase=in_drawing_phase,
        progress=progress,
        phase_remaining_ms=max(0, phase_remaining_ms),
    )
