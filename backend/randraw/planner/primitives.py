"""Drawing primitives shared by every generator.

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
from collections.abc import Sequence

# Local imports (core first, then alphabetical)
from randraw.core.constants import PALETTES
from randraw.core.hashing import Lcg
from randraw.core.models import Plan, Segment

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("StrokeBuffer", "choose_palette", "palette_for_seed", "palette_id_for_seed", "seeded_stream")

_MIN_WIDTH = 0.1


# =============================================================================
# Section 11: Classes
# =============================================================================
class StrokeBuffer:
    """Accumulates segments in reveal order."""

    def __init__(self) -> None:
        self.segments: list[Segment] = []

    def __len__(self) -> int:
        return len(self.segments)

    def line(self, x1: float, y1: float, x2: float, y2: float, width: float, opacity: float, color: str) -> None:
        self.segments.append(
            Segment(
                x1=x1,
                y1=y1,
                x2=x2,
                y2=y2,
                width=max(_MIN_WIDTH, width),
                opacity=min(1.0, max(0.0, opacity)),
                color=color,
            )
        )

    def poly(self, points: Sequence[tuple[float, float]], width: float, opacity: float, color: str) -> None:
        """Open polyline through ``points``."""
        for (x1, y1), (x2, y2) in zip(points, points[1:], strict=False):
            self.line(x1, y1, x2, y2, width, opacity, color)

    def ellipse(
        self,
        cx: float,
        cy: float,
        rx: float,
        ry: float,
        width: float,
        opacity: float,
        color: str,
        steps: int = 72,
    ) -> None:
        """Closed ellipse approximated by ``steps`` chords."""
        px, py = cx + rx, cy
        for i in range(1, steps + 1):
            t = i / steps * math.tau
            x, y = cx + math.cos(t) * rx, cy + math.sin(t) * ry
            self.line(px, py, x, y, width, opacity, color)
            px, py = x, y

    def circle(
        self, cx: float, cy: float, r: float, width: float, opacity: float, color: str, steps: int = 64
    ) -> None:
        self.ellipse(cx, cy, r, r, width, opacity, color, steps=steps)

    def arc(
        self,
        cx: float,
        cy: float,
        r: float,
        start: float,
        end: float,
        width: float,
        opacity: float,
        color: str,
        steps: int = 24,
    ) -> None:
        """Open arc from ``start`` to ``end`` radians."""
        points = [
            (cx + math.cos(start + (end - start) * i / steps) * r, cy + math.sin(start + (end - start) * i / steps) * r)
            for i in range(steps + 1)
        ]
        self.poly(points, width, opacity, color)

    def to_plan(self, generator_id: str, palette: Sequence[str]) -> Plan:
        return Plan(
            generator_id=generator_id,
            background_color=palette[0],
            palette_colors=tuple(palette),
            segments=tuple(self.segments),
        )


# =============================================================================
# Section 12: Functions
# =============================================================================
def choose_palette(rng: Lcg) -> tuple[int, tuple[str, ...]]:
    """Draw a palette from the catalog; consumes one value from ``rng``."""
    palette_id = int(rng.next() * len(PALETTES))
    return palette_id, PALETTES[palette_id]


def palette_id_for_seed(seed: int) -> int:
    """Palette a plan built from ``seed`` will use."""
    return choose_palette(Lcg(seed))[0]


def palette_for_seed(seed: int) -> tuple[str, ...]:
    return PALETTES[palette_id_for_seed(seed)]


def seeded_stream(seed: int) -> Lcg:
    """Generator stream for ``seed``, positioned just after the palette draw."""
    rng = Lcg(seed)
    rng.next()
    return rng
