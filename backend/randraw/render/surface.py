"""Drawing surfaces that run without a display.

``RecordingSurface`` keeps the exact sequence of calls, which is what the
renderer's ordering guarantees are checked against. ``RasterSurface`` keeps a
small alpha-blended color grid, enough to benchmark stroke throughput and to
score a finished picture.

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
from dataclasses import dataclass, field

# Local imports (core first, then alphabetical)
from randraw.core.constants import THUMBNAIL_SIZE
from randraw.core.models import Segment
from randraw.core.protocols import DrawingSurface

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("RasterSurface", "RecordingSurface", "Rgb", "parse_hex")

Rgb = tuple[float, float, float]


def parse_hex(color: str) -> Rgb:
    """``#rrggbb`` to channel values in ``[0, 1]``."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"expected #rrggbb color, got {color!r}")
    return (int(value[0:2], 16) / 255, int(value[2:4], 16) / 255, int(value[4:6], 16) / 255)


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass
class RecordingSurface(DrawingSurface):
    """Surface that records every call in order."""

    surface_width: float = 800.0
    surface_height: float = 600.0
    backgrounds: list[str] = field(default_factory=list)
    strokes: list[Segment] = field(default_factory=list)
    resizes: list[tuple[float, float]] = field(default_factory=list)

    @property
    def width(self) -> float:
        return self.surface_width

    @property
    def height(self) -> float:
        return self.surface_height

    def fill_background(self, color: str) -> None:
        self.backgrounds.append(color)

    def stroke(self, segment: Segment) -> None:
        self.strokes.append(segment)

    def resize(self, width: float, height: float) -> None:
        self.surface_width, self.surface_height = width, height
        self.resizes.append((width, height))


# =============================================================================
# Section 11: Classes
# =============================================================================
class RasterSurface(DrawingSurface):
    """Fixed-resolution color grid covering a logical canvas.

    Strokes are stamped as squares along the segment and blended with
    ``opacity``. The grid resolution is independent of the logical size, so a
    phone and a wall display produce comparable thumbnails.
    """

    def __init__(self, width: float, height: float, resolution: int = THUMBNAIL_SIZE) -> None:
        if resolution < 1:
            raise ValueError("resolution must be positive")
        self._width = width
        self._height = height
        self.resolution = resolution
        self.background: Rgb = (0.0, 0.0, 0.0)
        self.stroke_count = 0
        self._pixels: list[list[Rgb]] = self._blank()

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    def fill_background(self, color: str) -> None:
        self.background = parse_hex(color)
        self._pixels = self._blank()

    def stroke(self, segment: Segment) -> None:
        self.stroke_count += 1
        if self._width <= 0 or self._height <= 0:
            return
        sx = self.resolution / self._width
        sy = self.resolution / self._height
        x1, y1 = segment.x1 * sx, segment.y1 * sy
        x2, y2 = segment.x2 * sx, segment.y2 * sy
        radius = max(0, int(segment.width * min(sx, sy) / 2))
        steps = max(1, math.ceil(max(abs(x2 - x1), abs(y2 - y1))))
        color = parse_hex(segment.color)
        touched: set[tuple[int, int]] = set()
        for k in range(steps + 1):
            t = k / steps
            cx, cy = int(x1 + (x2 - x1) * t), int(y1 + (y2 - y1) * t)
            for py in range(cy - radius, cy + radius + 1):
                for px in range(cx - radius, cx + radius + 1):
                    if 0 <= px < self.resolution and 0 <= py < self.resolution:
                        touched.add((px, py))
        # each cell blends once per stroke so long strokes do not over-saturate
        for px, py in touched:
            self._pixels[py][px] = _blend(self._pixels[py][px], color, segment.opacity)

    def resize(self, width: float, height: float) -> None:
        self._width, self._height = width, height
        self._pixels = self._blank()

    def pixels(self) -> list[list[Rgb]]:
        """Copy of the grid, row-major."""
        return [list(row) for row in self._pixels]

    def thumbnail(self, size: int = THUMBNAIL_SIZE) -> list[list[Rgb]]:
        """Nearest-neighbor resample of the grid to ``size`` x ``size``."""
        if size == self.resolution:
            return self.pixels()
        scale = self.resolution / size
        return [[self._pixels[int(y * scale)][int(x * scale)] for x in range(size)] for y in range(size)]

    def _blank(self) -> list[list[Rgb]]:
        return [[self.background] * self.resolution for _ in range(self.resolution)]


def _blend(base: Rgb, color: Rgb, alpha: float) -> Rgb:
    return (
        base[0] + (color[0] - base[0]) * alpha,
        base[1] + (color[1] - base[1]) * alpha,
        base[2] + (color[2] - base[2]) * alpha,
    )
