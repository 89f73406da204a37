"""Heuristic quality score for a finished picture.

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
from typing import NamedTuple

# Local imports (core first, then alphabetical)
from randraw.core.constants import THUMBNAIL_SIZE
from randraw.core.models import Plan
from randraw.render.surface import RasterSurface, Rgb

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("COVERAGE_TARGET", "ScoreBreakdown", "rasterize", "score_breakdown", "score_raster")

COVERAGE_TARGET = 0.5
COVERAGE_SIGMA = 0.2
_BACKGROUND_TOLERANCE = 1 / 255


class ScoreBreakdown(NamedTuple):
    """Score components, each in ``[0, 1]``."""

    coverage: float
    contrast: float
    symmetry: float
    edge: float

    @property
    def total(self) -> float:
        coverage_score = math.exp(-(((self.coverage - COVERAGE_TARGET) / COVERAGE_SIGMA) ** 2))
        value = 0.35 * coverage_score + 0.25 * self.contrast + 0.2 * self.symmetry + 0.2 * self.edge
        return min(1.0, max(0.0, value))


def rasterize(plan: Plan, width: float, height: float, resolution: int = THUMBNAIL_SIZE) -> RasterSurface:
    """Draw a whole plan onto a fresh raster."""
    raster = RasterSurface(width, height, resolution)
    raster.fill_background(plan.background_color)
    for segment in plan.segments:
        raster.stroke(segment)
    return raster


def score_breakdown(raster: RasterSurface, size: int = THUMBNAIL_SIZE) -> ScoreBreakdown:
    """Measure the thumbnail.

    Coverage is the share of cells that differ from the background. Contrast
    is the mean distance of luminance from mid-grey. Symmetry compares each
    cell with its mirror across the vertical axis. Edge energy is the mean
    central-difference gradient of luminance.
    """
    pixels = raster.thumbnail(size)
    background = raster.background
    lum = [[_luminance(p) for p in row] for row in pixels]
    cells = size * size

    covered = sum(1 for row in pixels for p in row if _differs(p, background))
    contrast = sum(abs(value - 0.5) for row in lum for value in row) / cells

    half = size // 2
    symmetry = 0.0
    for row in pixels:
        for x in range(half):
            left, right = row[x], row[size - 1 - x]
            diff = abs(left[0] - right[0]) + abs(left[1] - right[1]) + abs(left[2] - right[2])
            symmetry += 1 - min(1.0, diff / 3)
    symmetry /= max(1, size * half)

    edge = 0.0
    for y in range(1, size - 1):
        for x in range(1, size - 1):
            gx = lum[y][x + 1] - lum[y][x - 1]
            gy = lum[y + 1][x] - lum[y - 1][x]
            edge += math.sqrt(gx * gx + gy * gy)
    edge /= max(1, (size - 2) * (size - 2))

    return ScoreBreakdown(covered / cells, contrast, symmetry, min(1.0, edge))


def score_raster(raster: RasterSurface, size: int = THUMBNAIL_SIZE) -> float:
    """Weighted quality score in ``[0, 1]``; coverage is rewarded near one half."""
    return score_breakdown(raster, size).total


def _luminance(p: Rgb) -> float:
    return 0.2126 * p[0] + 0.7152 * p[1] + 0.0722 * p[2]


def _differs(p: Rgb, background: Rgb) -> bool:
    return (
        abs(p[0] - background[0]) > _BACKGROUND_TOLERANCE
        or abs(p[1] - background[1]) > _BACKGROUND_TOLERANCE
        or abs(p[2] - background[2]) > _BACKGROUND_TOLERANCE
    )
