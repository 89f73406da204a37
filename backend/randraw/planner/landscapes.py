"""Landscape generators.

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

# Local imports (core first, then alphabetical)
from randraw.core.models import Plan

from .motifs import grass_band
from .primitives import StrokeBuffer, seeded_stream

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("plan_city", "plan_meadow", "plan_mountains", "plan_waves")

_REFERENCE_SIDE = 600.0


# =============================================================================
# Section 12: Functions
# =============================================================================
def plan_mountains(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    """Three overlapping peaks over a shared base line."""
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    u = min(width, height) / _REFERENCE_SIDE
    rock, snow = palette[1], palette[4]
    base = height * 0.8
    for i in range(3):
        x1 = width * (0.2 + i * 0.25)
        x2 = x1 + width * 0.25 * 0.8
        mid = (x1 + x2) / 2 + width * rng.uniform(-0.03, 0.03)
        peak_y = base - (120 + i * 30) * u * rng.uniform(0.85, 1.25)
        buf.line(x1, base, mid, peak_y, 5, 0.9, rock)
        buf.line(mid, peak_y, x2, base, 5, 0.9, rock)
        cap = 0.25
        buf.line(mid + (x1 - mid) * cap, peak_y + (base - peak_y) * cap, mid, peak_y, 3, 0.8, snow)
        buf.line(mid, peak_y, mid + (x2 - mid) * cap, peak_y + (base - peak_y) * cap, 3, 0.8, snow)
    return buf.to_plan("mountains", palette)


def plan_city(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    u = min(width, height) / _REFERENCE_SIDE
    ink, window = palette[1], palette[4]
    ground = height * 0.8
    for i in range(14):
        x = (i / 14) * width
        bw = (24 + ((i * 7) % 5) * 8) * u
        bh = (40 + ((i * 5) % 7) * 12) * u * rng.uniform(0.9, 1.4)
        buf.line(x, ground - bh, x + bw, ground - bh, 3, 0.9, ink)
        buf.line(x, ground - bh, x, ground, 3, 0.9, ink)
        buf.line(x + bw, ground - bh, x + bw, ground, 3, 0.9, ink)
        lit = rng.uniform(0.5, 1.0)
        yy = ground - bh + 8 * u
        while yy < ground:
            xx = x + 6 * u
            while xx < x + bw - 6 * u:
                if rng.next() < lit:
                    buf.line(xx, yy, xx + 3 * u, yy, 2, 0.9, window)
                xx += 10 * u
            yy += 12 * u
    return buf.to_plan("city", palette)


def plan_waves(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    """Rows of gently undulating swell below the horizon."""
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    sea = palette[2]
    steps = 48
    y = height * 0.6
    while y < height:
        amplitude = rng.uniform(0.5, 3.0)
        phase = rng.uniform(0.0, math.tau)
        points = [
            (width * k / steps, y + math.sin(k / steps * math.tau * 3 + phase) * amplitude) for k in range(steps + 1)
        ]
        buf.poly(points, 3, 0.4, sea)
        y += 6
    return buf.to_plan("waves", palette)


def plan_meadow(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    grass_band(buf, rng, width, height, palette[2], palette[3])
    return buf.to_plan("meadow", palette)
