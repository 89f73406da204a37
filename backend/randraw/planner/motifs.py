"""Subject generators: figures, buildings and vehicles.

Coordinates are closed-form in the canvas size. Fixed lengths are expressed
in units of ``min(width, height) / 600`` so a subject keeps its proportions on
any screen; the seeded stream nudges placement and adds a little hand wobble.

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
from randraw.core.hashing import Lcg
from randraw.core.models import Plan

from .primitives import StrokeBuffer, seeded_stream

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "plan_car",
    "plan_face",
    "plan_house",
    "plan_lighthouse",
    "plan_mountain_cabin",
    "plan_person",
    "plan_person_field",
    "plan_sailboat",
)

_REFERENCE_SIDE = 600.0


# =============================================================================
# Section 12: Functions
# =============================================================================
def plan_person(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    _figure(buf, rng, width, height, palette[1])
    return buf.to_plan("person", palette)


def plan_person_field(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    """Figure standing in a flowering meadow."""
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    _figure(buf, rng, width, height, palette[1])
    grass_band(buf, rng, width, height, palette[2], palette[4])
    return buf.to_plan("person-field", palette)


def plan_face(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    ink, accent = palette[1], palette[3]
    cx = width * rng.uniform(0.45, 0.55)
    cy = height * rng.uniform(0.45, 0.52)
    r = min(width, height) * rng.uniform(0.22, 0.28)
    buf.ellipse(cx, cy, r * 0.82, r, 4, 0.9, ink)
    eye_dx, eye_y = r * 0.32, cy - r * 0.18
    for side in (-1, 1):
        buf.ellipse(cx + side * eye_dx, eye_y, r * 0.12, r * 0.07, 3, 0.9, ink, steps=36)
        buf.circle(cx + side * eye_dx, eye_y, r * 0.035, 3, 0.9, accent, steps=16)
        brow_y = eye_y - r * rng.uniform(0.15, 0.22)
        buf.line(cx + side * eye_dx * 0.6, brow_y, cx + side * eye_dx * 1.4, brow_y - r * 0.03, 3, 0.8, ink)
    buf.poly([(cx, eye_y + r * 0.05), (cx - r * 0.07, cy + r * 0.2), (cx + r * 0.04, cy + r * 0.22)], 3, 0.8, ink)
    smile = rng.uniform(0.15, 0.45)
    buf.arc(cx, cy + r * 0.25, r * 0.35, smile, math.pi - smile, 3, 0.9, accent)
    return buf.to_plan("face", palette)


def plan_house(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    u = _unit(width, height)
    wall, roof, glow = palette[1], palette[3], palette[4]
    ground = height * 0.8
    x = width * rng.uniform(0.3, 0.45)
    w = 220 * u * rng.uniform(0.9, 1.1)
    h = 140 * u
    buf.line(0, ground, width, ground, 3, 0.5, palette[2])
    buf.poly([(x, ground - h), (x + w, ground - h), (x + w, ground), (x, ground), (x, ground - h)], 4, 0.9, wall)
    peak = ground - h - 90 * u * rng.uniform(0.85, 1.15)
    buf.poly([(x - 15 * u, ground - h), (x + w / 2, peak), (x + w + 15 * u, ground - h)], 4, 0.9, roof)
    door_x = x + w * 0.42
    buf.poly([(door_x, ground), (door_x, ground - 70 * u), (door_x + 36 * u, ground - 70 * u), (door_x + 36 * u, ground)], 3, 0.9, wall)
    for wx in (x + w * 0.12, x + w * 0.7):
        wy = ground - h * 0.7
        side = 34 * u
        buf.poly([(wx, wy), (wx + side, wy), (wx + side, wy + side), (wx, wy + side), (wx, wy)], 3, 0.9, glow)
        buf.line(wx + side / 2, wy, wx + side / 2, wy + side, 2, 0.7, glow)
    chimney = x + w * 0.72
    buf.poly([(chimney, ground - h - 40 * u), (chimney, ground - h - 85 * u), (chimney + 22 * u, ground - h - 85 * u), (chimney + 22 * u, ground - h - 30 * u)], 3, 0.9, wall)
    return buf.to_plan("house", palette)


def plan_lighthouse(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    """Tapered tower with a fan of beams."""
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    u = _unit(width, height)
    ink, light = palette[1], palette[3]
    x = width * rng.uniform(0.68, 0.8)
    base = height * 0.8
    top = base - 140 * u
    buf.poly(
        [(x - 20 * u, base), (x + 20 * u, base), (x + 10 * u, top), (x - 10 * u, top), (x - 20 * u, base)],
        4,
        0.9,
        ink,
    )
    reach = 200 * u * rng.uniform(0.9, 1.3)
    tilt = rng.uniform(-0.1, 0.1)
    for k in range(5):
        a = math.pi - 0.3 + k * 0.15 + tilt
        buf.line(x, top, x + reach * math.cos(a), top + reach * math.sin(a), 3, 0.6, light)
    buf.line(0, base, width, base, 3, 0.4, palette[2])
    return buf.to_plan("lighthouse", palette)


def plan_sailboat(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    u = _unit(width, height)
    sail, hull, sea = palette[4], palette[1], palette[2]
    cx = width * rng.uniform(0.4, 0.6)
    water = height * 0.7
    buf.line(0, water, width, water, 5, 0.5, sea)
    buf.line(cx, water - 100 * u, cx, water, 4, 0.9, hull)
    buf.poly([(cx - 60 * u, water), (cx + 60 * u, water), (cx + 45 * u, water + 18 * u), (cx - 45 * u, water + 18 * u), (cx - 60 * u, water)], 4, 0.9, hull)
    buf.poly([(cx, water - 100 * u), (cx, water - 20 * u), (cx - 80 * u, water - 20 * u)], 4, 0.9, sail)
    buf.poly([(cx, water - 60 * u), (cx, water - 10 * u), (cx + 70 * u, water - 10 * u)], 3, 0.9, sail)
    for k in range(rng.randint(3, 6)):
        y = water + (12 + k * 10) * u
        x0 = rng.uniform(0.0, width * 0.8)
        buf.line(x0, y, x0 + width * rng.uniform(0.05, 0.2), y, 2, 0.4, sea)
    return buf.to_plan("sailboat", palette)


def plan_car(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    u = _unit(width, height)
    ink, accent = palette[1], palette[3]
    base = height * 0.75
    shift = width * rng.uniform(-0.05, 0.05)
    x1, x2 = width * 0.3 + shift, width * 0.7 + shift
    y1 = base - 50 * u
    buf.poly([(x1, y1), (x2, y1), (x2, base), (x1, base), (x1, y1)], 4, 0.9, ink)
    buf.poly([(x1 + 20 * u, y1), ((x1 + x2) / 2, y1 - 30 * u), (x2 - 20 * u, y1)], 4, 0.9, ink)
    buf.circle(x1 + 30 * u, base, 20 * u, 4, 0.9, accent)
    buf.circle(x2 - 30 * u, base, 20 * u, 4, 0.9, accent)
    buf.line(0, base + 20 * u, width, base + 20 * u, 3, 0.5, palette[2])
    return buf.to_plan("car", palette)


def plan_mountain_cabin(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    u = _unit(width, height)
    rock, wood = palette[1], palette[3]
    buf.poly([(width * 0.2, height * 0.8), (width * 0.4, height * rng.uniform(0.35, 0.45)), (width * 0.6, height * 0.8)], 4, 0.9, rock)
    buf.poly([(width * 0.5, height * 0.8), (width * 0.7, height * rng.uniform(0.4, 0.5)), (width * 0.9, height * 0.8)], 4, 0.9, rock)
    x, y = width * 0.3, height * 0.75
    side, rise = 60 * u, 30 * u
    buf.poly([(x, y - 40 * u), (x + side, y - 40 * u), (x + side, y), (x, y), (x, y - 40 * u)], 4, 0.9, wood)
    buf.poly([(x, y - 40 * u), (x + side / 2, y - 40 * u - rise), (x + side, y - 40 * u)], 4, 0.9, wood)
    return buf.to_plan("mountain-cabin", palette)


def grass_band(buf: StrokeBuffer, rng: Lcg, width: float, height: float, grass: str, flower: str) -> None:
    """Blades along the bottom edge with a row of cross-shaped flowers."""
    x = 0.0
    while x < width:
        lean = rng.uniform(-3.0, 3.0)
        buf.line(x, height * 0.95, x + lean, height * 0.85, 2, 0.5, grass)
        x += 8
    for i in range(30):
        fx, fy = (i / 30) * width, height * 0.9 + rng.uniform(-4.0, 4.0)
        buf.line(fx - 3, fy, fx + 3, fy, 2.4, 0.9, flower)
        buf.line(fx, fy - 3, fx, fy + 3, 2.4, 0.9, flower)


def _figure(buf: StrokeBuffer, rng: Lcg, width: float, height: float, ink: str) -> None:
    gx = width * rng.uniform(0.42, 0.58)
    gy = height * 0.6
    r = min(width, height) * 0.08
    reach = rng.uniform(0.5, 0.8)
    buf.circle(gx, gy - r * 2, r * 0.7, 3, 0.9, ink)
    buf.line(gx, gy - r * 1.3, gx, gy + r * 1.3, 4, 0.9, ink)
    buf.line(gx, gy - r * 0.3, gx - r * 0.9, gy + r * reach, 4, 0.9, ink)
    buf.line(gx, gy - r * 0.3, gx + r * 0.9, gy + r * (1.1 - reach), 4, 0.9, ink)
    buf.line(gx, gy + r * 1.3, gx - r * 0.7, gy + r * 2.2, 4, 0.9, ink)
    buf.line(gx, gy + r * 1.3, gx + r * 0.7, gy + r * 2.2, 4, 0.9, ink)


def _unit(width: float, height: float) -> float:
    return min(width, height) / _REFERENCE_SIDE
