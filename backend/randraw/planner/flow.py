"""Agent-based flow field generators and the radial scatter.

Agents walk a noise-perturbed vector field; each step leaves a main stroke and
up to two faint hairlines beside it. The number of segments scales with the
square root of the canvas area so small and large screens finish the same
picture in the same time.

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
from collections.abc import Callable
from dataclasses import dataclass

# Local imports (core first, then alphabetical)
from randraw.core.hashing import Lcg
from randraw.core.models import Plan
from randraw.core.types import FlowMode

from .noise import ValueNoise
from .primitives import StrokeBuffer, seeded_stream

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "AGENT_COUNT",
    "DRIFT",
    "FLOW_DENSITY",
    "SCATTER_DENSITY",
    "FlowField",
    "flow_builder",
    "plan_flow",
    "plan_scatter",
    "target_segments",
    "unit_vector",
)

# =============================================================================
# Section 3: Constants
# =============================================================================
FLOW_DENSITY = 4.0
"""Segments per unit of ``sqrt(width * height)`` for flow generators."""

SCATTER_DENSITY = 1.2
"""Segments per unit of ``sqrt(width * height)`` for the radial scatter."""

AGENT_COUNT = 48
DRIFT = 1.0
"""Largest noise drift added to a heading; equal to the heading length so the two can cancel."""

HAIRLINE_JITTER = 2.5
MIN_LIFE = 30
MAX_LIFE = 120


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass(frozen=True, slots=True)
class FlowField:
    """Direction field for one flow mode on one canvas."""

    mode: FlowMode
    width: float
    height: float
    noise: ValueNoise
    scale: float
    frequency: float
    petals: int
    eddy_x: float
    eddy_y: float
    cell: float

    @classmethod
    def create(cls, mode: FlowMode, width: float, height: float, seed: int, rng: Lcg) -> FlowField:
        short = min(width, height)
        return cls(
            mode=mode,
            width=width,
            height=height,
            noise=ValueNoise(seed),
            scale=3.0 / short,
            frequency=rng.uniform(1.5, 4.0),
            petals=rng.randint(3, 7),
            eddy_x=width * rng.uniform(0.25, 0.75),
            eddy_y=height * rng.uniform(0.25, 0.75),
            cell=short / rng.uniform(4.0, 9.0),
        )

    def angle(self, x: float, y: float) -> float:
        """Heading in radians at ``(x, y)``."""
        n = self.noise.fractal(x * self.scale, y * self.scale) - 0.5
        cx, cy = self.width / 2, self.height / 2
        match self.mode:
            case "radial-orbit":
                return math.atan2(y - cy, x - cx) + math.pi / 2 + n * 1.2
            case "sinusoidal-vine":
                return -math.pi / 2 + math.sin(x / self.width * self.frequency * math.tau + n * 4.0) * 0.9
            case "off-center-eddy":
                dx, dy = x - self.eddy_x, y - self.eddy_y
                d = math.hypot(dx, dy) / min(self.width, self.height)
                return math.atan2(dy, dx) + math.pi / 2 + 0.35 + 0.8 / (1.0 + d * 3.0) + n * 1.5
            case "horizontal-wave":
                return math.sin(y / self.height * self.frequency * math.tau + n * math.tau) * 0.5
            case "petal-radial":
                theta = math.atan2(y - cy, x - cx)
                return theta + math.sin(self.petals * theta) * 0.9 + n * 0.8
            case "crossed-weave":
                parity = (int(x // self.cell) + int(y // self.cell)) % 2
                return (math.pi / 4 if parity == 0 else -math.pi / 4) + n * 0.6
        raise ValueError(f"unknown flow mode: {self.mode}")

    def vector(self, x: float, y: float) -> tuple[float, float]:
        """Unnormalized flow at ``(x, y)``: the mode heading plus a noise drift of length up to 1.

        The drift can cancel the heading exactly, so the result may be zero.
        """
        heading = self.angle(x, y)
        u, v = x * self.scale, y * self.scale
        drift = self.noise.sample(u + 17.0, v + 31.0) * DRIFT
        turn = self.noise.sample(u + 53.0, v + 7.0) * math.tau
        return math.cos(heading) + drift * math.cos(turn), math.sin(heading) + drift * math.sin(turn)


@dataclass(slots=True)
class _Agent:
    x: float
    y: float
    life: int
    color: str
    width: float
    opacity: float
    hairlines: int


# =============================================================================
# Section 12: Functions
# =============================================================================
def target_segments(width: float, height: float, density: float = FLOW_DENSITY) -> int:
    return max(1, round(density * math.sqrt(width * height)))


def unit_vector(dx: float, dy: float) -> tuple[float, float]:
    """Normalize ``(dx, dy)``; a zero vector stays zero."""
    length = math.hypot(dx, dy) or 1.0
    return dx / length, dy / length


def plan_flow(
    generator_id: str, mode: FlowMode, width: float, height: float, seed: int, palette: tuple[str, ...]
) -> Plan:
    """Walk agents over the field until the segment target is reached."""
    rng = seeded_stream(seed)
    field = FlowField.create(mode, width, height, seed, rng)
    target = target_segments(width, height)
    step = max(1.5, min(width, height) / 160)
    inks = palette[1:] or palette

    agents = [_spawn(rng, width, height, inks) for _ in range(AGENT_COUNT)]
    buf = StrokeBuffer()
    while len(buf) < target:
        for agent in agents:
            ux, uy = unit_vector(*field.vector(agent.x, agent.y))
            nx, ny = agent.x + ux * step, agent.y + uy * step
            cx, cy = _clamp(nx, 0.0, width), _clamp(ny, 0.0, height)
            buf.line(agent.x, agent.y, cx, cy, agent.width, agent.opacity, agent.color)
            for _ in range(agent.hairlines):
                offset = (rng.next() - 0.5) * 2 * HAIRLINE_JITTER
                ox, oy = -uy * offset, ux * offset
                buf.line(
                    _clamp(agent.x + ox, 0.0, width),
                    _clamp(agent.y + oy, 0.0, height),
                    _clamp(cx + ox, 0.0, width),
                    _clamp(cy + oy, 0.0, height),
                    0.6,
                    agent.opacity * 0.35,
                    agent.color,
                )
            agent.x, agent.y = cx, cy
            agent.life -= 1
            if agent.life <= 0 or cx != nx or cy != ny:
                fresh = _spawn(rng, width, height, inks)
                agent.x, agent.y, agent.life = fresh.x, fresh.y, fresh.life
                agent.color, agent.width, agent.opacity, agent.hairlines = (
                    fresh.color,
                    fresh.width,
                    fresh.opacity,
                    fresh.hairlines,
                )

    del buf.segments[target:]
    return buf.to_plan(generator_id, palette)


def plan_scatter(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
    """Radial scatter: one polyline jumping between random points around the center."""
    rng = seeded_stream(seed)
    buf = StrokeBuffer()
    cx, cy = width * 0.5, height * 0.5
    reach = min(width, height) * 0.48
    colors = (palette[3 % len(palette)], palette[2 % len(palette)], palette[4 % len(palette)])
    px, py = cx, cy
    for i in range(target_segments(width, height, SCATTER_DENSITY)):
        angle = rng.next() * math.tau
        r = rng.next() * reach
        x, y = cx + math.cos(angle) * r, cy + math.sin(angle) * r
        buf.line(px, py, x, y, 2.5, 0.35 + 0.5 * rng.next(), colors[i % 3])
        px, py = x, y
    return buf.to_plan("abstract-flow", palette)


def flow_builder(generator_id: str, mode: FlowMode) -> Callable[[float, float, int, tuple[str, ...]], Plan]:
    """Bind a flow mode into a registry builder."""

    def build(width: float, height: float, seed: int, palette: tuple[str, ...]) -> Plan:
        return plan_flow(generator_id, mode, width, height, seed, palette)

    build.__name__ = f"plan_{mode.replace('-', '_')}"
    return build


def _spawn(rng: Lcg, width: float, height: float, inks: tuple[str, ...]) -> _Agent:
    return _Agent(
        x=rng.uniform(0.0, width),
        y=rng.uniform(0.0, height),
        life=rng.randint(MIN_LIFE, MAX_LIFE),
        color=rng.choice(inks),
        width=rng.uniform(0.8, 2.6),
        opacity=rng.uniform(0.35, 0.85),
        hairlines=rng.randint(0, 2),
    )


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))
