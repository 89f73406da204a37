"""Surfaces, the performance governor and the progressive renderer.

The display loop lives in ``randraw.render.client``.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

from .governor import (
    BrushKit,
    PerformanceGovernor,
    brush_kit_for,
    complexity_for_level,
    densify_plan,
    estimate_ops_per_segment,
    measure_throughput,
    segment_budget,
    thin_plan,
)
from .renderer import ProgressiveRenderer, RenderSession
from .surface import RasterSurface, RecordingSurface, parse_hex

__all__ = (
    "BrushKit",
    "PerformanceGovernor",
    "ProgressiveRenderer",
    "RasterSurface",
    "RecordingSurface",
    "RenderSession",
    "brush_kit_for",
    "complexity_for_level",
    "densify_plan",
    "estimate_ops_per_segment",
    "measure_throughput",
    "parse_hex",
    "segment_budget",
    "thin_plan",
)
