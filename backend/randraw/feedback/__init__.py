"""Scoring and reward reporting.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

from .loop import FeedbackLoop, FeedbackResult
from .scoring import ScoreBreakdown, rasterize, score_breakdown, score_raster

__all__ = ("FeedbackLoop", "FeedbackResult", "ScoreBreakdown", "rasterize", "score_breakdown", "score_raster")
