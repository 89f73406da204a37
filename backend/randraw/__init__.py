"""randraw package initialization.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Local imports (core first, then alphabetical)
from ._version import __version__
from .planner import plan
from .recipes import RecipeResolver, resolve_deterministic
from .timing import ClockSynchronizer, CycleScheduler, cycle_info

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "__version__",
    "ClockSynchronizer",
    "CycleScheduler",
    "RecipeResolver",
    "cycle_info",
    "plan",
    "resolve_deterministic",
)
