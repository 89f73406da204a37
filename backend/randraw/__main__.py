"""Command-line entry point for randraw.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Local imports (core first, then alphabetical)
from . import __version__
from .infra.config import load_settings
from .recipes.resolver import resolve_deterministic
from .timing.clock import system_now_ms
from .timing.scheduler import CycleScheduler

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("main",)


# =============================================================================
# Section 12: Functions
# =============================================================================
def main() -> None:
    """Report the package version and what the world is drawing right now."""
    settings = load_settings()
    info = CycleScheduler.from_settings(settings).info(system_now_ms())
    resolved = resolve_deterministic(info.cycle_index, settings.global_salt)
    print(f"randraw version {__version__}")
    print(
        f"cycle {info.cycle_index} ({info.progress:.0%} drawn): "
        f"{resolved.recipe.generator_id}, palette {resolved.recipe.palette_id}, level {resolved.recipe.level}"
    )


if __name__ == "__main__":
    main()
