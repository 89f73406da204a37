"""Configuration management for randraw.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from functools import lru_cache

# Local imports (core first, then alphabetical)
from randraw.core.settings import KvSettings, RandrawSettings

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("load_kv_settings", "load_settings")


# =============================================================================
# Section 12: Functions
# =============================================================================
@lru_cache(maxsize=1)
def load_settings() -> RandrawSettings:
    """Load settings from environment."""
    return RandrawSettings()


@lru_cache(maxsize=1)
def load_kv_settings() -> KvSettings:
    """Load key-value store settings from environment."""
    return KvSettings()
