"""Infrastructure concerns for randraw.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Local imports (core first, then alphabetical)
from .config import load_kv_settings, load_settings
from .instrumentation import Metrics, configure_instrumentation, get_logger, operation_span, traced

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "load_settings",
    "load_kv_settings",
    "configure_instrumentation",
    "get_logger",
    "operation_span",
    "traced",
    "Metrics",
)
