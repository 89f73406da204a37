"""Clock synchronization and cycle scheduling.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# Local imports (core first, then alphabetical)
from .clock import ClockSynchronizer, system_now_ms
from .scheduler import CycleScheduler, cycle_info

__all__ = ("ClockSynchronizer", "CycleScheduler", "cycle_info", "system_now_ms")
