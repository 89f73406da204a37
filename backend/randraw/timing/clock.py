"""Clock synchronization against the time oracle.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
import time
from collections.abc import Callable
from dataclasses import dataclass, field

# Third-party (alphabetical)
import httpx
import logfire
from pydantic import ValidationError

# Local imports (core first, then alphabetical)
from randraw.core.exceptions import ClockSyncError
from randraw.core.models import TimeResponse
from randraw.infra.logging import get_logger

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("ClockSynchronizer", "TIME_PATH", "system_now_ms")

TIME_PATH = "/api/time"

logger = get_logger("timing.clock")


def system_now_ms() -> int:
    """Local wall clock in epoch milliseconds."""
    return time.time_ns() // 1_000_000


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass
class ClockSynchronizer:
    """Estimates the offset between the local clock and the time oracle.

    Assumes symmetric latency: the oracle's reading is taken to be half a
    round trip old when it arrives.

    Example:
        >>> async with httpx.AsyncClient(base_url='https://randraw.example') as client:
        ...     clock = ClockSynchronizer(client)
        ...     await clock.sync()
        ...     now = clock.now_ms()
    """

    client: httpx.AsyncClient
    local_now: Callable[[], int] = system_now_ms
    path: str = TIME_PATH
    offset_ms: int = field(default=0, init=False)

    async def estimate_offset(self) -> int:
        """Measure the offset once. Returns 0 on any failure."""
        with logfire.span("clock.estimate_offset"):
            try:
                return await self._measure()
            except (httpx.HTTPError, ClockSyncError, ValueError) as exc:
                logger.warning("clock_sync_failed", error=str(exc), error_type=type(exc).__name__)
                return 0

    async def sync(self) -> int:
        """Measure and store the offset used by ``now_ms``."""
        self.offset_ms = await self.estimate_offset()
        return self.offset_ms

    def now_ms(self) -> int:
        """Synchronized current time."""
        return self.local_now() + self.offset_ms

    async def _measure(self) -> int:
        t0 = self.local_now()
        response = await self.client.get(self.path, headers={"Cache-Control": "no-store"})
        t1 = self.local_now()
        if response.status_code != 200:
            raise ClockSyncError(f"unexpected status {response.status_code}", status_code=response.status_code)
        try:
            payload = TimeResponse.model_validate(response.json())
        except ValidationError as exc:
            raise ClockSyncError(f"malformed response: {exc.error_count()} errors") from exc
        half_round_trip = (t1 - t0) // 2
        return (payload.server_now + half_round_trip) - t1
