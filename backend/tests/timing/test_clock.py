"""Tests for clock synchronization.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

from randraw.timing.clock import TIME_PATH, ClockSynchronizer

__all__ = ()

pytestmark = pytest.mark.anyio


def _ticks(*values: int) -> Callable[[], int]:
    iterator: Iterator[int] = iter(values)
    return lambda: next(iterator)


class TestClockSynchronizer:
    """Tests for offset estimation."""

    async def test_offset_assumes_symmetric_latency(
        self, make_client: Callable[..., httpx.AsyncClient]
    ) -> None:
        """The server reading is advanced by half the round trip."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"serverNow": 10_000})

        async with make_client(handler) as client:
            clock = ClockSynchronizer(client, local_now=_ticks(1_000, 1_200, 1_500))
            offset = await clock.sync()

        # (10000 + 100) - 1200
        assert offset == 8_900
        assert clock.now_ms() == 1_500 + 8_900
        assert seen[0].url.path == TIME_PATH
        assert seen[0].headers["cache-control"] == "no-store"

    async def test_transport_failure_gives_zero(self, failing_client: httpx.AsyncClient) -> None:
        """Unreachable oracles leave the clock unadjusted."""
        clock = ClockSynchronizer(failing_client, local_now=lambda: 42)

        assert await clock.sync() == 0
        assert clock.now_ms() == 42

    @pytest.mark.parametrize(
        ("status_code", "content"),
        [
            (503, b'{"serverNow": 10}'),
            (200, b'{"unexpected": true}'),
            (200, b"not json"),
        ],
    )
    async def test_bad_responses_give_zero(
        self, make_client: Callable[..., httpx.AsyncClient], status_code: int, content: bytes
    ) -> None:
        """Error statuses and malformed bodies read as no offset."""
        async with make_client(lambda request: httpx.Response(status_code, content=content)) as client:
            clock = ClockSynchronizer(client, local_now=lambda: 5)

            assert await clock.estimate_offset() == 0
