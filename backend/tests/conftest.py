"""Shared test fixtures and helpers for randraw tests.

(c) Mike Casale 2025.
Licensed under the MIT License.
"""

from __future__ import annotations as _annotations

import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import logfire
import pytest

from randraw.adapters.kv import InMemoryKeyValueStore
from randraw.core.settings import KvSettings, RandrawSettings
from randraw.render.surface import RecordingSurface

# Re-export dirty_equals for convenience
if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    T = TypeVar("T")

    def IsInstance(arg: type[T]) -> T: ...
    def IsFloat(*args: Any, **kwargs: Any) -> float: ...
    def IsInt(*args: Any, **kwargs: Any) -> int: ...
    def IsStr(*args: Any, **kwargs: Any) -> str: ...
else:
    from dirty_equals import IsFloat, IsInstance, IsInt, IsStr


__all__ = (
    "IsFloat",
    "IsInstance",
    "IsInt",
    "IsStr",
    "TestEnv",
)


class TestEnv:
    """Helper for managing environment variables in tests."""

    __test__ = False  # Prevent pytest from collecting this class

    def __init__(self) -> None:
        self.envars: dict[str, str | None] = {}

    def set(self, name: str, value: str) -> None:
        """Set an environment variable, saving the original value."""
        self.envars[name] = os.getenv(name)
        os.environ[name] = value

    def remove(self, name: str) -> None:
        """Remove an environment variable, saving the original value."""
        self.envars[name] = os.environ.pop(name, None)

    def reset(self) -> None:
        """Reset all modified environment variables to original values."""
        for name, value in self.envars.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value


@pytest.fixture(scope="session", autouse=True)
def quiet_logfire() -> None:
    """Keep telemetry local and silent during tests."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def env() -> Iterator[TestEnv]:
    """Fixture for managing environment variables in tests."""
    test_env = TestEnv()
    yield test_env
    test_env.reset()


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def epoch_ms() -> int:
    """2024-01-01T00:00:00Z in Unix milliseconds."""
    return 1_704_067_200_000


@pytest.fixture
def settings() -> RandrawSettings:
    """Default settings, isolated from any local .env file."""
    return RandrawSettings(_env_file=None)


@pytest.fixture
def kv_settings() -> KvSettings:
    return KvSettings(_env_file=None, url="https://kv.test", token="test-token")


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface(surface_width=640.0, surface_height=480.0)


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient answering every request through ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response], base_url: str = "https://randraw.test") -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)

    return factory


@pytest.fixture
async def failing_client() -> AsyncIterator[httpx.AsyncClient]:
    """Client whose every request fails at the transport level."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://randraw.test") as client:
        yield client
