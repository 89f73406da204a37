"""Key-value store implementations.

The REST store speaks the Upstash-style path protocol (``/get/<key>``,
``/set/<key>/<value>``, ``/incr/<key>``) with bearer authentication. All
stores return ``Outcome`` values instead of raising.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx
import logfire

from randraw.core.exceptions import StoreUnavailableError
from randraw.core.outcome import Ok, Unavailable
from randraw.core.protocols import KeyValueStore
from randraw.core.settings import KvSettings
from randraw.infra.logging import get_logger

__all__ = [
    'RestKeyValueStore',
    'InMemoryKeyValueStore',
    'FileKeyValueStore',
    'DisabledKeyValueStore',
    'create_shared_store',
]

logger = get_logger('adapters.kv')


@dataclass
class RestKeyValueStore(KeyValueStore):
    """REST key-value service client.

    Example:
        >>> settings = KvSettings(url='https://kv.example', token='secret')
        >>> async with RestKeyValueStore(settings) as store:
        ...     await store.increment('randraw:count')
    """

    settings: KvSettings
    timeout: float = 10.0
    ttl_seconds: int | None = None
    client: httpx.AsyncClient | None = None
    _owns_client: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.settings.enabled:
            raise ValueError('RestKeyValueStore requires KV_REST_API_URL and KV_REST_API_TOKEN')
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=str(self.settings.url).rstrip('/'),
                timeout=self.timeout,
                headers={'Authorization': f'Bearer {self.settings.token}'},
            )
            self._owns_client = True

    async def __aenter__(self) -> RestKeyValueStore:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    async def get(self, key: str) -> Ok[str | None] | Unavailable:
        """Read ``key``; a missing key is ``Ok(None)``."""
        with logfire.span('kv.get', key=key):
            try:
                result = await self._call('get', f'/get/{_quote(key)}')
            except StoreUnavailableError as exc:
                return _unavailable(exc)
            if result is None:
                return Ok(None)
            return Ok(result if isinstance(result, str) else json.dumps(result))

    async def set(self, key: str, value: str) -> Ok[None] | Unavailable:
        """Write ``value`` under ``key``, with the configured expiry if any."""
        with logfire.span('kv.set', key=key):
            path = f'/set/{_quote(key)}/{_quote(value)}'
            if self.ttl_seconds is not None:
                path += f'/EX/{self.ttl_seconds}'
            try:
                await self._call('set', path)
            except StoreUnavailableError as exc:
                return _unavailable(exc)
            return Ok(None)

    async def increment(self, key: str) -> Ok[int] | Unavailable:
        """Increment the counter under ``key``."""
        with logfire.span('kv.increment', key=key):
            try:
                result = await self._call('increment', f'/incr/{_quote(key)}')
            except StoreUnavailableError as exc:
                return _unavailable(exc)
            if isinstance(result, bool) or not isinstance(result, int):
                return Unavailable(f'increment returned non-integer: {result!r}')
            return Ok(result)

    # =========================================================================
    # Private Methods
    # =========================================================================
    async def _call(self, operation: str, path: str) -> Any:
        """Perform one request and return the ``result`` member."""
        client = self.client
        if client is None:
            raise StoreUnavailableError(operation, 'client closed')
        try:
            response = await client.get(path, headers={'Cache-Control': 'no-store'})
        except httpx.HTTPError as exc:
            raise StoreUnavailableError(operation, str(exc)) from exc
        if response.status_code >= 400:
            raise StoreUnavailableError(operation, f'status {response.status_code}')
        try:
            body = response.json()
        except ValueError as exc:
            raise StoreUnavailableError(operation, 'non-JSON response') from exc
        if not isinstance(body, dict):
            raise StoreUnavailableError(operation, 'unexpected response shape')
        if 'error' in body:
            raise StoreUnavailableError(operation, str(body['error']))
        return body.get('result')


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used by the service when no REST store is configured and in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Ok[str | None] | Unavailable:
        return Ok(self._data.get(key))

    async def set(self, key: str, value: str) -> Ok[None] | Unavailable:
        self._data[key] = value
        return Ok(None)

    async def increment(self, key: str) -> Ok[int] | Unavailable:
        try:
            current = int(self._data.get(key, '0'))
        except ValueError:
            return Unavailable(f'value at {key} is not an integer')
        self._data[key] = str(current + 1)
        return Ok(current + 1)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class FileKeyValueStore(KeyValueStore):
    """JSON-file store for state that must survive restarts on one machine.

    A corrupt file reads as empty; the next write replaces it.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    async def get(self, key: str) -> Ok[str | None] | Unavailable:
        with logfire.span('file_store.get', key=key):
            try:
                return Ok(self._load().get(key))
            except OSError as exc:
                return Unavailable(f'read failed: {exc}')

    async def set(self, key: str, value: str) -> Ok[None] | Unavailable:
        with logfire.span('file_store.set', key=key):
            try:
                data = self._load()
                data[key] = value
                self._dump(data)
            except OSError as exc:
                return Unavailable(f'write failed: {exc}')
            return Ok(None)

    async def increment(self, key: str) -> Ok[int] | Unavailable:
        try:
            data = self._load()
            current = int(data.get(key, '0'))
            data[key] = str(current + 1)
            self._dump(data)
        except (OSError, ValueError) as exc:
            return Unavailable(f'increment failed: {exc}')
        return Ok(current + 1)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except ValueError:
            logger.warning('file_store_corrupt', path=str(self.path))
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        tmp_path.write_text(json.dumps(data, sort_keys=True), encoding='utf-8')
        tmp_path.replace(self.path)


class DisabledKeyValueStore(KeyValueStore):
    """Stand-in when no shared store is configured: every call is unavailable."""

    async def get(self, key: str) -> Ok[str | None] | Unavailable:
        return Unavailable('store disabled')

    async def set(self, key: str, value: str) -> Ok[None] | Unavailable:
        return Unavailable('store disabled')

    async def increment(self, key: str) -> Ok[int] | Unavailable:
        return Unavailable('store disabled')


def create_shared_store(
    settings: KvSettings, *, timeout: float = 10.0, ttl_seconds: int | None = None
) -> KeyValueStore:
    """REST store when configured, otherwise a disabled store."""
    if settings.enabled:
        return RestKeyValueStore(settings, timeout=timeout, ttl_seconds=ttl_seconds)
    logger.info('shared_store_disabled')
    return DisabledKeyValueStore()


def _quote(value: str) -> str:
    return quote(value, safe='')


def _unavailable(exc: StoreUnavailableError) -> Unavailable:
    logger.warning('kv_unavailable', operation=exc.operation, error=str(exc))
    return Unavailable(str(exc))
