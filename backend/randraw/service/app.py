"""FastAPI application serving the time oracle, recipes and feedback.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from randraw._version import __version__
from randraw.core.models import FeedbackRequest, FeedbackResponse, RecipeResponse, TimeResponse
from randraw.core.outcome import Ok
from randraw.core.protocols import KeyValueStore
from randraw.core.settings import KvSettings, RandrawSettings
from randraw.adapters.kv import RestKeyValueStore
from randraw.infra.config import load_kv_settings, load_settings
from randraw.recipes.bandit import BanditRepository
from randraw.recipes.resolver import AdaptiveResolver, DeterministicResolver, RecipeResolver
from randraw.timing.clock import system_now_ms

__all__ = ['create_app']

_NO_STORE = {'Cache-Control': 'no-store'}


def create_app(
    settings: RandrawSettings | None = None,
    *,
    store: KeyValueStore | None = None,
    kv_settings: KvSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Service settings; loaded from the environment when omitted.
        store: Shared key-value store. When omitted, a REST store is created
            if ``KV_REST_API_URL`` and ``KV_REST_API_TOKEN`` are set; otherwise
            recipes are deterministic and feedback is accepted but not stored.
        kv_settings: REST store settings; loaded from the environment when omitted.
    """
    settings = settings or load_settings()
    if store is None:
        kv_settings = kv_settings or load_kv_settings()
        if kv_settings.enabled:
            store = RestKeyValueStore(
                kv_settings, timeout=settings.http_timeout, ttl_seconds=settings.recipe_ttl_seconds
            )

    if store is not None:
        resolver = RecipeResolver(AdaptiveResolver(store, salt=settings.global_salt), salt=settings.global_salt)
    else:
        resolver = RecipeResolver(DeterministicResolver(settings.global_salt), salt=settings.global_salt)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if isinstance(store, RestKeyValueStore):
            await store.aclose()

    app = FastAPI(
        title='randraw',
        description='Time oracle, shared recipes and feedback for synchronized displays',
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=['*'],
        allow_methods=['GET', 'POST'],
        allow_headers=['*'],
    )
    app.state.store = store
    app.state.resolver = resolver

    @app.get('/health')
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {'status': 'healthy'}

    @app.get('/api/time')
    async def get_time() -> JSONResponse:
        """Authoritative wall clock for client offset estimation."""
        return _json(TimeResponse(server_now=system_now_ms()))

    @app.get('/api/recipe')
    async def get_recipe(i: str = '0') -> JSONResponse:
        """Recipe for cycle ``i``; unparsable or negative indices read as 0."""
        cycle_index = _parse_index(i)
        with logfire.span('api.recipe', cycle_index=cycle_index):
            resolved = await resolver.resolve(cycle_index)
        return _json(RecipeResponse(ok=True, recipe=resolved.recipe, global_count=resolved.global_count))

    @app.post('/api/feedback')
    async def post_feedback(request: Request) -> JSONResponse:
        """Merge a reward into the shared bandit state."""
        try:
            body = FeedbackRequest.model_validate(await request.json())
        except (ValidationError, ValueError):
            return _json(FeedbackResponse(ok=False, error='invalid body'), status_code=400)
        if store is None:
            return _json(FeedbackResponse(ok=True, stored=False))
        with logfire.span('api.feedback', cycle_index=body.cycle_index, generator=body.generator_id):
            outcome = await BanditRepository(store).record(body.generator_id, body.reward)
        return _json(FeedbackResponse(ok=True, stored=isinstance(outcome, Ok)))

    return app


def _parse_index(raw: str) -> int:
    try:
        return max(0, int(raw))
    except ValueError:
        return 0


def _json(model: BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        model.model_dump(mode='json', by_alias=True, exclude_none=True),
        status_code=status_code,
        headers=_NO_STORE,
    )
