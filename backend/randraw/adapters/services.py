"""HTTP clients for the recipe and feedback services.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""
from __future__ import annotations

import time
from dataclasses import dataclass

import httpx
import logfire
from pydantic import ValidationError

from randraw.core.exceptions import ServiceError
from randraw.core.models import FeedbackRequest, FeedbackResponse, RecipeResponse
from randraw.core.outcome import Ok, Unavailable
from randraw.core.settings import RandrawSettings
from randraw.infra.instrumentation import Metrics
from randraw.infra.logging import get_logger

__all__ = ['ServiceClient', 'RECIPE_PATH', 'FEEDBACK_PATH', 'create_service_http_client']

RECIPE_PATH = '/api/recipe'
FEEDBACK_PATH = '/api/feedback'

logger = get_logger('adapters.services')


@dataclass
class ServiceClient:
    """Client for the randraw recipe and feedback endpoints.

    Every call returns an ``Outcome``; callers choose the fallback.

    Example:
        >>> async with httpx.AsyncClient(base_url='https://randraw.example') as http:
        ...     services = ServiceClient(http)
        ...     outcome = await services.fetch_recipe(42)
    """

    client: httpx.AsyncClient

    async def fetch_recipe(self, cycle_index: int) -> Ok[RecipeResponse] | Unavailable:
        """Fetch the shared recipe for ``cycle_index``."""
        with logfire.span('services.fetch_recipe', cycle_index=cycle_index):
            try:
                response = await self._send('GET', RECIPE_PATH, params={'i': cycle_index})
                payload = RecipeResponse.model_validate(response.json())
            except (ServiceError, ValidationError, ValueError) as exc:
                return _unavailable('recipe', exc)
            if not payload.ok or payload.recipe is None:
                return Unavailable(payload.error or 'recipe service returned ok=false')
            if payload.recipe.cycle_index != cycle_index:
                return Unavailable(
                    f'recipe service answered cycle {payload.recipe.cycle_index} for {cycle_index}'
                )
            return Ok(payload)

    async def send_feedback(self, request: FeedbackRequest) -> Ok[FeedbackResponse] | Unavailable:
        """Report a reward for a completed cycle."""
        with logfire.span('services.send_feedback', cycle_index=request.cycle_index):
            try:
                response = await self._send('POST', FEEDBACK_PATH, json=request.model_dump(by_alias=True))
                payload = FeedbackResponse.model_validate(response.json())
            except (ServiceError, ValidationError, ValueError) as exc:
                return _unavailable('feedback', exc)
            if not payload.ok:
                return Unavailable(payload.error or 'feedback service returned ok=false')
            return Ok(payload)

    # =========================================================================
    # Private Methods
    # =========================================================================
    async def _send(self, method: str, path: str, **kwargs: object) -> httpx.Response:
        start = time.perf_counter()
        service = path.rsplit('/', 1)[-1]
        try:
            response = await self.client.request(method, path, headers={'Cache-Control': 'no-store'}, **kwargs)
        except httpx.HTTPError as exc:
            raise ServiceError(service, str(exc)) from exc
        Metrics.record_api_call(path, response.status_code, (time.perf_counter() - start) * 1000)
        if response.status_code >= 400:
            raise ServiceError(service, f'status {response.status_code}', status_code=response.status_code)
        return response


def _unavailable(service: str, exc: Exception) -> Unavailable:
    logger.warning('service_unavailable', service=service, error=str(exc), error_type=type(exc).__name__)
    return Unavailable(f'{service}: {exc}')


def create_service_http_client(settings: RandrawSettings) -> httpx.AsyncClient:
    """HTTP client for the randraw service at ``settings.api_base_url``; the caller closes it."""
    return httpx.AsyncClient(base_url=settings.api_base_url.rstrip('/'), timeout=settings.http_timeout)
