# app/clients/auth_client.py
from typing import Any, Dict, List, Optional, Sequence
import asyncio
import logging

import httpx

from app.core.config import Settings
from app.core.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class AuthServiceClient:
    """
        Thin async client for the Auth microservice's internal user endpoints.

        Every call carries a bounded timeout. Transport errors, timeouts and
        non-2xx responses are raised as `UpstreamUnavailableError`; callers decide
        whether to degrade. Read calls are retried with exponential backoff,
        writes are attempted once.

        Endpoints:
            GET   {prefix}/users/{id}        -> user record
            POST  {prefix}/users/batch       -> {"users": [...]}
            PATCH /api/auth/agent-status     -> verification status push
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.base_url = settings.AUTH_SERVICE_URL.rstrip("/")
        self.internal_prefix = "/" + settings.AUTH_INTERNAL_PREFIX.strip("/")
        self.timeout = settings.AUTH_TIMEOUT_SECONDS
        self.max_retries = settings.AUTH_MAX_RETRIES
        self.retry_backoff = settings.AUTH_RETRY_BACKOFF_SECONDS
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: Any = None, retries: int = 0) -> httpx.Response:
        url = f"{self.base_url}{path}"
        attempt = 0
        while True:
            try:
                response = await self._client.request(method, url, json=json, timeout=self.timeout)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                # 4xx will not change on retry
                if e.response.status_code < 500 or attempt >= retries:
                    raise UpstreamUnavailableError(
                        f"{method} {path} returned {e.response.status_code}"
                    ) from e
                error = e
            except httpx.HTTPError as e:
                if attempt >= retries:
                    raise UpstreamUnavailableError(f"{method} {path} failed: {e!r}") from e
                error = e

            delay = self.retry_backoff * (2 ** attempt)
            logger.info("Retrying %s %s in %.2fs after: %r", method, path, delay, error)
            await asyncio.sleep(delay)
            attempt += 1

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Auth service returned a non-JSON body") from e

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        response = await self._request(
            "GET", f"{self.internal_prefix}/users/{user_id}", retries=self.max_retries
        )
        data = self._json(response)
        if not data:
            return None
        if not isinstance(data, dict):
            raise UpstreamUnavailableError("Auth service returned a malformed user record")
        return data

    async def get_users_batch(self, user_ids: Sequence[str]) -> List[Dict[str, Any]]:
        if not user_ids:
            return []
        response = await self._request(
            "POST",
            f"{self.internal_prefix}/users/batch",
            json={"ids": list(user_ids)},
            retries=self.max_retries,
        )
        data = self._json(response) or {}
        users = (data.get("users") or []) if isinstance(data, dict) else None
        if not isinstance(users, list):
            raise UpstreamUnavailableError("Auth service returned a malformed users batch")
        # drop entries that are not user records
        return [u for u in users if isinstance(u, dict)]

    async def update_agent_status(self, user_id: str, status: str) -> bool:
        """ Push an agent's verification status to the Auth service. Failures are logged only. """
        try:
            await self._request("PATCH", "/api/auth/agent-status", json={"userId": user_id, "status": status})
            return True
        except UpstreamUnavailableError as e:
            logger.warning("Failed to update auth-service verification for %s: %s", user_id, e)
            return False
