from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from maternity.services.exceptions import DownstreamServiceError

logger = logging.getLogger(__name__)


class DirectoryClient:
    """Async HTTP client for the document service holding clinic records."""

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float = 10.0,
        use_mock_data: bool = True,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = str(base_url).rstrip("/") if base_url else None
        self._timeout = timeout
        self.use_mock_data = use_mock_data or not self._base_url
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=self._headers,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self.use_mock_data or not self._base_url:
            raise RuntimeError("HTTP client requested while running in mock mode")
        if self._client is None:
            self._client = self._build_client()
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        payload: Dict[str, Any] | None = None,
        params: Dict[str, Any] | None = None,
        allow_status: tuple[int, ...] = (),
    ) -> tuple[int, Any]:
        """Send a request and return ``(status_code, json_body)``.

        Statuses listed in ``allow_status`` are returned to the caller instead
        of being raised as ``DownstreamServiceError``.
        """
        client = await self._ensure_client()
        try:
            logger.debug("Directory %s %s payload=%s", method, path, payload)
            response = await client.request(method, path, json=payload, params=params)
            if response.status_code in allow_status:
                return response.status_code, None
            response.raise_for_status()
            return response.status_code, response.json() if response.content else None
        except httpx.HTTPStatusError as exc:
            logger.exception("Document service returned error %s", exc.response.status_code)
            raise DownstreamServiceError(
                "Document service returned an error response",
                status_code=exc.response.status_code,
                cause=exc,
            ) from exc
        except httpx.RequestError as exc:
            logger.exception("Unable to reach document service: %s", exc)
            raise DownstreamServiceError(
                "Unable to reach document service", status_code=None, cause=exc
            ) from exc

    async def get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        _, body = await self.request("GET", path, params=params)
        return body

    async def post(self, path: str, payload: Dict[str, Any]) -> Any:
        _, body = await self.request("POST", path, payload=payload)
        return body

    async def simulate_latency(self) -> None:
        """Allow services to await for latency even when mocking responses."""

        await asyncio.sleep(0)
