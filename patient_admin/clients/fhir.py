"""Async HTTP client for the remote FHIR server."""

from dataclasses import dataclass, field
from typing import Any

import httpx

from patient_admin.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FHIRConfig:
    """Configuration for the FHIR client."""

    base_url: str = "https://demo.kodjin.com/fhir"
    headers: dict[str, str] = field(
        default_factory=lambda: {
            "Content-Type": "application/fhir+json",
            "Prefer": "pagination=offset-skip",
        }
    )


class FHIRClient:
    """Thin JSON client over one ``httpx.AsyncClient``.

    No retries and no timeout: a failed call raises immediately.
    Non-2xx responses raise ``httpx.HTTPStatusError``; connection problems
    raise the other ``httpx.HTTPError`` subclasses.
    """

    def __init__(self, config: FHIRConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize FHIR client.

        Args:
            config: Client configuration
            transport: Optional transport, e.g. ``httpx.MockTransport`` in tests
        """
        self.config = config or FHIRConfig()
        self.client = httpx.AsyncClient(
            base_url=self.config.base_url.rstrip("/"),
            headers=self.config.headers,
            timeout=None,
            transport=transport,
        )

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, resource: dict[str, Any]) -> Any:
        return await self._request("POST", path, json=resource)

    async def put(self, path: str, resource: dict[str, Any]) -> Any:
        return await self._request("PUT", path, json=resource)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and decode its JSON body (None when the body is empty)."""
        logger.debug(f"FHIR {method} {path} params={kwargs.get('params')}")
        response = await self.client.request(method, path, **kwargs)
        response.raise_for_status()

        if not response.content:
            return None
        return response.json()
