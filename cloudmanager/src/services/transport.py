"""
HTTP transport for the Cloud Manager API.
"""

import logging
from typing import Any, Dict, Optional, Type

import httpx

from cloudmanager.src.config import Settings, get_settings
from cloudmanager.src.services.errors import RequestFailed

logger = logging.getLogger(__name__)

def raise_for_status(
    res: httpx.Response,
    message: str,
    error: Type[RequestFailed] = RequestFailed,
):
    """Raise `error` carrying URL, status and reason unless the response is 2xx."""
    if res.is_success:
        return
    raise error(message, str(res.url), res.status_code, res.reason_phrase)

def json_or_none(res: httpx.Response) -> Optional[Any]:
    """Decoded JSON body, or None when the body is empty or not JSON."""
    try:
        return res.json()
    except ValueError:
        logger.debug(f"Response from {res.url} is not JSON")
        return None

class ApiClient:
    """
    Issues authenticated requests against the API and uncredentialed
    requests against storage URLs handed out by it (log redirects, tail URLs).
    The base URL is resolved once per instance.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self.base_url = settings.base_url.rstrip("/")
        self._headers = {
            "x-gw-ims-org-id": settings.ims_org_id,
            "x-api-key": settings.api_key,
            "Authorization": f"Bearer {settings.access_token}",
            "accept": "application/json",
        }
        self._api = httpx.AsyncClient(headers=self._headers, transport=transport)
        self._storage = httpx.AsyncClient(transport=transport, follow_redirects=True)

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path}"

    async def request(self, method: str, path: str, body: Optional[Any] = None) -> httpx.Response:
        url = self.url(path)
        logger.debug(f"fetch: {method} {url}")
        if body is not None:
            return await self._api.request(method, url, json=body)
        return await self._api.request(method, url)

    async def get(self, path: str) -> httpx.Response:
        return await self.request("GET", path)

    async def put(self, path: str, body: Optional[Any] = None) -> httpx.Response:
        return await self.request("PUT", path, body)

    async def patch(self, path: str, body: Optional[Any] = None) -> httpx.Response:
        return await self.request("PATCH", path, body)

    async def delete(self, path: str) -> httpx.Response:
        return await self.request("DELETE", path)

    async def get_json(self, path: str, message: str) -> Dict[str, Any]:
        res = await self.get(path)
        raise_for_status(res, message)
        return res.json()

    async def head_storage(self, url: str) -> httpx.Response:
        logger.debug(f"fetch: HEAD {url}")
        return await self._storage.head(url)

    def stream_storage(self, url: str, headers: Optional[Dict[str, str]] = None):
        """Streaming GET against a storage URL, used as an async context manager."""
        logger.debug(f"fetch: GET {url} {headers or ''}")
        return self._storage.stream("GET", url, headers=headers)

    async def aclose(self):
        await self._api.aclose()
        await self._storage.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
