# space_storage/buckets_client.py
import logging
from typing import Any, AsyncIterator, Dict, Optional, Protocol
from urllib.parse import quote

import httpx

from space_storage.config import settings
from space_storage.errors import BucketsApiError
from space_storage.models import Bucket, PathItem, UserAuth
from space_storage.stream_utils import iter_byte_source

logger = logging.getLogger("SpaceStorage").getChild("BucketsClient")


class BucketsClient(Protocol):
    """Operations UserStorage needs from a bucket service."""

    async def get_or_create(self, name: str) -> Bucket: ...

    async def push_path(self, root_key: str, path: str, data: Any) -> Dict[str, Any]: ...

    async def pull_path(self, root_key: str, path: str) -> AsyncIterator[bytes]: ...

    async def list_path(self, root_key: str, path: str, depth: int = 1) -> Optional[PathItem]: ...


def auth_headers(auth: UserAuth) -> Dict[str, str]:
    headers = {
        "x-textile-api-key": auth.key,
        "x-textile-api-sig": auth.sig,
        "x-textile-api-sig-msg": auth.msg,
    }
    if auth.token:
        headers["authorization"] = f"bearer {auth.token}"
    return headers


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or response.text)
    except Exception:
        pass
    return response.text or f"Hub request failed with status {response.status_code}"


class HubBucketsClient:
    """Bucket client talking to the Textile hub HTTP gateway with httpx."""

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    @classmethod
    def with_user_auth(cls, auth: UserAuth, host: Optional[str] = None, timeout: Optional[float] = None) -> "HubBucketsClient":
        base_url = (host or settings.TEXTILE_HUB_ADDRESS).rstrip("/")
        http_client = httpx.AsyncClient(
            base_url=base_url,
            headers=auth_headers(auth),
            timeout=timeout if timeout is not None else settings.HUB_REQUEST_TIMEOUT,
        )
        logger.debug(f"Created hub buckets client for {base_url}")
        return cls(http_client)

    @staticmethod
    def _path_url(root_key: str, path: str, kind: str = "path") -> str:
        return f"/buckets/{quote(root_key, safe='')}/{kind}/{quote(path, safe='/')}"

    async def _check(self, response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response
        await response.aread()
        message = _error_message(response)
        logger.debug(f"Hub replied {response.status_code} for {response.request.method} {response.request.url}: {message}")
        raise BucketsApiError(message, response.status_code)

    async def get_or_create(self, name: str) -> Bucket:
        response = await self._check(await self.http_client.post("/buckets", json={"name": name}))
        return Bucket.model_validate(response.json())

    async def push_path(self, root_key: str, path: str, data: Any) -> Dict[str, Any]:
        response = await self._check(
            await self.http_client.put(self._path_url(root_key, path), content=iter_byte_source(data))
        )
        # The push already succeeded; a reply without a JSON body carries no path info
        try:
            body = response.json() if response.content else {}
        except ValueError:
            logger.debug(f"Hub push reply for '{path}' is not JSON, ignoring body")
            return {}
        return body if isinstance(body, dict) else {}

    async def pull_path(self, root_key: str, path: str) -> AsyncIterator[bytes]:
        """Opens the object at path and returns its content as a single-pass async iterator.

        Errors the hub reports for the path (missing link, bad key) are raised here,
        before any chunk is handed out.
        """
        request = self.http_client.build_request("GET", self._path_url(root_key, path))
        response = await self.http_client.send(request, stream=True)
        try:
            await self._check(response)
        except BucketsApiError:
            await response.aclose()
            raise
        return self._iter_response(response)

    @staticmethod
    async def _iter_response(response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        finally:
            await response.aclose()

    async def list_path(self, root_key: str, path: str, depth: int = 1) -> Optional[PathItem]:
        response = await self._check(
            await self.http_client.get(self._path_url(root_key, path, kind="list"), params={"depth": depth})
        )
        item = (response.json() or {}).get("item")
        return PathItem.model_validate(item) if item else None

    async def aclose(self) -> None:
        await self.http_client.aclose()
