from __future__ import annotations

import logging
import time
from typing import Any, Dict, Mapping, Optional

import httpx
from jose import jwt

from connectors.base import PageFetcher
from connectors.config import SourceConfig
from connectors.errors import ConnectionCheckError
from core.config import settings
from core.logging import log_event

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


def create_access_token(
    api_key: str,
    api_secret: str,
    identity: Optional[str] = None,
    ttl_seconds: Optional[int] = None,
    now: Optional[float] = None,
) -> str:
    issued = int(now if now is not None else time.time())
    claims = {
        "iss": api_key,
        "sub": identity or settings.token_identity,
        "nbf": issued,
        "exp": issued + (ttl_seconds or settings.token_ttl_seconds),
        "video": {"roomList": True, "roomAdmin": True},
    }
    return jwt.encode(claims, api_secret, algorithm=TOKEN_ALGORITHM)


class LiveKitClient(PageFetcher):
    """Authenticated JSON GETs against the LiveKit HTTP API.

    Single attempt per call: non-2xx answers raise ``httpx.HTTPStatusError``
    and transport failures raise the matching ``httpx`` error.
    """

    def __init__(self, config: SourceConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        token = create_access_token(config.api_key, config.api_secret)
        self._client = httpx.AsyncClient(
            base_url=config.endpoint_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "User-Agent": settings.user_agent,
            },
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "LiveKitClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        response = await self._client.get(path, params=dict(params) if params else None)
        log_event(logger, "http.get", path=path, status=response.status_code)
        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()

    async def test_connection(self) -> bool:
        try:
            await self.fetch("/info")
        except httpx.HTTPError as exc:
            logger.error("Connection test failed", exc_info=exc)
            raise ConnectionCheckError(f"Connection test failed: {exc}") from exc
        return True
