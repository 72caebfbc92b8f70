"""HTTP client for the upstream streaming endpoint.

One relay issues exactly one POST and never retries. The response body is fed
line by line into the decoder; transport level problems (connect and read
errors, non-success statuses) surface as ``UpstreamTransportFailure`` and
malformed bodies as ``UpstreamProtocolFailure``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx
import orjson

from ..errors import UpstreamTransportFailure
from .types import Message, StreamDone, StreamItem, RelayRequest
from .decoder import iter_increments
from ..config.upstream import (
    UPSTREAM_URL,
    UPSTREAM_MODEL,
    UPSTREAM_API_KEY,
    UPSTREAM_VERSION,
    UPSTREAM_MAX_TOKENS,
    UPSTREAM_VERSION_HEADER,
    UPSTREAM_API_KEY_HEADER,
    UPSTREAM_CONNECT_TIMEOUT_S,
)

logger = logging.getLogger(__name__)

_ERROR_BODY_PREVIEW = 200


class UpstreamClient:
    """Builds relay requests and streams their decoded increments."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        url: str = UPSTREAM_URL,
        api_key: str = UPSTREAM_API_KEY,
        model: str = UPSTREAM_MODEL,
        version: str = UPSTREAM_VERSION,
        max_tokens: int = UPSTREAM_MAX_TOKENS,
    ) -> None:
        self._owns_client = http_client is None
        if http_client is None:
            # read stays unbounded; the relay deadline bounds the whole stream
            timeout = httpx.Timeout(None, connect=UPSTREAM_CONNECT_TIMEOUT_S)
            http_client = httpx.AsyncClient(timeout=timeout)
        self._client = http_client
        self.url = url
        self.model = model
        self.max_tokens = max_tokens
        self._headers = {
            "Content-Type": "application/json",
            UPSTREAM_API_KEY_HEADER: api_key,
            UPSTREAM_VERSION_HEADER: version,
        }

    def build_request(self, content: str, system: str) -> RelayRequest:
        return RelayRequest(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=(Message(role="user", content=content),),
        )

    async def stream(self, request: RelayRequest) -> AsyncIterator[StreamItem]:
        """POST the request and yield increments until the terminal marker.

        Raises:
            UpstreamTransportFailure: Connection, read or HTTP status failure.
            UpstreamProtocolFailure: Undecodable data or early end of body.
        """
        body = orjson.dumps(request.to_payload())
        try:
            async with self._client.stream("POST", self.url, headers=self._headers, content=body) as response:
                if not response.is_success:
                    raw = await response.aread()
                    preview = raw.decode("utf-8", errors="replace")[:_ERROR_BODY_PREVIEW]
                    raise UpstreamTransportFailure(
                        f"upstream returned HTTP {response.status_code}: {preview}",
                        status_code=response.status_code,
                    )
                logger.debug("upstream stream opened status=%s", response.status_code)
                async for item in iter_increments(response.aiter_lines()):
                    yield item
                    if isinstance(item, StreamDone):
                        return
        except httpx.HTTPError as exc:
            raise UpstreamTransportFailure(f"upstream request failed: {exc}") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["UpstreamClient"]
