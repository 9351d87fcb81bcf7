"""Content gateway resolver: fetch, retry and cache JSON by content reference."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from cidgraph.adapters.http_resilience import ResilientClient
from cidgraph.domain.errors import NetworkError, RateLimitedError
from cidgraph.domain.references import is_valid_reference

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, MutableMapping
    from types import TracebackType

    from cidgraph.config.gateway import GatewayConfig
    from cidgraph.config.http_resilience import ResilienceConfig
    from cidgraph.domain.json_values import JsonValue

log = getLogger(__name__)


class ContentAddressResolver:
    """Fetches decoded JSON for content references from an HTTP gateway.

    Results are kept in ``cache``, an explicit mapping owned by the caller (a
    fresh dict when omitted) and shared by every fetch of this instance.
    Concurrent fetches of one key inside the event loop are single-flight; the
    cache itself is not safe to share across threads.

    Rate limited responses (429) are retried with the ``rate_limited`` policy,
    transport failures with the ``network`` policy. Any other non-2xx status is
    raised straight away.
    """

    def __init__(
        self,
        *,
        config: GatewayConfig,
        cache: MutableMapping[str, JsonValue] | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._cache: MutableMapping[str, JsonValue] = cache if cache is not None else {}
        self._client_factory = client_factory or ResilientClient
        self._sleep = sleep
        self._client: ResilientClient | None = None
        self._locks: dict[str, asyncio.Lock] = {}

    is_valid_reference = staticmethod(is_valid_reference)

    async def __aenter__(self) -> ContentAddressResolver:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def cached_references(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        """Drop every cached document."""

        self._cache.clear()
        self._locks = {key: lock for key, lock in self._locks.items() if lock.locked()}

    async def fetch(self, reference: str) -> JsonValue:
        if reference in self._cache:
            return self._cache[reference]

        lock = self._locks.setdefault(reference, asyncio.Lock())
        async with lock:
            if reference in self._cache:
                return self._cache[reference]
            content = await self._fetch_with_retry(reference)
            self._cache[reference] = content
            return content

    def _ensure_client(self) -> ResilientClient:
        if self._client is None:
            self._client = self._client_factory(self._resilience)
        return self._client

    async def _fetch_with_retry(self, reference: str) -> JsonValue:
        client = self._ensure_client()
        rate_limited = self._resilience.rate_limited
        network = self._resilience.network
        policy = network
        attempt = 0

        while True:
            log.debug(
                "Fetching %s from %s (attempt %s/%s)",
                reference,
                self._config.base_url,
                attempt + 1,
                policy.max_attempts,
            )
            try:
                response = await client.get(reference)
            except httpx.TransportError as exc:
                if not network.allows_retry(attempt):
                    raise NetworkError(
                        f"Failed to fetch {reference}: {exc!r}", reference=reference
                    ) from exc
                policy = network
                delay = network.delay(attempt)
                log.warning(
                    "Retry %s/%s for %s after %r, waiting %.1fs",
                    attempt + 1,
                    network.max_attempts,
                    reference,
                    exc,
                    delay,
                )
                await self._sleep(delay)
                attempt += 1
                continue

            if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
                if not rate_limited.allows_retry(attempt):
                    raise RateLimitedError(
                        f"HTTP 429: rate limited while fetching {reference}",
                        reference=reference,
                        status_code=response.status_code,
                    )
                policy = rate_limited
                delay = rate_limited.delay(attempt)
                log.warning("Rate limited. Waiting %.1f seconds before retry...", delay)
                await self._sleep(delay)
                attempt += 1
                continue

            if not response.is_success:
                raise NetworkError(
                    f"HTTP {response.status_code}: {response.reason_phrase} for {reference}",
                    reference=reference,
                    status_code=response.status_code,
                )

            try:
                return response.json()
            except ValueError as exc:
                raise NetworkError(
                    f"Response for {reference} is not valid JSON", reference=reference
                ) from exc
