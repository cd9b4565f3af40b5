"""Meteora DLMM pool source.

Looks up every pool for a token pair through the public DLMM API:

    GET https://dlmm-api.meteora.ag/pair/group_pair/{lexical_order_mints}

The API answers 500 when it has no pools for the pair, so that status is
reported as NOT_FOUND rather than as a failure. No auth required.
"""
from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from dlmmscout.config import settings
from dlmmscout.pools.sources.base import (
    FetchStatus,
    PairFetch,
    Pool,
    PoolSource,
    lexical_order_mints,
)

logger = logging.getLogger(__name__)

GROUP_PAIR_PATH = "/pair/group_pair/{key}"
PAIR_NOT_FOUND_STATUS = 500


class MeteoraDLMMSource(PoolSource):
    """Fetches DLMM pools for a token pair, one request per pair, no retries."""

    name = "meteora_dlmm"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (settings.dlmm_api_url if base_url is None else base_url).rstrip("/")
        self.timeout = settings.http_timeout_seconds if timeout is None else timeout
        # Shared client for a whole scan; None = one client per request
        self._client = client

    def pair_url(self, token_a: str, token_b: str) -> str:
        return self.base_url + GROUP_PAIR_PATH.format(key=lexical_order_mints(token_a, token_b))

    async def fetch_pair(self, token_a: str, token_b: str) -> PairFetch:
        url = self.pair_url(token_a, token_b)
        try:
            data = await self._get_json(url)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == PAIR_NOT_FOUND_STATUS:
                logger.info("Pair not found (status 500) for tokens: %s and %s", token_a, token_b)
                return PairFetch(token_a, token_b, FetchStatus.NOT_FOUND)
            return self._failed(token_a, token_b, f"HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            return self._failed(token_a, token_b, f"{type(exc).__name__}: {exc}")
        except ValueError as exc:
            return self._failed(token_a, token_b, f"invalid JSON: {exc}")

        if not isinstance(data, list):
            return self._failed(token_a, token_b, f"expected a JSON array, got {type(data).__name__}")

        try:
            pools = tuple(Pool.model_validate(item) for item in data)
        except ValidationError as exc:
            return self._failed(
                token_a, token_b, f"invalid pool record ({exc.error_count()} errors)"
            )

        if not pools:
            logger.debug("No pools listed for %s", lexical_order_mints(token_a, token_b))
            return PairFetch(token_a, token_b, FetchStatus.EMPTY)

        logger.debug("%d pools for %s", len(pools), lexical_order_mints(token_a, token_b))
        return PairFetch(token_a, token_b, FetchStatus.FOUND, pools=pools)

    async def _get_json(self, url: str):
        if self._client is not None:
            resp = await self._client.get(url, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.json()

    def _failed(self, token_a: str, token_b: str, reason: str) -> PairFetch:
        logger.error("Error fetching pair for %s and %s: %s", token_a, token_b, reason)
        return PairFetch(token_a, token_b, FetchStatus.FAILED, error=reason)
