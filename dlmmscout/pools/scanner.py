"""PairScanner: fetches pools for every token pair concurrently."""
from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Sequence

from dlmmscout.pools.sources.base import FetchStatus, PairFetch, Pool, PoolSource

logger = logging.getLogger(__name__)


def token_pairs(tokens: Sequence[str]) -> list[tuple[str, str]]:
    """Every unordered pair (tokens[i], tokens[j]) with i < j, in that order."""
    return list(itertools.combinations(tokens, 2))


@dataclass
class ScanResult:
    """Per-pair fetch outcomes of one scan, in enumeration order."""

    fetches: list[PairFetch] = field(default_factory=list)

    @property
    def pools(self) -> list[Pool]:
        all_pools: list[Pool] = []
        for fetch in self.fetches:
            all_pools.extend(fetch.pools)
        return all_pools

    def count(self, status: FetchStatus) -> int:
        return sum(1 for f in self.fetches if f.status is status)

    def summary(self) -> str:
        return (
            f"{len(self.fetches)} pairs, {len(self.pools)} pools "
            f"(found={self.count(FetchStatus.FOUND)}, "
            f"empty={self.count(FetchStatus.EMPTY)}, "
            f"not_found={self.count(FetchStatus.NOT_FOUND)}, "
            f"failed={self.count(FetchStatus.FAILED)})"
        )


class PairScanner:
    """Queries a pool source for all pairs of a token list at once."""

    def __init__(self, source: PoolSource) -> None:
        self.source = source

    async def scan(self, tokens: Sequence[str]) -> ScanResult:
        """Fetch every pair concurrently and wait for all of them."""
        pairs = token_pairs(tokens)
        fetches = await asyncio.gather(
            *[self._safe_fetch(a, b) for a, b in pairs],
            return_exceptions=False,
        )
        result = ScanResult(fetches=list(fetches))
        logger.info("Scanned %s: %s", self.source.name, result.summary())
        if result.fetches and not any(f.ok for f in result.fetches):
            logger.warning("Every pair request to %s failed", self.source.name)
        return result

    async def fetch_all(self, tokens: Sequence[str]) -> list[Pool]:
        """Flattened pools of all pairs, pair order then API order."""
        return (await self.scan(tokens)).pools

    async def _safe_fetch(self, token_a: str, token_b: str) -> PairFetch:
        try:
            return await self.source.fetch_pair(token_a, token_b)
        except Exception as exc:
            logger.error("Source %s failed for %s and %s: %s", self.source.name, token_a, token_b, exc)
            return PairFetch(token_a, token_b, FetchStatus.FAILED, error=str(exc))
