"""Pool scorer: ranks pools by fee yield on liquidity.

Yield = fee_tvl_ratio.hour_24 when the API provides a positive one,
otherwise fees_24h / liquidity.

Higher yield = more fee income per unit of liquidity provided.
"""
from __future__ import annotations

import math
from typing import Iterable

from dlmmscout.pools.sources.base import Pool


def parse_liquidity(raw: str | None) -> float:
    """Parse the API's decimal liquidity string. NaN when unparseable."""
    try:
        return float(raw)
    except (TypeError, ValueError):
        return math.nan


def pool_yield(pool: Pool) -> float:
    """Return the pool's 24h fee/liquidity yield. NaN sorts below everything."""
    liquidity = parse_liquidity(pool.liquidity)
    if math.isnan(liquidity):
        return math.nan
    if liquidity <= 0:
        return 0.0

    ratio = pool.fee_tvl_ratio
    if ratio is not None and ratio.hour_24 is not None:
        if math.isfinite(ratio.hour_24) and ratio.hour_24 > 0:
            return ratio.hour_24

    if pool.fees_24h is None:
        return math.nan
    return pool.fees_24h / liquidity


def is_eligible(pool: Pool) -> bool:
    """Only pools with real, positive liquidity can be recommended."""
    liquidity = parse_liquidity(pool.liquidity)
    return math.isfinite(liquidity) and liquidity > 0


def select_best(pools: Iterable[Pool]) -> Pool | None:
    """Return the highest-yield eligible pool; the earliest one wins ties."""
    best_pool: Pool | None = None
    best_yield = -math.inf

    for pool in pools:
        if not is_eligible(pool):
            continue
        y = pool_yield(pool)
        if y > best_yield:
            best_yield = y
            best_pool = pool

    return best_pool
