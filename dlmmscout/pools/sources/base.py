"""Base class for pool metadata sources, plus the records they return."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def _json_number(v: Any) -> float | None:
    # bool is an int subclass; JSON true/false is not a number
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return float(v)


class FeeTvlRatio(BaseModel):
    """Fee/TVL ratios precomputed by the API over trailing windows."""

    model_config = ConfigDict(frozen=True, extra="allow")

    min_30: float | None = None
    hour_1: float | None = None
    hour_2: float | None = None
    hour_4: float | None = None
    hour_12: float | None = None
    hour_24: float | None = None

    @field_validator("min_30", "hour_1", "hour_2", "hour_4", "hour_12", "hour_24", mode="before")
    @classmethod
    def numbers_only(cls, v: Any) -> float | None:
        return _json_number(v)


class Pool(BaseModel):
    """One liquidity pool as reported by the metadata API.

    Only the fields the ranking and the report read are typed, and odd
    values in them become None instead of failing the record; everything
    else the API sends is kept as an extra and passed through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    address: str | None = None
    name: str | None = None
    bin_step: int | str | None = None
    base_fee_percentage: str | None = None
    # Total value locked, as the decimal string the API sends
    liquidity: str = "0"
    fees_24h: float | None = None
    fee_tvl_ratio: FeeTvlRatio | None = None

    @field_validator("liquidity", mode="before")
    @classmethod
    def liquidity_as_text(cls, v: Any) -> str:
        if v is None:
            return "0"
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        # anything else parses to NaN, which the scorer treats as ineligible
        return v if isinstance(v, str) else ""

    @field_validator("fees_24h", mode="before")
    @classmethod
    def fees_as_number(cls, v: Any) -> float | None:
        if isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                return None
        return _json_number(v)

    @field_validator("address", "name", "base_fee_percentage", mode="before")
    @classmethod
    def display_text(cls, v: Any) -> str | None:
        if isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("bin_step", mode="before")
    @classmethod
    def bin_step_lenient(cls, v: Any) -> int | str | None:
        if isinstance(v, bool):
            return None
        if isinstance(v, int) or isinstance(v, str):
            return v
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return None

    @field_validator("fee_tvl_ratio", mode="before")
    @classmethod
    def ratio_object_only(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None


def lexical_order_mints(token_a: str, token_b: str) -> str:
    """Canonical key for an unordered pair: both mints sorted, joined by "-"."""
    return "-".join(sorted((token_a, token_b)))


class FetchStatus(StrEnum):
    FOUND = "found"
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class PairFetch:
    """Outcome of fetching the pools for one token pair."""

    token_a: str
    token_b: str
    status: FetchStatus
    pools: tuple[Pool, ...] = ()
    # Only set for FAILED
    error: str | None = None

    @property
    def pair_key(self) -> str:
        return lexical_order_mints(self.token_a, self.token_b)

    @property
    def ok(self) -> bool:
        return self.status is not FetchStatus.FAILED


class PoolSource(ABC):
    """ABC for pool metadata sources.

    Implementations must never raise from `fetch_pair`: a missing pair or a
    failed request is reported through the returned PairFetch status.
    """

    name: str = "base"

    @abstractmethod
    async def fetch_pair(self, token_a: str, token_b: str) -> PairFetch:
        """Return every pool the source knows for the unordered pair."""
        ...
