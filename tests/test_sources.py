"""Tests for the pool records and the Meteora DLMM source (no network)."""
from __future__ import annotations

import logging

import httpx
import pytest
from pydantic import ValidationError

from dlmmscout.pools.sources.base import FetchStatus, PairFetch, Pool, lexical_order_mints
from dlmmscout.pools.sources.meteora import MeteoraDLMMSource

SOL = "So11111111111111111111111111111111111111112"
JUP = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"

POOL_JSON = {
    "address": "5rCf1DM8LjKTw4YqhnoLcngyZYeNnQqztScTogYHAS6",
    "name": "SOL-JUP",
    "mint_x": JUP,
    "mint_y": SOL,
    "bin_step": 20,
    "base_fee_percentage": "0.2",
    "liquidity": "123456.78",
    "fees_24h": 1500.5,
    "fee_tvl_ratio": {"hour_1": 0.01, "hour_24": 0.42},
    "hide": False,
}


def make_source(handler) -> MeteoraDLMMSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MeteoraDLMMSource(base_url="https://dlmm.test/", client=client)


# ── pair key ──────────────────────────────────────────────────────────────────


def test_lexical_order_mints_is_order_independent():
    assert lexical_order_mints(SOL, JUP) == lexical_order_mints(JUP, SOL)
    assert lexical_order_mints(SOL, JUP) == f"{JUP}-{SOL}"


def test_lexical_order_mints_uses_plain_string_order():
    assert lexical_order_mints("b", "B") == "B-b"
    assert lexical_order_mints("aa", "a") == "a-aa"


def test_pair_url():
    source = MeteoraDLMMSource(base_url="https://dlmm.test/")
    assert source.pair_url(SOL, JUP) == f"https://dlmm.test/pair/group_pair/{JUP}-{SOL}"


# ── pool model ────────────────────────────────────────────────────────────────


def test_pool_passes_extra_fields_through():
    pool = Pool.model_validate(POOL_JSON)
    assert pool.fee_tvl_ratio.hour_24 == 0.42
    assert pool.model_extra["hide"] is False


def test_pool_is_immutable():
    pool = Pool.model_validate(POOL_JSON)
    with pytest.raises(ValidationError):
        pool.name = "other"


def test_pool_numeric_liquidity_kept_as_text():
    assert Pool.model_validate({"liquidity": 250.5}).liquidity == "250.5"
    assert Pool.model_validate({"liquidity": None}).liquidity == "0"


def test_pool_ratio_of_wrong_shape_is_dropped():
    assert Pool.model_validate({"fee_tvl_ratio": 0.3}).fee_tvl_ratio is None
    assert Pool.model_validate({"fee_tvl_ratio": [0.3]}).fee_tvl_ratio is None
    ratio = Pool.model_validate({"fee_tvl_ratio": {"hour_24": "0.3"}}).fee_tvl_ratio
    assert ratio is not None and ratio.hour_24 is None
    ratio = Pool.model_validate({"fee_tvl_ratio": {"hour_24": True}}).fee_tvl_ratio
    assert ratio.hour_24 is None


def test_pair_fetch_ok():
    assert PairFetch(SOL, JUP, FetchStatus.NOT_FOUND).ok
    assert not PairFetch(SOL, JUP, FetchStatus.FAILED, error="x").ok
    assert PairFetch(SOL, JUP, FetchStatus.EMPTY).pair_key == f"{JUP}-{SOL}"


# ── fetch_pair ────────────────────────────────────────────────────────────────


async def test_fetch_pair_found():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json=[POOL_JSON, {**POOL_JSON, "name": "SOL-JUP 2"}])

    result = await make_source(handler).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.FOUND
    assert [p.name for p in result.pools] == ["SOL-JUP", "SOL-JUP 2"]
    assert seen == [f"/pair/group_pair/{JUP}-{SOL}"]


async def test_fetch_pair_empty_array():
    result = await make_source(lambda r: httpx.Response(200, json=[])).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.EMPTY
    assert result.pools == ()


async def test_fetch_pair_500_is_not_found(caplog):
    caplog.set_level(logging.INFO, logger="dlmmscout")
    result = await make_source(lambda r: httpx.Response(500)).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.NOT_FOUND
    assert result.pools == ()
    assert result.error is None

    [record] = [r for r in caplog.records if r.name.startswith("dlmmscout")]
    assert record.levelno == logging.INFO
    assert SOL in record.getMessage() and JUP in record.getMessage()


async def test_fetch_pair_other_status_fails_soft(caplog):
    caplog.set_level(logging.INFO, logger="dlmmscout")
    result = await make_source(lambda r: httpx.Response(404)).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.FAILED
    assert result.pools == ()
    assert "404" in result.error

    [record] = [r for r in caplog.records if r.name.startswith("dlmmscout")]
    assert record.levelno == logging.ERROR
    assert SOL in record.getMessage() and JUP in record.getMessage()


async def test_fetch_pair_keeps_pools_with_odd_display_fields():
    body = [
        {"name": "GOOD", "liquidity": "100", "fees_24h": 10},
        {"name": None, "liquidity": "100", "fees_24h": 50, "apr": "n/a", "bin_step": {"x": 1}},
    ]
    result = await make_source(lambda r: httpx.Response(200, json=body)).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.FOUND
    assert len(result.pools) == 2
    assert result.pools[1].name is None
    assert result.pools[1].bin_step is None
    assert result.pools[1].model_extra["apr"] == "n/a"


async def test_fetch_pair_transport_error_fails_soft():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await make_source(handler).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.FAILED
    assert "ConnectError" in result.error


async def test_fetch_pair_invalid_json_fails_soft():
    result = await make_source(lambda r: httpx.Response(200, content=b"<html>")).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.FAILED
    assert "invalid JSON" in result.error


async def test_fetch_pair_non_array_fails_soft():
    result = await make_source(lambda r: httpx.Response(200, json={"error": "x"})).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.FAILED
    assert "JSON array" in result.error


async def test_fetch_pair_bad_record_fails_soft():
    result = await make_source(lambda r: httpx.Response(200, json=[POOL_JSON, "junk"])).fetch_pair(SOL, JUP)
    assert result.status is FetchStatus.FAILED
    assert result.pools == ()


def test_pool_odd_numeric_fields_become_none():
    pool = Pool.model_validate({"liquidity": {"usd": 1}, "fees_24h": "n/a", "bin_step": 20.0})
    assert pool.liquidity == ""
    assert pool.fees_24h is None
    assert pool.bin_step == 20
    assert Pool.model_validate({"fees_24h": "12.5"}).fees_24h == 12.5


def test_explicit_zero_timeout_is_kept():
    source = MeteoraDLMMSource(base_url="https://dlmm.test", timeout=0.0)
    assert source.timeout == 0.0
    assert source.base_url == "https://dlmm.test"
