"""dlmmscout entrypoint.

Scans every pair of the configured tokens on Meteora DLMM and reports
the pool with the best 24h fee yield. Runs once, or every
SCAN_INTERVAL_MINUTES until interrupted.
"""
from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Sequence

import httpx
from rich.console import Console
from rich.logging import RichHandler

from dlmmscout.config import settings
from dlmmscout.pools.scanner import PairScanner, ScanResult
from dlmmscout.pools.scorer import select_best
from dlmmscout.pools.sources.base import Pool
from dlmmscout.pools.sources.meteora import MeteoraDLMMSource
from dlmmscout.report import report

# ── logging ───────────────────────────────────────────────────────────────────

logger = logging.getLogger("dlmmscout")


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


# ── scanning ──────────────────────────────────────────────────────────────────


async def scan_once(
    scanner: PairScanner,
    tokens: Sequence[str],
    console: Console | None = None,
) -> tuple[ScanResult, Pool | None]:
    """Fetch all pairs, pick the best pool and print the report."""
    result = await scanner.scan(tokens)
    best = select_best(result.pools)
    report(result, best, console=console)
    return result, best


async def run_forever(scanner: PairScanner, tokens: Sequence[str], interval_minutes: int) -> None:
    while True:
        await scan_once(scanner, tokens)
        logger.info("Next scan in %d min", interval_minutes)
        await asyncio.sleep(interval_minutes * 60)


async def main() -> None:
    tokens = list(settings.tokens)
    logger.info("=" * 60)
    logger.info("  dlmmscout")
    logger.info("  API:            %s", settings.dlmm_api_url)
    logger.info("  Tokens:         %d (%d pairs)", len(tokens), settings.pair_count)
    logger.info("  Scan interval:  %s", f"{settings.scan_interval_minutes} min" if settings.scan_interval_minutes else "once")
    logger.info("=" * 60)

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        scanner = PairScanner(MeteoraDLMMSource(client=client))

        if not settings.scan_interval_minutes:
            await scan_once(scanner, tokens)
            return

        task = asyncio.create_task(
            run_forever(scanner, tokens, settings.scan_interval_minutes),
            name="scan-loop",
        )

        # Graceful shutdown on SIGINT/SIGTERM
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, task.cancel)

        try:
            await task
        except asyncio.CancelledError:
            logger.info("Shutting down gracefully...")


def run() -> None:
    setup_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    run()
