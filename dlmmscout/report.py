"""Terminal report of the best pool found by a scan."""
from __future__ import annotations

import logging

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dlmmscout.pools.scanner import ScanResult
from dlmmscout.pools.scorer import pool_yield
from dlmmscout.pools.sources.base import Pool

logger = logging.getLogger(__name__)
_console = Console()

NO_PAIRS_MESSAGE = "No pairs retrieved."
NO_BEST_POOL_MESSAGE = "No best pool identified."


def _fmt(value: object) -> str:
    return "-" if value is None else str(value)


def render_best_pool(pool: Pool) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold dim", no_wrap=True)
    table.add_column()

    table.add_row("Pool", pool.name or "?")
    table.add_row("Bin Step", _fmt(pool.bin_step))
    table.add_row("Base Fee", _fmt(pool.base_fee_percentage))
    table.add_row("24 hr Fee/TVL", _fmt(pool.fees_24h))
    table.add_row("Yield", f"{pool_yield(pool):.6f}")
    if pool.address:
        table.add_row("Address", pool.address)

    return Panel(
        table,
        title="[bold]Best Pool[/bold]",
        title_align="left",
        border_style="green",
        padding=(1, 2),
    )


def report(result: ScanResult, best: Pool | None, console: Console | None = None) -> None:
    """Print the best pool, or why there is none."""
    out = console or _console

    if not result.pools:
        out.print(NO_PAIRS_MESSAGE)
        return

    if best is None:
        out.print(NO_BEST_POOL_MESSAGE)
        return

    logger.info("Best pool: %s (%s)", best.name, best.address or "no address")
    out.print(render_best_pool(best))
