"""CLI command for timing both work_mem regimes without HTTP.

Usage:
    workmem compare
    workmem compare --iterations 50 --work-mem 256kB
"""

from __future__ import annotations

import asyncio
import statistics
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import typer

from workmem.cli.settings import settings_or_exit
from workmem.config import Settings

if TYPE_CHECKING:
    from workmem.persistence.executor import QueryExecutor

app = typer.Typer(help="Time the benchmark query under both work_mem regimes")


@dataclass
class RegimeTimings:
    """Latencies of one regime across a comparison run."""

    mode: str
    work_mem: str
    latencies_ms: list[float] = field(default_factory=list)
    row_counts: set[int] = field(default_factory=set)

    @property
    def mean_ms(self) -> float:
        return statistics.fmean(self.latencies_ms) if self.latencies_ms else 0.0

    @property
    def p50_ms(self) -> float:
        return statistics.median(self.latencies_ms) if self.latencies_ms else 0.0

    @property
    def p95_ms(self) -> float:
        if len(self.latencies_ms) < 2:
            return self.latencies_ms[0] if self.latencies_ms else 0.0
        return statistics.quantiles(self.latencies_ms, n=20, method="inclusive")[18]


async def run_comparison(
    executor: QueryExecutor,
    work_mem: str,
    iterations: int,
    warmup: int = 1,
) -> tuple[RegimeTimings, RegimeTimings]:
    """Alternate baseline and degraded runs so cache effects hit both equally."""
    for _ in range(warmup):
        await executor.run_baseline()
        await executor.run_degraded(work_mem)

    baseline = RegimeTimings(mode="baseline", work_mem=await executor.current_work_mem())
    degraded = RegimeTimings(mode="degraded", work_mem=work_mem)
    for _ in range(iterations):
        result = await executor.run_baseline()
        baseline.latencies_ms.append(result.elapsed_ms)
        baseline.row_counts.add(result.row_count)

        result = await executor.run_degraded(work_mem)
        degraded.latencies_ms.append(result.elapsed_ms)
        degraded.row_counts.add(result.row_count)
    return baseline, degraded


@app.callback(invoke_without_command=True)
def compare(
    iterations: int = typer.Option(
        20,
        "--iterations",
        "-n",
        min=1,
        help="Runs per regime",
    ),
    work_mem: str | None = typer.Option(
        None,
        "--work-mem",
        "-w",
        help="Lowered work_mem (default: DEGRADED_WORK_MEM)",
    ),
    warmup: int = typer.Option(
        1,
        "--warmup",
        min=0,
        help="Untimed runs per regime before measuring",
    ),
) -> None:
    """Run the benchmark query under both regimes and print latencies."""
    overrides = {"DEGRADED_WORK_MEM": work_mem} if work_mem else {}
    settings = settings_or_exit(**overrides)
    asyncio.run(_compare(settings, iterations, warmup))


async def _compare(settings: Settings, iterations: int, warmup: int) -> None:
    from rich.console import Console
    from rich.table import Table

    from workmem.errors import QueryError, StoreConnectionError
    from workmem.persistence.db import Database
    from workmem.persistence.executor import QueryExecutor
    from workmem.persistence.queries import top_players

    console = Console()
    database = Database.from_settings(settings)
    executor = QueryExecutor(database, template=top_players(settings.query_limit))
    try:
        baseline, degraded = await run_comparison(
            executor, settings.degraded_work_mem, iterations, warmup
        )
    except (StoreConnectionError, QueryError) as e:
        console.print(f"[red]Comparison failed:[/red] {e}")
        raise typer.Exit(code=1) from e
    finally:
        await database.close()

    table = Table(title=f"{executor.template.key}, {iterations} runs per regime")
    table.add_column("Regime", style="cyan")
    table.add_column("work_mem", style="green")
    table.add_column("Rows", justify="right")
    table.add_column("Mean ms", justify="right")
    table.add_column("p50 ms", justify="right")
    table.add_column("p95 ms", justify="right")
    for timings in (baseline, degraded):
        table.add_row(
            timings.mode,
            timings.work_mem,
            ",".join(str(n) for n in sorted(timings.row_counts)),
            f"{timings.mean_ms:.1f}",
            f"{timings.p50_ms:.1f}",
            f"{timings.p95_ms:.1f}",
        )
    console.print(table)

    if baseline.p50_ms > 0:
        console.print(f"[bold]Slowdown:[/bold] {degraded.p50_ms / baseline.p50_ms:.2f}x at p50")
