"""Typer CLI entrypoint for the data.json harvester."""

from __future__ import annotations

from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table
from typer import BadParameter

from .config import ConfigRepository
from .engine import ThreadPoolManager
from .orchestrator import HarvestSummary, Orchestrator
from .stages import SourceListError

REFRESH = "refresh"

app = typer.Typer(
    help="Discover, download and merge federal data.json inventories.",
    add_completion=False,
    rich_markup_mode=None,
)

console = Console()
err_console = Console(stderr=True)


def build_orchestrator() -> Orchestrator:
    repository = ConfigRepository()
    config = repository.load_config()
    thread_pool = ThreadPoolManager(max(config.probe_workers, config.download_workers))
    return Orchestrator(config_repository=repository, thread_pool=thread_pool)


def _render_summary(summary: HarvestSummary, orchestrator: Orchestrator) -> Table:
    table = Table(
        title="Harvest summary" + (" (refresh)" if summary.refresh else ""),
        box=box.SIMPLE_HEAVY,
        show_lines=False,
    )
    table.add_column("Stage", style="bold cyan")
    table.add_column("Result")
    for stage, result in summary.as_rows():
        table.add_row(stage, result)
    table.add_row("outputs", str(orchestrator.locator.combined_json.parent))
    return table


@app.command()
def run(
    mode: Optional[str] = typer.Argument(
        None,
        metavar="[refresh]",
        help="Pass `refresh` to re-fetch, re-probe, re-download and re-merge everything.",
    ),
) -> None:
    if mode is not None and mode != REFRESH:
        raise BadParameter(f"expected `{REFRESH}` or nothing, got {mode!r}", param_hint="MODE")
    orchestrator = build_orchestrator()
    try:
        summary = orchestrator.run(refresh=mode == REFRESH)
    except SourceListError as exc:
        err_console.print(f"Error: {exc}", style="bold red", markup=False)
        raise typer.Exit(code=1) from exc
    console.print(_render_summary(summary, orchestrator))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
