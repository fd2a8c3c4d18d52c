"""Terminal progress helpers with Rich-based rendering."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.status import Status
from rich.text import Text


@dataclass
class ProgressState:
    total: int
    success: int = 0
    failed: int = 0
    skipped: int = 0
    current_url: str | None = None


class RateColumn(ProgressColumn):
    """Render completed requests per second."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        if speed is None:
            return Text("", style="progress.percentage")
        return Text(f"{speed:.1f} req/s", style="progress.percentage")


class ProgressReporter:
    """Render progress for one pooled stage and keep its counters.

    ``advance`` may be called from worker threads.
    """

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self._lock = Lock()
        self.state: ProgressState | None = None
        self._label = "harvest"

    def set_label(self, label: str) -> None:
        self._label = label

    def start(self, total: int) -> None:
        self.state = ProgressState(total=total)
        if not self.enabled:
            return
        if self._console is None:
            self._console = Console()
        if not self._console.is_terminal:
            self.enabled = False
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]{task.fields[stage]:<10}", justify="left"),
            BarColumn(bar_width=None, complete_style="green", finished_style="green"),
            TaskProgressColumn(show_speed=False),
            TimeElapsedColumn(),
            RateColumn(),
            TextColumn("[green]✓{task.fields[success]:>4}", justify="right"),
            TextColumn("[red]✗{task.fields[failed]:>4}", justify="right"),
            TextColumn("[yellow]↺{task.fields[skipped]:>4}", justify="right"),
            TextColumn("[dim]{task.fields[current_url]}", justify="left"),
            console=self._console,
            transient=True,
            expand=True,
        )
        try:
            self._progress.start()
        except LiveError:
            # Another live display owns the console.
            self.enabled = False
            self._progress = None
            return
        self._task_id = self._progress.add_task(
            self._label,
            total=total,
            stage=self._label,
            success=0,
            failed=0,
            skipped=0,
            current_url="waiting...",
        )

    def advance(
        self,
        success: bool = False,
        failed: bool = False,
        skipped: bool = False,
        current_url: str | None = None,
    ) -> None:
        if not self.state:
            raise RuntimeError("ProgressReporter.start must be called before advance")
        with self._lock:
            if current_url:
                self.state.current_url = current_url
            if success:
                self.state.success += 1
            if failed:
                self.state.failed += 1
            if skipped:
                self.state.skipped += 1
            if self._progress is None or self._task_id is None:
                return
            display_url = self.state.current_url or ""
            if len(display_url) > 60:
                display_url = display_url[:57] + "..."
            self._progress.update(
                self._task_id,
                advance=1,
                success=self.state.success,
                failed=self.state.failed,
                skipped=self.state.skipped,
                current_url=display_url,
            )

    def close(self) -> None:
        with self._lock:
            if self._progress is not None:
                self._progress.stop()
                self._progress = None
            self._task_id = None

    def summary(self) -> dict[str, int]:
        if not self.state:
            return {"success": 0, "failed": 0, "skipped": 0}
        return {
            "success": self.state.success,
            "failed": self.state.failed,
            "skipped": self.state.skipped,
        }


class ProgressActivity:
    """Indeterminate activity indicator using a Rich status spinner."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self.console = console or Console()
        self._status: Status | None = None

    def start(self, message: str) -> None:
        if not self.enabled or self._status is not None or not self.console.is_terminal:
            return
        self._status = self.console.status(message)
        self._status.start()

    def close(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


__all__ = ["ProgressActivity", "ProgressReporter", "ProgressState", "RateColumn"]
