"""Rich progress display for a running scout job."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from scout.schemas.job import JobEvent, JobStatus

console = Console()

_PHASES = (
    (JobStatus.CRAWLING, "Crawl"),
    (JobStatus.ANALYZING, "Analyze"),
    (JobStatus.GENERATING, "Brief"),
)


class PipelineProgress:
    """One progress row per pipeline phase, driven by ``JobEvent`` updates.

    Usage::

        with PipelineProgress() as display:
            async for event in service.stream(job_id):
                display.update(event)
    """

    def __init__(self) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_ids: dict[JobStatus, TaskID] = {}
        self._last_step = ""

    def __enter__(self) -> "PipelineProgress":
        self._progress.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self._progress.__exit__(*args)

    def _task(self, status: JobStatus, label: str, total: int) -> TaskID:
        if status not in self._task_ids:
            self._task_ids[status] = self._progress.add_task(f"[cyan]{label}[/]", total=total)
        return self._task_ids[status]

    def update(self, event: JobEvent) -> None:
        p = event.progress
        if p.current_step and p.current_step != self._last_step:
            self._last_step = p.current_step
            self._progress.console.print(f"  [dim]{p.current_step}[/]")

        counts = {
            JobStatus.CRAWLING: (p.sites_crawled, p.sites_total),
            JobStatus.ANALYZING: (p.sites_analyzed, max(p.sites_crawled, 1)),
            JobStatus.GENERATING: (int(p.brief_generated), 1),
        }
        order = [s for s, _ in _PHASES]
        reached = order.index(event.status) if event.status in order else None
        if event.status == JobStatus.COMPLETE:
            reached = len(order) - 1

        for i, (status, label) in enumerate(_PHASES):
            if reached is None or i > reached:
                break
            done, total = counts[status]
            tid = self._task(status, label, total)
            finished = i < reached or event.status == JobStatus.COMPLETE
            self._progress.update(
                tid,
                total=total,
                completed=total if finished and status != JobStatus.CRAWLING else done,
                description=f"[green]✓ {label}[/]" if finished else f"[cyan]{label}[/]",
            )

        if event.status == JobStatus.ERROR:
            self._progress.console.print(Panel(f"[red]✗ {event.error}[/]", style="red"))

    def print_phase(self, label: str) -> None:
        """Print a phase header outside the progress display."""
        self._progress.console.print(Panel(f"[bold]{label}[/bold]", style="blue"))
