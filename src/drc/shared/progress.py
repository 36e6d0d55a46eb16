"""Rich spinner used as the run's status reporter."""

from __future__ import annotations

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

console = Console()


class StatusReporter:
    """Single-line spinner with persistent info/success/failure lines.

    Usage::

        with StatusReporter() as reporter:
            reporter.start("Connecting to url ...")
            reporter.succeed("The report is downloaded")

    One instance is created per run and passed to every component that
    reports progress.
    """

    def __init__(self, console: Console = console) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )
        self._task_id: int | None = None

    def __enter__(self) -> "StatusReporter":
        self._progress.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self._progress.__exit__(*args)

    def start(self, text: str) -> None:
        """Start (or restart) the spinner with a new message."""
        if self._task_id is None:
            self._task_id = self._progress.add_task(f"[cyan]{text}[/]", total=None)
        else:
            self.update(text)

    def update(self, text: str) -> None:
        """Change the spinner text without printing a line."""
        if self._task_id is None:
            self.start(text)
            return
        self._progress.update(self._task_id, description=f"[cyan]{text}[/]")

    def info(self, text: str) -> None:
        self._progress.console.print(f"[blue]ℹ[/] {text}")

    def succeed(self, text: str) -> None:
        self._stop()
        self._progress.console.print(f"[green]✓[/] {text}")

    def fail(self, text: str) -> None:
        self._stop()
        self._progress.console.print(f"[red]✗ {text}[/]")

    def _stop(self) -> None:
        if self._task_id is not None:
            self._progress.remove_task(self._task_id)
            self._task_id = None
