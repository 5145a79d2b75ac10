"""Rich console output for invariant runs.

ConsoleOutput implements the runner's output hooks and renders them with the
Rich library: a banner per test, periodic progress, expected reverts (when
verbose), and a clearly delimited failure panel carrying everything needed to
re-run with the same seed.

Example:
    >>> from statefuzz.cli.output import ConsoleOutput
    >>> runner = InvariantRunner(config, output=ConsoleOutput(verbose=True))
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from statefuzz.core.models import (
        ExpectedActionFailure,
        InvariantTest,
        RunConfig,
        RunResult,
        SuiteSummary,
        Violation,
    )


class ConsoleOutput:
    """Renders runner events on a Rich console.

    Attributes:
        console: Rich Console instance for output.
        verbose: Also show reverted actions.
    """

    SYMBOLS = {
        "check": "✓",
        "cross": "✗",
        "arrow": "→",
        "revert": "↩",
    }

    ASCII_SYMBOLS = {
        "check": "[OK]",
        "cross": "[FAIL]",
        "arrow": "->",
        "revert": "<-",
    }

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        self.console = console or Console()
        self.verbose = verbose
        self._use_unicode = self._supports_unicode()

    def _supports_unicode(self) -> bool:
        encoding = getattr(sys.stdout, "encoding", None)
        return encoding is not None and "utf" in encoding.lower()

    def _symbol(self, name: str) -> str:
        symbols = self.SYMBOLS if self._use_unicode else self.ASCII_SYMBOLS
        return symbols.get(name, name)

    def _format_duration(self, duration_ms: float) -> str:
        if duration_ms < 1000:
            return f"{duration_ms:.0f}ms"
        elif duration_ms < 60000:
            return f"{duration_ms / 1000:.2f}s"
        else:
            minutes = int(duration_ms / 60000)
            seconds = (duration_ms % 60000) / 1000
            return f"{minutes}m {seconds:.1f}s"

    def suite_started(self, tests: list[InvariantTest], config: RunConfig) -> None:
        self.console.print()
        self.console.rule("[bold]Invariant Test Suite[/bold]", style="blue")
        self.console.print(
            f"[dim]{len(tests)} test(s), {config.iterations} iterations each, seed={config.seed}[/dim]"
        )
        self.console.print()

    def run_started(self, test: InvariantTest, config: RunConfig) -> None:
        self.console.print(
            f"[cyan]{self._symbol('arrow')}[/cyan] [bold]{escape(test.name)}[/bold] "
            f"[dim](iterations={config.iterations}, seed={config.seed})[/dim]"
        )

    def progress(self, test: InvariantTest, iteration: int, total: int) -> None:
        self.console.print(f"  [dim]Progress: {iteration}/{total}[/dim]")

    def action_reverted(self, test: InvariantTest, failure: ExpectedActionFailure) -> None:
        if not self.verbose:
            return
        self.console.print(
            f"  [yellow]{self._symbol('revert')}[/yellow] [dim]iteration {failure.iteration}, "
            f"action {failure.step} ({escape(failure.action_name)}) reverted: "
            f"{escape(failure.message)}[/dim]"
        )

    def run_passed(self, test: InvariantTest, result: RunResult) -> None:
        self.console.print(
            f"[green]{self._symbol('check')}[/green] {escape(test.name)} "
            f"[dim]{result.iterations_completed} iterations, "
            f"{result.actions_executed} actions ({result.actions_reverted} reverted), "
            f"{self._format_duration(result.duration_ms)}[/dim]"
        )

    def run_failed(self, test: InvariantTest, violation: Violation, result: RunResult) -> None:
        body = Table.grid(padding=(0, 2))
        body.add_column(style="bold")
        body.add_column()
        body.add_row("Test", Text(violation.test_name))
        body.add_row("Iteration", str(violation.iteration))
        body.add_row("Invariant", Text(f"{violation.invariant_name} (#{violation.invariant_index})"))
        body.add_row("Seed", str(violation.seed))
        body.add_row("Error", Text(f"{type(violation.error).__name__}: {violation.message}"))
        body.add_row("Reproduce", f"statefuzz run <target> --seed {violation.seed}")
        self.console.print(
            Panel(
                body,
                title=f"[red]{self._symbol('cross')} Invariant violation[/red]",
                border_style="red",
                expand=False,
            )
        )

    def suite_finished(self, summary: SuiteSummary) -> None:
        self.console.print()
        table = Table(title="Summary", show_header=True, header_style="bold")
        table.add_column("Test")
        table.add_column("Status", justify="center")
        table.add_column("Iterations", justify="right")
        table.add_column("Seed", justify="right")
        for result in summary.results:
            status = "[green]PASS[/green]" if result.success else "[red]FAIL[/red]"
            table.add_row(
                Text(result.test_name),
                status,
                f"{result.iterations_completed}/{result.iterations}",
                str(result.seed),
            )
        self.console.print(table)
        if summary.skipped:
            self.console.print(f"[yellow]{summary.skipped} test(s) not run (stopped on first failure)[/yellow]")
        if summary.success:
            self.console.print(f"[green bold]All {len(summary.results)} invariant tests passed[/green bold]")
        else:
            self.console.print(f"[red bold]{len(summary.violations)} test(s) violated invariants[/red bold]")
