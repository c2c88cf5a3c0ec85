"""Shared Rich display functions for steps, probes and reports.

Provides the per-step status line printed while a run progresses and the
tables and summaries rendered once it is finished.
"""

from rich.markup import escape
from rich.table import Table

from shellstrap.core.registry import Step, StepRegistry
from shellstrap.models.outcome import Outcome, OutcomeKind, ProbeResult
from shellstrap.models.report import Report
from shellstrap.utils.formatting import console, print_success

# OutcomeKind -> (label, theme style)
_OUTCOME_STYLES: dict[OutcomeKind, tuple[str, str]] = {
    OutcomeKind.INSTALLED: ("installed", "installed"),
    OutcomeKind.ALREADY_SATISFIED: ("present", "satisfied"),
    OutcomeKind.SKIPPED: ("skipped", "skipped"),
    OutcomeKind.FAILED: ("failed", "failed"),
}


def format_outcome(outcome: Outcome) -> str:
    """Rich markup label for an outcome kind."""
    label, style = _OUTCOME_STYLES[outcome.kind]
    return f"[{style}]{label}[/{style}]"


def print_step_line(step: Step, outcome: Outcome) -> None:
    """Print one status line as soon as a step finishes."""
    message = outcome.message
    line = f"{format_outcome(outcome)} [step.name]{escape(step.name)}[/step.name]"
    if message:
        line += f" [step.detail]{escape(message)}[/step.detail]"
    console.print(line)
    if outcome.warning and outcome.warning != message:
        console.print(f"  [warning]{escape(outcome.warning)}[/warning]")


def create_report_table(report: Report) -> Table:
    """Create a Rich table with one row per step of a run.

    Args:
        report: Finished run report.

    Returns:
        Rich Table with Status, Step and Details columns.
    """
    table = Table(
        title="Setup Summary",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=9, justify="center")
    table.add_column("Step", no_wrap=True)
    table.add_column("Details")

    for entry in report:
        details = entry.outcome.message
        if entry.outcome.warning and entry.outcome.warning != details:
            details = f"{details}; {entry.outcome.warning}" if details else entry.outcome.warning
        table.add_row(
            format_outcome(entry.outcome),
            entry.step,
            f"[muted]{escape(details)}[/muted]",
        )

    return table


def print_report_summary(report: Report) -> None:
    """Print the installed / present / skipped / failed tally of a run."""
    counts = report.counts()
    if report.all_satisfied:
        print_success(f"All {len(report)} step(s) already satisfied. Nothing to do.")
        return

    parts = [
        f"[installed]{counts[OutcomeKind.INSTALLED]} installed[/installed]",
        f"[satisfied]{counts[OutcomeKind.ALREADY_SATISFIED]} already present[/satisfied]",
        f"[skipped]{counts[OutcomeKind.SKIPPED]} skipped[/skipped]",
        f"[failed]{counts[OutcomeKind.FAILED]} failed[/failed]",
    ]
    console.print(f"\nSummary: {', '.join(parts)}")

    warnings = report.warnings
    if warnings:
        console.print(f"[warning]{len(warnings)} step(s) completed with warnings[/warning]")


def create_probe_table(results: list[tuple[Step, ProbeResult]]) -> Table:
    """Create a Rich table of probe results without applying anything."""
    table = Table(
        title="Current State",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("State", width=9, justify="center")
    table.add_column("Step", no_wrap=True)
    table.add_column("Details")

    for step, probe in results:
        state = "[satisfied]ok[/satisfied]" if probe.satisfied else "[warning]pending[/warning]"
        table.add_row(state, step.name, f"[muted]{escape(probe.detail or '')}[/muted]")

    return table


def create_steps_table(registry: StepRegistry) -> Table:
    """Create a Rich table listing registered steps in run order."""
    table = Table(
        title="Steps",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", justify="right", style="muted")
    table.add_column("Step", no_wrap=True, style="step.name")
    table.add_column("Description")
    table.add_column("Requires", style="muted")
    table.add_column("Tolerates", style="muted")

    for position, step in enumerate(registry, start=1):
        tolerated = ", ".join(sorted(kind.value for kind in step.policy.recoverable))
        table.add_row(
            str(position),
            step.name,
            step.description,
            ", ".join(step.requires),
            tolerated,
        )

    return table
