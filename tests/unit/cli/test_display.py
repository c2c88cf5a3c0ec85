"""Unit tests for cli/display.py."""

import io

import pytest
from rich.console import Console

from shellstrap.cli.display import (
    create_probe_table,
    create_report_table,
    create_steps_table,
    format_outcome,
    print_report_summary,
    print_step_line,
)
from shellstrap.core.errors import ErrorKind, RecoveryPolicy
from shellstrap.core.registry import StepRegistry
from shellstrap.core.theme import get_theme
from shellstrap.models.outcome import ApplyResult, ItemCounts, Outcome, OutcomeKind, ProbeResult
from shellstrap.models.report import Report


def _render(renderable: object) -> str:
    buf = io.StringIO()
    Console(theme=get_theme(), file=buf, color_system=None, width=160).print(renderable)
    return buf.getvalue()


def _capture(func: object, *args: object) -> str:
    """Run a display function with the shared console writing to a buffer."""
    import shellstrap.cli.display as display_mod
    import shellstrap.utils.formatting as fmt_mod

    buf = io.StringIO()
    test_console = Console(theme=get_theme(), file=buf, color_system=None, width=160)
    original_display, original_fmt = display_mod.console, fmt_mod.console
    display_mod.console = fmt_mod.console = test_console
    try:
        func(*args)  # type: ignore[operator]
    finally:
        display_mod.console, fmt_mod.console = original_display, original_fmt
    return buf.getvalue()


@pytest.fixture
def registry() -> StepRegistry:
    registry = StepRegistry()
    registry.register(
        "zsh", lambda env: ProbeResult(True), lambda env: ApplyResult.ok(), "Zsh is installed"
    )
    registry.register(
        "default-shell",
        lambda env: ProbeResult(False),
        lambda env: ApplyResult.ok(),
        "Zsh is the default login shell",
        policy=RecoveryPolicy(recoverable=frozenset({ErrorKind.PRIVILEGE_DENIED})),
        requires=("zsh",),
    )
    return registry


@pytest.fixture
def report() -> Report:
    report = Report()
    report.record("zsh", Outcome(OutcomeKind.ALREADY_SATISFIED, detail="/usr/bin/zsh"))
    report.record("default-shell", Outcome(OutcomeKind.INSTALLED, warning="chsh rejected"))
    report.record(
        "packages",
        Outcome(OutcomeKind.INSTALLED, counts=ItemCounts(installed=3, present=2)),
    )
    report.record("lazygit", Outcome(OutcomeKind.FAILED, reason="download failed"))
    report.record("nvm", Outcome(OutcomeKind.SKIPPED, reason="excluded"))
    return report


class TestFormatOutcome:
    """Tests for format_outcome."""

    def test_failed_and_skipped_differ(self) -> None:
        failed = format_outcome(Outcome(OutcomeKind.FAILED))
        skipped = format_outcome(Outcome(OutcomeKind.SKIPPED))

        assert failed == "[failed]failed[/failed]"
        assert skipped == "[skipped]skipped[/skipped]"


class TestReportTable:
    """Tests for create_report_table."""

    def test_rows(self, report: Report) -> None:
        table = create_report_table(report)

        assert table.row_count == 5
        output = _render(table)
        assert "3 new, 2 existing" in output
        assert "download failed" in output
        assert "chsh rejected" in output


class TestPrintReportSummary:
    """Tests for print_report_summary."""

    def test_tally(self, report: Report) -> None:
        output = _capture(print_report_summary, report)

        assert "2 installed, 1 already present, 1 skipped, 1 failed" in output
        assert "1 step(s) completed with warnings" in output

    def test_all_satisfied(self) -> None:
        report = Report()
        report.record("zsh", Outcome(OutcomeKind.ALREADY_SATISFIED))

        output = _capture(print_report_summary, report)

        assert "All 1 step(s) already satisfied" in output


class TestPrintStepLine:
    """Tests for print_step_line."""

    def test_warning_shown_once(self, registry: StepRegistry) -> None:
        step = registry.get("default-shell")
        output = _capture(print_step_line, step, Outcome(OutcomeKind.INSTALLED, warning="denied"))

        assert output.count("denied") == 1

    def test_warning_below_counts(self, registry: StepRegistry) -> None:
        step = registry.get("default-shell")
        outcome = Outcome(OutcomeKind.INSTALLED, warning="denied", counts=ItemCounts(installed=1))

        output = _capture(print_step_line, step, outcome)

        assert "default-shell 1 new" in output
        assert "\n  denied" in output


class TestOtherTables:
    """Tests for the probe and steps tables."""

    def test_probe_table(self, registry: StepRegistry) -> None:
        results = [(step, step.prober(None)) for step in registry]  # type: ignore[arg-type]

        output = _render(create_probe_table(results))

        assert "ok" in output
        assert "pending" in output

    def test_steps_table(self, registry: StepRegistry) -> None:
        output = _render(create_steps_table(registry))

        assert "Zsh is the default login shell" in output
        assert "privilege_denied" in output
