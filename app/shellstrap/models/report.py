"""Run report model.

A Report is the ordered record of every step's Outcome for one convergence
run. It is created empty, appended to by the runner and then only read.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from shellstrap.models.outcome import Outcome, OutcomeKind


@dataclass(frozen=True, slots=True)
class ReportEntry:
    """Outcome of a single named step.

    Attributes:
        step: Step name.
        outcome: What happened to the step.
        description: Human-readable step description, for display.
    """

    step: str
    outcome: Outcome
    description: str = ""


@dataclass
class Report:
    """Ordered (step, outcome) pairs covering one run.

    Example:
        >>> report = Report()
        >>> report.record("zsh", Outcome(OutcomeKind.ALREADY_SATISFIED))
        >>> report.all_satisfied
        True
    """

    _entries: list[ReportEntry] = field(default_factory=list)

    def record(self, step: str, outcome: Outcome, description: str = "") -> None:
        """Append an outcome.

        Raises:
            ValueError: If the step already has an outcome in this report.
        """
        if any(entry.step == step for entry in self._entries):
            msg = f"Step '{step}' already has an outcome in this run"
            raise ValueError(msg)
        self._entries.append(ReportEntry(step=step, outcome=outcome, description=description))

    @property
    def entries(self) -> tuple[ReportEntry, ...]:
        """All entries in run order."""
        return tuple(self._entries)

    def __iter__(self) -> Iterator[ReportEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, step: str) -> Outcome | None:
        """Outcome recorded for a step, or None if it has not run yet."""
        for entry in self._entries:
            if entry.step == step:
                return entry.outcome
        return None

    def steps(self) -> list[str]:
        """Step names in run order."""
        return [entry.step for entry in self._entries]

    def by_kind(self, kind: OutcomeKind) -> list[ReportEntry]:
        """Entries with the given outcome kind, in run order."""
        return [entry for entry in self._entries if entry.outcome.kind == kind]

    @property
    def installed(self) -> list[ReportEntry]:
        return self.by_kind(OutcomeKind.INSTALLED)

    @property
    def satisfied(self) -> list[ReportEntry]:
        return self.by_kind(OutcomeKind.ALREADY_SATISFIED)

    @property
    def skipped(self) -> list[ReportEntry]:
        return self.by_kind(OutcomeKind.SKIPPED)

    @property
    def failed(self) -> list[ReportEntry]:
        return self.by_kind(OutcomeKind.FAILED)

    @property
    def warnings(self) -> list[ReportEntry]:
        """Entries that converged with a downgraded failure."""
        return [entry for entry in self._entries if entry.outcome.warning]

    @property
    def has_failures(self) -> bool:
        """Check if any step failed."""
        return bool(self.failed)

    @property
    def all_satisfied(self) -> bool:
        """Check if every recorded step was already satisfied."""
        return bool(self._entries) and len(self.satisfied) == len(self._entries)

    def counts(self) -> dict[OutcomeKind, int]:
        """Number of entries per outcome kind (all kinds present)."""
        result = dict.fromkeys(OutcomeKind, 0)
        for entry in self._entries:
            result[entry.outcome.kind] += 1
        return result
