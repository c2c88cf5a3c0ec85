"""Result records exchanged between steps and the runner.

Probers return a ProbeResult, appliers an ApplyResult; the runner turns
them into one immutable Outcome per step per run.
"""

from dataclasses import dataclass
from enum import Enum

from shellstrap.core.errors import ErrorKind


class OutcomeKind(str, Enum):
    """Final classification of a step within a run.

    Attributes:
        INSTALLED: The applier ran and converged the step (possibly with a warning).
        ALREADY_SATISFIED: The prober found the desired state; nothing was applied.
        FAILED: The applier failed with a non-recoverable error.
        SKIPPED: The step was excluded, blocked by a dependency, or declined to act.
    """

    INSTALLED = "installed"
    ALREADY_SATISFIED = "already_satisfied"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ItemCounts:
    """Tally for steps that converge several sub-items.

    Attributes:
        installed: Items newly installed in this run.
        present: Items that were already present.
        failed: Items whose installation was attempted and failed.
    """

    installed: int = 0
    present: int = 0
    failed: int = 0

    @property
    def attempted(self) -> int:
        """Number of items the applier tried to install."""
        return self.installed + self.failed

    @property
    def total(self) -> int:
        """Number of items covered by the step."""
        return self.installed + self.present + self.failed

    def describe(self) -> str:
        """Short human-readable summary, e.g. ``3 new, 2 existing``."""
        parts: list[str] = []
        if self.installed:
            parts.append(f"{self.installed} new")
        if self.present:
            parts.append(f"{self.present} existing")
        if self.failed:
            parts.append(f"{self.failed} failed")
        return ", ".join(parts) or "nothing to do"


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Answer of a side-effect-free state check.

    Attributes:
        satisfied: True if the desired state already holds.
        detail: Optional context (found path, version, missing items).
    """

    satisfied: bool
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class ApplyResult:
    """Result of an applier run.

    Attributes:
        success: Whether the step converged.
        detail: Optional success message or context.
        error: Error message when the applier failed.
        error_kind: Classification of the failure, used by RecoveryPolicy.
        skipped: The applier declined to act (e.g. nothing to act on).
        counts: Per-item tally for multi-item steps.
    """

    success: bool
    detail: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    skipped: bool = False
    counts: ItemCounts | None = None

    @property
    def failed(self) -> bool:
        """Check if the applier failed."""
        return not self.success and not self.skipped

    @classmethod
    def ok(cls, detail: str | None = None, counts: ItemCounts | None = None) -> "ApplyResult":
        """Build a successful result."""
        return cls(success=True, detail=detail, counts=counts)

    @classmethod
    def fail(
        cls,
        error: str,
        kind: ErrorKind = ErrorKind.COMMAND_FAILED,
        counts: ItemCounts | None = None,
    ) -> "ApplyResult":
        """Build a failed result."""
        return cls(success=False, error=error, error_kind=kind, counts=counts)

    @classmethod
    def skip(cls, reason: str) -> "ApplyResult":
        """Build a result for an applier that chose not to act."""
        return cls(success=False, detail=reason, skipped=True)


@dataclass(frozen=True, slots=True)
class Outcome:
    """Immutable record of what happened to one step in a run.

    Attributes:
        kind: Final classification.
        reason: Why the step failed or was skipped.
        detail: Extra context from the prober or applier.
        warning: Soft failure that was downgraded by the step's policy.
        counts: Per-item tally for multi-item steps.
    """

    kind: OutcomeKind
    reason: str | None = None
    detail: str | None = None
    warning: str | None = None
    counts: ItemCounts | None = None

    @property
    def is_installed(self) -> bool:
        """Check if the step was converged by this run."""
        return self.kind == OutcomeKind.INSTALLED

    @property
    def is_satisfied(self) -> bool:
        """Check if the step already held before this run."""
        return self.kind == OutcomeKind.ALREADY_SATISFIED

    @property
    def is_failed(self) -> bool:
        """Check if the step failed."""
        return self.kind == OutcomeKind.FAILED

    @property
    def is_skipped(self) -> bool:
        """Check if the step was skipped."""
        return self.kind == OutcomeKind.SKIPPED

    @property
    def message(self) -> str:
        """Best single-line description for display."""
        if self.counts is not None:
            text = self.counts.describe()
            if self.reason:
                return f"{text}: {self.reason}"
            return text
        return self.reason or self.warning or self.detail or ""
