"""Convergence runner.

Drives a StepRegistry: probe each step, apply only what is missing,
classify the outcome and keep going no matter what a single step does.
Re-running the whole engine is the retry mechanism.
"""

import logging
from collections.abc import Callable, Collection

from shellstrap.core.environment import Environment
from shellstrap.core.registry import Step, StepRegistry
from shellstrap.models.outcome import ApplyResult, Outcome, OutcomeKind, ProbeResult
from shellstrap.models.report import Report

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[Step, Outcome], None]
StepCallback = Callable[[Step], None]

EXCLUDED = "excluded"


class ConvergenceRunner:
    """Runs every registered step once, in order.

    Attributes:
        env: Environment passed to each prober and applier.

    Example:
        >>> runner = ConvergenceRunner(Environment.from_os())
        >>> report = runner.run(registry)
        >>> report.has_failures
        False
    """

    def __init__(
        self,
        env: Environment,
        *,
        on_start: StepCallback | None = None,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            env: Environment passed to each prober and applier.
            on_start: Called before a step is probed.
            on_outcome: Called as soon as a step's outcome is known.
        """
        self.env = env
        self._on_start = on_start
        self._on_outcome = on_outcome

    def run(
        self,
        registry: StepRegistry,
        *,
        only: Collection[str] | None = None,
        skip: Collection[str] | None = None,
    ) -> Report:
        """Converge every step in the registry.

        Args:
            registry: Steps to run, in registration order.
            only: If given, every other step is recorded as skipped.
            skip: Steps recorded as skipped without probing.

        Returns:
            Report with exactly one entry per registered step.
        """
        report = Report()
        only_set = set(only) if only else None
        skip_set = set(skip or ())

        for step in registry.steps():
            if (only_set is not None and step.name not in only_set) or step.name in skip_set:
                outcome = Outcome(OutcomeKind.SKIPPED, reason=EXCLUDED)
            else:
                outcome = self._blocked_by(step, registry, report) or self._converge(step)

            report.record(step.name, outcome, step.description)
            if self._on_outcome is not None:
                self._on_outcome(step, outcome)

        return report

    def probe_all(self, registry: StepRegistry) -> list[tuple[Step, ProbeResult]]:
        """Probe every step without applying anything.

        Probe errors are reported as not satisfied.
        """
        return [(step, self._probe(step)) for step in registry.steps()]

    def _blocked_by(self, step: Step, registry: StepRegistry, report: Report) -> Outcome | None:
        """Skip a step whose dependency failed or was skipped in this run.

        A dependency excluded by the operator is probed instead; it only
        blocks the step when it is not already satisfied.
        """
        for dependency in step.requires:
            previous = report.get(dependency)
            if previous is None:
                continue
            if previous.is_skipped and previous.reason == EXCLUDED:
                blocked = not self._probe(registry.get(dependency)).satisfied
            else:
                blocked = previous.is_failed or previous.is_skipped
            if blocked:
                return Outcome(OutcomeKind.SKIPPED, reason=f"requires {dependency}")
        return None

    def _converge(self, step: Step) -> Outcome:
        """Probe a step and apply it if needed."""
        if self._on_start is not None:
            self._on_start(step)

        probe = self._probe(step)
        if probe.satisfied:
            logger.debug("Step %s already satisfied: %s", step.name, probe.detail)
            return Outcome(OutcomeKind.ALREADY_SATISFIED, detail=probe.detail)

        logger.info("Applying step %s", step.name)
        try:
            result = step.applier(self.env)
        except Exception as e:  # noqa: BLE001 - one step must never abort the run
            logger.debug("Step %s raised during apply", step.name, exc_info=True)
            return Outcome(OutcomeKind.FAILED, reason=str(e) or type(e).__name__)

        return self._classify(step, result)

    def _probe(self, step: Step) -> ProbeResult:
        """Run a prober, treating any error as 'not satisfied'."""
        try:
            return step.prober(self.env)
        except Exception as e:  # noqa: BLE001 - undeterminable state means apply
            logger.info("Probe for %s failed, assuming unsatisfied: %s", step.name, e)
            return ProbeResult(satisfied=False, detail=f"probe failed: {e}")

    @staticmethod
    def _classify(step: Step, result: ApplyResult) -> Outcome:
        """Turn an ApplyResult into an Outcome using the step's policy."""
        if result.success:
            return Outcome(OutcomeKind.INSTALLED, detail=result.detail, counts=result.counts)

        if result.skipped:
            return Outcome(OutcomeKind.SKIPPED, reason=result.detail, counts=result.counts)

        reason = result.error or "apply failed"
        if step.policy.is_recoverable(result.error_kind):
            logger.info("Step %s: %s (continuing)", step.name, reason)
            return Outcome(
                OutcomeKind.INSTALLED,
                detail=result.detail,
                warning=reason,
                counts=result.counts,
            )

        logger.info("Step %s failed: %s", step.name, reason)
        return Outcome(OutcomeKind.FAILED, reason=reason, counts=result.counts)
