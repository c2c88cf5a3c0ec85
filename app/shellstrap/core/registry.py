"""Ordered registry of convergence steps.

The registry only holds declarations; all behaviour lives in the probers
and appliers it stores and in the runner that drives them.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shellstrap.core.environment import Environment
from shellstrap.core.errors import STRICT, DuplicateStepError, RecoveryPolicy, UnknownStepError
from shellstrap.models.outcome import ApplyResult, ProbeResult

if TYPE_CHECKING:
    from shellstrap.steps.base import ConvergenceStep

Prober = Callable[[Environment], ProbeResult]
Applier = Callable[[Environment], ApplyResult]


@dataclass(frozen=True, slots=True)
class Step:
    """A registered unit of desired state.

    Attributes:
        name: Unique step name.
        prober: Side-effect-free check returning whether the state holds.
        applier: Minimal action that converges the state.
        description: Human-readable description.
        policy: Which applier error kinds are downgraded to warnings.
        requires: Names of earlier steps that must not fail or be skipped.
    """

    name: str
    prober: Prober
    applier: Applier
    description: str = ""
    policy: RecoveryPolicy = STRICT
    requires: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate step data after initialization."""
        if not self.name:
            msg = "Step name cannot be empty"
            raise ValueError(msg)


class StepRegistry:
    """Ordered, append-only collection of steps.

    Example:
        >>> registry = StepRegistry()
        >>> registry.register("zsh", probe_zsh, install_zsh, "Zsh is installed")
        >>> [s.name for s in registry.steps()]
        ['zsh']
    """

    def __init__(self) -> None:
        self._steps: list[Step] = []

    def register(
        self,
        name: str,
        prober: Prober,
        applier: Applier,
        description: str = "",
        *,
        policy: RecoveryPolicy | None = None,
        requires: tuple[str, ...] = (),
    ) -> Step:
        """Add a step at the end of the registry.

        Args:
            name: Unique step name.
            prober: State check.
            applier: State fix.
            description: Human-readable description.
            policy: Recovery policy, strict by default.
            requires: Names of steps that must be registered earlier.

        Returns:
            The registered Step.

        Raises:
            DuplicateStepError: If the name is already registered.
            UnknownStepError: If a required step is not registered yet.
        """
        if name in self:
            msg = f"Step '{name}' is already registered"
            raise DuplicateStepError(msg)
        for dependency in requires:
            if dependency not in self:
                msg = f"Step '{name}' requires '{dependency}', which is not registered before it"
                raise UnknownStepError(msg)

        step = Step(
            name=name,
            prober=prober,
            applier=applier,
            description=description,
            policy=policy or STRICT,
            requires=tuple(requires),
        )
        self._steps.append(step)
        return step

    def add(self, step: "ConvergenceStep", *, requires: tuple[str, ...] | None = None) -> Step:
        """Register a ConvergenceStep object.

        Args:
            step: Step object providing name, probe and apply.
            requires: Replaces the step's own dependencies when given.

        Raises:
            DuplicateStepError: If the step's name is already registered.
            UnknownStepError: If a required step is not registered yet.
        """
        return self.register(
            step.name,
            step.probe,
            step.apply,
            step.description,
            policy=step.policy,
            requires=step.requires if requires is None else requires,
        )

    def steps(self) -> tuple[Step, ...]:
        """Registered steps in registration order."""
        return tuple(self._steps)

    def names(self) -> list[str]:
        """Registered step names in registration order."""
        return [step.name for step in self._steps]

    def get(self, name: str) -> Step:
        """Look a step up by name.

        Raises:
            UnknownStepError: If no step has that name.
        """
        for step in self._steps:
            if step.name == name:
                return step
        msg = f"Unknown step: {name}"
        raise UnknownStepError(msg)

    def __contains__(self, name: object) -> bool:
        return any(step.name == name for step in self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps())

    def __len__(self) -> int:
        return len(self._steps)
