"""Abstract base class for convergence steps.

A step declares one fact about the machine: ``probe`` checks whether it
already holds without side effects, ``apply`` performs the minimal action
that makes it hold.
"""

from abc import ABC, abstractmethod

from shellstrap.core.environment import Environment
from shellstrap.core.errors import STRICT, RecoveryPolicy
from shellstrap.models.outcome import ApplyResult, ProbeResult


class ConvergenceStep(ABC):
    """Abstract base class for all convergence steps.

    Subclasses set ``name`` and ``description`` and may override ``policy``
    and ``requires``.

    Example:
        >>> step = ZshStep()
        >>> if not step.probe(env).satisfied:
        ...     result = step.apply(env)
    """

    name: str
    description: str = ""
    policy: RecoveryPolicy = STRICT
    requires: tuple[str, ...] = ()

    @abstractmethod
    def probe(self, env: Environment) -> ProbeResult:
        """Check whether the desired state already holds.

        Must not change system state.
        """

    @abstractmethod
    def apply(self, env: Environment) -> ApplyResult:
        """Perform the minimal action that converges the state.

        Failures are returned as an ApplyResult, not raised.
        """

    def converge(self, env: Environment) -> ApplyResult:
        """Probe and apply if needed; used for nested dependencies.

        Returns:
            A successful ApplyResult if the state already held.
        """
        probe = self.probe(env)
        if probe.satisfied:
            return ApplyResult.ok(probe.detail)
        return self.apply(env)
