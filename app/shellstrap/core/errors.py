"""Error taxonomy for convergence steps.

Steps report failures as an ErrorKind on their ApplyResult rather than by
raising; each step carries a RecoveryPolicy that says which kinds are soft.
Exceptions are reserved for programming and configuration errors.
"""

from dataclasses import dataclass, field
from enum import Enum


class ErrorKind(str, Enum):
    """Classification of an applier failure.

    Attributes:
        MISSING_CAPABILITY: No supported installer mechanism on this platform.
        PRIVILEGE_DENIED: A privileged operation was rejected.
        NETWORK: A clone, download or remote script failed.
        COMMAND_FAILED: Any other non-zero exit from an external command.
    """

    MISSING_CAPABILITY = "missing_capability"
    PRIVILEGE_DENIED = "privilege_denied"
    NETWORK = "network"
    COMMAND_FAILED = "command_failed"


@dataclass(frozen=True, slots=True)
class RecoveryPolicy:
    """Which error kinds a step downgrades to a warning.

    Attributes:
        recoverable: Error kinds recorded as an attempted install with a
            warning instead of a failure.
    """

    recoverable: frozenset[ErrorKind] = field(default_factory=frozenset)

    def is_recoverable(self, kind: ErrorKind | None) -> bool:
        """Check whether a failure of the given kind is soft."""
        return kind is not None and kind in self.recoverable


STRICT = RecoveryPolicy()


class ShellstrapError(Exception):
    """Base exception for shellstrap errors."""


class DuplicateStepError(ShellstrapError):
    """Raised when a step name is registered twice."""


class UnknownStepError(ShellstrapError):
    """Raised when a step name is not registered."""


class NoPackageManagerError(ShellstrapError):
    """Raised when no supported system package manager is available."""
