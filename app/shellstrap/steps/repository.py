"""Auxiliary repository checkout step."""

import logging
from collections.abc import Sequence
from pathlib import Path

from shellstrap.core.environment import Environment
from shellstrap.core.errors import ErrorKind
from shellstrap.models.outcome import ApplyResult, ProbeResult
from shellstrap.steps.base import ConvergenceStep
from shellstrap.utils.formatting import print_info, print_success, print_warning
from shellstrap.utils.git import git_clone

logger = logging.getLogger(__name__)


class RepositoryStep(ConvergenceStep):
    """Ensures a git repository is checked out under one of several parents.

    Attributes:
        repo_name: Checkout directory name.
        url: Clone URL.
        parents: Candidate parent directories in priority order.
    """

    name = "repository"

    def __init__(self, repo_name: str, url: str, parents: Sequence[Path]) -> None:
        if not parents:
            msg = "At least one candidate parent directory is required"
            raise ValueError(msg)
        self.repo_name = repo_name
        self.url = url
        self.parents = list(parents)
        self.description = f"{repo_name} repository is cloned"

    def candidates(self) -> list[Path]:
        """Every location where an existing checkout is accepted."""
        return [parent / self.repo_name for parent in self.parents]

    def destination(self) -> Path:
        """Clone target: under the first existing parent, else the first candidate."""
        for parent in self.parents:
            if parent.is_dir():
                return parent / self.repo_name
        return self.parents[0] / self.repo_name

    def probe(self, env: Environment) -> ProbeResult:
        for candidate in self.candidates():
            if candidate.is_dir():
                return ProbeResult(satisfied=True, detail=str(candidate))
        return ProbeResult(satisfied=False, detail=f"{self.repo_name} not found")

    def apply(self, env: Environment) -> ApplyResult:
        target = self.destination()
        if not target.parent.is_dir():
            print_info(f"Creating directory at {target.parent}...")
            target.parent.mkdir(parents=True, exist_ok=True)

        print_info(f"Cloning {self.repo_name} into {target}...")
        result = git_clone(self.url, target, env=env.subprocess_env())
        if not result.success:
            print_warning(f"Manual clone command: git clone {self.url} {target}")
            return ApplyResult.fail(
                f"Failed to clone {self.repo_name} ({result.error_message}). "
                "Please ensure SSH keys are configured for GitHub.",
                ErrorKind.NETWORK,
            )
        print_success(f"{self.repo_name} cloned successfully to {target}")
        return ApplyResult.ok(str(target))
