"""Convergence steps.

Each module declares one area of desired state as ConvergenceStep
subclasses; ``build_registry`` assembles the stock plan.
"""

from shellstrap.steps.base import ConvergenceStep
from shellstrap.steps.defaults import build_registry, build_steps

__all__ = [
    "ConvergenceStep",
    "build_registry",
    "build_steps",
]
