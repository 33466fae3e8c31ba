"""Base interface for iterative root solvers in PatternForge.

Projection code needs to solve scalar transcendental equations elementwise
over whole pixel arrays. Solvers in this package take the equation and its
derivative as callables and return a :class:`SolverResult` instead of raising
or looping forever when the iteration does not settle.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict

import torch


@dataclass(frozen=True)
class SolverResult:
    """Outcome of an iterative solve.

    Attributes:
        value: Best estimate of the root, same shape as the initial guess.
        converged: True if every element met the tolerance before the
            iteration cap.
        iterations: Number of iterations performed.
        residual: Largest absolute step size of the final iteration.
    """

    value: torch.Tensor
    converged: bool
    iterations: int
    residual: float


class BaseRootSolver(ABC):
    """Abstract base class for elementwise root solvers.

    Attributes:
        tol: Convergence tolerance on the update step.
        max_iter: Hard cap on the number of iterations.
    """

    def __init__(self, tol: float = 1e-10, max_iter: int = 50):
        if tol <= 0:
            raise ValueError(f"tol must be positive, got {tol}")
        if max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {max_iter}")
        self.tol = tol
        self.max_iter = max_iter

    @abstractmethod
    def solve(
        self,
        func: Callable[[torch.Tensor], torch.Tensor],
        derivative: Callable[[torch.Tensor], torch.Tensor],
        x0: torch.Tensor,
    ) -> SolverResult:
        """Find ``x`` with ``func(x) == 0`` elementwise, starting from ``x0``.

        Args:
            func: Residual function, elementwise over tensors.
            derivative: Derivative of ``func`` with respect to ``x``.
            x0: Initial guess.

        Returns:
            A :class:`SolverResult`; non-convergence is reported through
            ``converged=False`` rather than an exception.
        """
        pass

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "BaseRootSolver":
        """Create a solver from a dictionary with ``tol``/``max_iter`` keys."""
        return cls(
            tol=config.get("tol", 1e-10),
            max_iter=config.get("max_iter", 50),
        )
