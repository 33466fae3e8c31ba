"""Newton-Raphson root solver.

The update is ``x <- x - f(x) / f'(x)`` applied to every element at once.
Elements whose derivative vanishes keep their current value for that step so
a flat spot cannot produce NaNs; if such an element is not already a root
the solve stops and reports that it did not converge.
"""

from typing import Callable

import torch

from .base import BaseRootSolver, SolverResult


class NewtonRaphsonSolver(BaseRootSolver):
    """Vectorized Newton-Raphson iteration with a tolerance and iteration cap.

    Example:
        >>> solver = NewtonRaphsonSolver(tol=1e-12, max_iter=20)
        >>> result = solver.solve(lambda x: x**2 - 2, lambda x: 2 * x,
        ...                       torch.tensor([1.0], dtype=torch.float64))
        >>> result.converged
        True
    """

    def solve(
        self,
        func: Callable[[torch.Tensor], torch.Tensor],
        derivative: Callable[[torch.Tensor], torch.Tensor],
        x0: torch.Tensor,
    ) -> SolverResult:
        x = x0.clone()
        residual = float("inf")
        for iteration in range(1, self.max_iter + 1):
            value = func(x)
            slope = derivative(x)
            flat = slope.abs() < torch.finfo(x.dtype).tiny
            safe_slope = torch.where(flat, torch.ones_like(slope), slope)
            step = torch.where(flat, torch.zeros_like(x), value / safe_slope)
            x = x - step
            residual = float(step.abs().max()) if step.numel() else 0.0
            if residual < self.tol:
                # A flat spot that is not a root stops moving without converging.
                stalled = bool((flat & (value.abs() > self.tol)).any())
                return SolverResult(x, not stalled, iteration, residual)
        return SolverResult(x, False, self.max_iter, residual)
