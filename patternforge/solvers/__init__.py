"""Iterative numeric solvers for PatternForge.

- BaseRootSolver: Abstract interface returning a :class:`SolverResult`
- NewtonRaphsonSolver: Vectorized Newton-Raphson iteration

Example:
    >>> from patternforge.solvers import get_solver
    >>> solver = get_solver({'type': 'newton', 'tol': 1e-12, 'max_iter': 30})
"""

from typing import Any, Dict

from .base import BaseRootSolver, SolverResult
from .newton import NewtonRaphsonSolver


__all__ = [
    'BaseRootSolver',
    'SolverResult',
    'NewtonRaphsonSolver',
    'get_solver',
]


def get_solver(config: Dict[str, Any]) -> BaseRootSolver:
    """Create a root solver from a configuration dictionary.

    Args:
        config: Dictionary with a ``type`` key (only ``'newton'`` exists) and
            optional ``tol``/``max_iter``.

    Raises:
        ValueError: If the solver type is unknown.
    """
    solver_type = str(config.get('type', 'newton')).lower()
    if solver_type in ('newton', 'newton-raphson'):
        return NewtonRaphsonSolver.from_config(config)
    raise ValueError(
        f"Unknown solver type: {solver_type}. Valid types are: 'newton'"
    )
