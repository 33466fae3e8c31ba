"""Equal-area Mollweide projection of arena pixel directions.

The projection needs the auxiliary angle ``t`` solving
``2t + sin(2t) = pi * sin(latitude)``, which has no closed form. It is found
with :class:`~patternforge.solvers.NewtonRaphsonSolver`; at the poles the
derivative vanishes, so those points are pinned to ``t = +-pi/2`` directly.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import torch

from patternforge.solvers import BaseRootSolver, NewtonRaphsonSolver, SolverResult

logger = logging.getLogger(__name__)

_POLE_EPS = 1e-12


def mollweide_auxiliary_angle(
    latitude: torch.Tensor,
    solver: Optional[BaseRootSolver] = None,
) -> SolverResult:
    """Solve for the Mollweide auxiliary angle of every latitude.

    Args:
        latitude: Latitudes in radians, any shape, within ``[-pi/2, pi/2]``.
        solver: Root solver to use; defaults to ``NewtonRaphsonSolver()``.

    Returns:
        :class:`SolverResult` whose ``value`` holds ``t`` with the shape of
        ``latitude``. Pole points are exact regardless of convergence.
    """
    latitude = torch.as_tensor(latitude, dtype=torch.float64)
    solver = solver or NewtonRaphsonSolver()
    target = math.pi * torch.sin(latitude)
    at_pole = (latitude.abs() - math.pi / 2).abs() < _POLE_EPS

    # Iterate on u = 2t; the derivative 1 + cos(u) is zero only at the poles.
    result = solver.solve(
        lambda u: u + torch.sin(u) - target,
        lambda u: 1 + torch.cos(u),
        2 * latitude,
    )
    t = torch.where(at_pole, torch.sign(latitude) * math.pi / 2, result.value / 2)
    if not result.converged:
        logger.warning(
            "Mollweide auxiliary angle did not converge after %d iterations "
            "(residual %.3g)",
            result.iterations,
            result.residual,
        )
    return SolverResult(t, result.converged, result.iterations, result.residual)


def mollweide(
    azimuth: torch.Tensor,
    latitude: torch.Tensor,
    solver: Optional[BaseRootSolver] = None,
) -> Tuple[torch.Tensor, torch.Tensor]:
    """Project ``(azimuth, latitude)`` onto the Mollweide plane.

    Returns:
        ``(x, y)`` with ``x`` in ``[-2*sqrt(2), 2*sqrt(2)]`` and ``y`` in
        ``[-sqrt(2), sqrt(2)]`` (unit sphere).
    """
    azimuth = torch.as_tensor(azimuth, dtype=torch.float64)
    t = mollweide_auxiliary_angle(latitude, solver).value
    x = (2 * math.sqrt(2) / math.pi) * azimuth * torch.cos(t)
    y = math.sqrt(2) * torch.sin(t)
    return x, y


__all__ = ["mollweide_auxiliary_angle", "mollweide"]
