"""Angular anti-aliasing for pixel-level membership tests.

Each pixel's scalar coordinate is expanded into ``N`` sub-samples spread over
the pixel's angular footprint. Generators evaluate a boolean decision per
sample (``inside the disc``, ``on the bright half of the grating``) and
average over the trailing axis, giving a fractional membership in ``[0, 1]``
instead of a hard in/out decision.

Sample offsets are the midpoints of ``N`` equal sub-intervals of
``[-r, r]``, so ``N = 1`` reproduces point sampling and sample sets for
``N = 3, 9, 27, ...`` are nested refinements of each other.

Example:
    >>> coord = torch.zeros(4, 4, dtype=torch.float64)
    >>> samples = samples_by_p_rad(coord, 5, 0.01)
    >>> samples.shape
    torch.Size([4, 4, 5])
    >>> fractional_membership(samples < 0).max().item()
    0.4
"""

from __future__ import annotations

from typing import Union

import torch

PRad = Union[float, torch.Tensor]


def sample_offsets(num_samples: int, dtype=torch.float64, device=None) -> torch.Tensor:
    """Unit offsets in ``(-1, 1)`` for ``num_samples`` samples per pixel."""
    if num_samples < 1:
        raise ValueError(f"num_samples must be at least 1, got {num_samples}")
    index = torch.arange(num_samples, dtype=dtype, device=device)
    return (2 * index + 1 - num_samples) / num_samples


def samples_by_p_rad(coord: torch.Tensor, num_samples: int, p_rad: PRad) -> torch.Tensor:
    """Expand ``coord`` into samples within ``+-p_rad`` of each pixel.

    Args:
        coord: Per-pixel coordinate, any shape.
        num_samples: Samples per pixel.
        p_rad: Sampling radius; scalar or tensor broadcastable to ``coord``.

    Returns:
        Tensor of shape ``coord.shape + (num_samples,)``.
    """
    offsets = sample_offsets(num_samples, coord.dtype, coord.device)
    radius = torch.as_tensor(p_rad, dtype=coord.dtype, device=coord.device)
    return coord.unsqueeze(-1) + radius.unsqueeze(-1) * offsets


def local_spacing(coord: torch.Tensor) -> torch.Tensor:
    """Magnitude of the per-pixel coordinate gradient over the pixel grid."""
    dims = [d for d in range(coord.ndim) if coord.shape[d] > 1]
    if not dims:
        return torch.zeros_like(coord)
    grads = torch.gradient(coord, dim=dims)
    return torch.sqrt(sum(g ** 2 for g in grads))


def samples_by_diff(coord: torch.Tensor, num_samples: int) -> torch.Tensor:
    """Expand ``coord`` using half the local coordinate spacing as radius.

    Used where the channel is a derived quantity whose per-pixel extent is
    not ``p_rad`` (e.g. a rotated colatitude near its pole).
    """
    return samples_by_p_rad(coord, num_samples, local_spacing(coord) / 2)


def fractional_membership(mask: torch.Tensor) -> torch.Tensor:
    """Average a per-sample boolean (or [0, 1]) mask over its trailing axis."""
    return mask.to(torch.float64).mean(dim=-1)


class AntiAliasingSampler:
    """Bundles a sample count with the arena's pixel angular radius.

    Attributes:
        num_samples: Samples per pixel.
        p_rad: Pixel angular radius (scalar or per-pixel tensor).
    """

    def __init__(self, num_samples: int, p_rad: PRad):
        if num_samples < 1:
            raise ValueError(f"num_samples must be at least 1, got {num_samples}")
        self.num_samples = int(num_samples)
        self.p_rad = p_rad

    def sample(self, coord: torch.Tensor) -> torch.Tensor:
        return samples_by_p_rad(coord, self.num_samples, self.p_rad)

    def sample_by_diff(self, coord: torch.Tensor) -> torch.Tensor:
        return samples_by_diff(coord, self.num_samples)

    @staticmethod
    def membership(mask: torch.Tensor) -> torch.Tensor:
        return fractional_membership(mask)

    def __repr__(self) -> str:
        return f"AntiAliasingSampler(num_samples={self.num_samples})"


__all__ = [
    "AntiAliasingSampler",
    "sample_offsets",
    "samples_by_p_rad",
    "samples_by_diff",
    "local_spacing",
    "fractional_membership",
]
