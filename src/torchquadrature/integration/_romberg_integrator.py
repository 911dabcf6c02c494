"""Romberg integration by polynomial extrapolation to zero step size."""

from typing import List, Optional

import torch
from torch import Tensor

from torchquadrature.integration._integrator import Integrator
from torchquadrature.integration._polynomial_extrapolation import (
    polynomial_extrapolation,
)
from torchquadrature.integration._quadrature import Quadrature
from torchquadrature.integration._types import IntegratorType


class RombergIntegrator(Integrator):
    """
    Accelerates a quadrature by extrapolating its estimates to ``h = 0``.

    Records ``(h_k, s_k)`` for every refinement step, with ``h_1 = 1`` and
    ``h_{k+1} = h_k * quadrature.step_ratio``, a proxy for the squared step
    size. From step ``min_steps`` on, the polynomial through the last
    ``extrapolation_points`` records is evaluated at zero; the magnitude of
    its last correction is the error estimate.

    Parameters
    ----------
    quadrature : Quadrature
        Any quadrature.
    eps : float, optional
        Relative tolerance. Default ``3e-9``.
    max_steps, min_steps : int, optional
        See :class:`Integrator`.
    extrapolation_points : int, optional
        Number of most recent estimates the extrapolating polynomial passes
        through, capped to the number of steps taken. Default 5.

    Notes
    -----
    ``step_ratio`` must match the convergence order of the quadrature: 1/4
    for rules that halve their step, 1/9 for rules that divide it by three.

    Examples
    --------
    >>> q = TrapezoidalQuadrature(torch.exp, 0.0, 1.0)
    >>> RombergIntegrator(q).integrate()  # approximately e - 1
    """

    DEFAULT_EPS = 3e-9
    EXTRAPOLATION_POINTS = 5

    integrator_type = IntegratorType.ROMBERG

    def __init__(
        self,
        quadrature: Quadrature,
        eps: Optional[float] = None,
        *,
        max_steps: Optional[int] = None,
        min_steps: Optional[int] = None,
        extrapolation_points: Optional[int] = None,
    ):
        super().__init__(
            quadrature, eps, max_steps=max_steps, min_steps=min_steps
        )
        if extrapolation_points is None:
            extrapolation_points = self.EXTRAPOLATION_POINTS
        if extrapolation_points < 2:
            raise ValueError(
                f"extrapolation_points must be at least 2, got {extrapolation_points}"
            )
        self.extrapolation_points = int(extrapolation_points)
        self.steps: List[float] = []
        self.estimates: List[Tensor] = []

    def _refine(self) -> Optional[Tensor]:
        h = 1.0
        for step in range(1, self.max_steps + 1):
            self.estimates.append(self.quadrature.next())
            self.steps.append(h)

            if step >= max(self.min_steps, 2):
                k = min(self.extrapolation_points, step)
                value, error = polynomial_extrapolation(
                    self.steps[-k:], torch.stack(self.estimates[-k:]), 0.0
                )
                if self._within_tolerance(error, value):
                    return value

            h *= self.quadrature.step_ratio

        return None
