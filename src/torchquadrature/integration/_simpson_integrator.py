"""Simpson's rule as a Richardson combination of refinement levels."""

from typing import Optional

import torch
from torch import Tensor

from torchquadrature.integration._integrator import Integrator
from torchquadrature.integration._types import IntegratorType, QuadratureType


class SimpsonIntegrator(Integrator):
    """
    Combines successive quadrature levels to cancel the leading error term.

    Each step forms ``s_k = (st_k - r st_{k-1}) / (1 - r)`` from the last two
    quadrature estimates, where ``r`` is the quadrature's ``step_ratio``.
    For rules that halve their step (``r = 1/4``) the weights are 4/3 and
    -1/3, which applied to the trapezoidal rule is Simpson's rule. The
    combined sequence converges like :class:`QuadratureIntegrator`.

    Parameters
    ----------
    quadrature : Quadrature
        Any quadrature except ``EXPONENTIAL_MID_POINT``.
    eps : float, optional
        Relative tolerance. Default ``1e-10``.
    **kwargs
        ``max_steps`` and ``min_steps``, see :class:`Integrator`.
    """

    DEFAULT_EPS = 1e-10

    integrator_type = IntegratorType.SIMPSON
    unsupported_quadrature_types = frozenset(
        {QuadratureType.EXPONENTIAL_MID_POINT}
    )

    def _refine(self) -> Optional[Tensor]:
        q = self.quadrature
        ratio = q.step_ratio
        previous_estimate = torch.zeros(
            q.value_shape, dtype=q.dtype, device=q.device
        )
        previous = None
        for step in range(1, self.max_steps + 1):
            estimate = q.next()
            current = (estimate - ratio * previous_estimate) / (1.0 - ratio)
            if (
                previous is not None
                and step > self.min_steps
                and self._within_tolerance(current - previous, previous)
            ):
                return current
            previous = current
            previous_estimate = estimate

        return None
