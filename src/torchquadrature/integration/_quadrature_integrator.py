"""Integration by plain successive refinement."""

from typing import Optional

from torch import Tensor

from torchquadrature.integration._integrator import Integrator
from torchquadrature.integration._types import IntegratorType, QuadratureType


class QuadratureIntegrator(Integrator):
    """
    Refines a quadrature until two successive estimates agree.

    Converges at step ``k > min_steps`` when
    ``||s_k - s_{k-1}|| <= eps * ||s_{k-1}||``, relative to the previous
    estimate. When the previous estimate is ~0 compared with the integral
    of ``|f|`` (``quadrature.s_abs``), the bound is ``eps * ||s_abs||``
    instead.

    Parameters
    ----------
    quadrature : Quadrature
        Any quadrature except ``EXPONENTIAL_MID_POINT``.
    eps : float, optional
        Relative tolerance. Default ``1e-8``.
    **kwargs
        ``max_steps`` and ``min_steps``, see :class:`Integrator`.

    Examples
    --------
    >>> q = TrapezoidalQuadrature(torch.sin, 0.0, math.pi)
    >>> QuadratureIntegrator(q).integrate()  # approximately 2.0
    """

    DEFAULT_EPS = 1e-8

    integrator_type = IntegratorType.QUADRATURE
    unsupported_quadrature_types = frozenset(
        {QuadratureType.EXPONENTIAL_MID_POINT}
    )

    def _refine(self) -> Optional[Tensor]:
        previous = None
        for step in range(1, self.max_steps + 1):
            current = self.quadrature.next()
            if (
                previous is not None
                and step > self.min_steps
                and self._within_tolerance(current - previous, previous)
            ):
                return current
            previous = current

        return None
