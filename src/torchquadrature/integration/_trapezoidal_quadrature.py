"""Refined trapezoidal rule."""

from typing import Callable

from torch import Tensor

from torchquadrature.integration._quadrature import Quadrature, _check_bounds
from torchquadrature.integration._types import QuadratureType


class TrapezoidalQuadrature(Quadrature):
    """
    Extended trapezoidal rule refined by interval halving.

    The first level samples both endpoints. Level ``n > 1`` adds the
    ``2^(n-2)`` midpoints of the previous level's subintervals.

    Parameters
    ----------
    f : callable
        Integrand, see :class:`Quadrature`.
    a, b : float
        Finite, distinct integration bounds.
    **kwargs
        ``value_shape``, ``dtype`` and ``device``, see :class:`Quadrature`.

    Notes
    -----
    The error behaves as a series in even powers of the step size, so
    successive levels reduce the leading error term by a factor of 4.

    Examples
    --------
    >>> q = TrapezoidalQuadrature(torch.exp, 0.0, 1.0)
    >>> for _ in range(10):
    ...     s = q.next()
    >>> s  # approximately e - 1
    """

    quadrature_type = QuadratureType.TRAPEZOIDAL
    step_ratio = 0.25
    max_steps = 20

    def __init__(self, f: Callable[..., Tensor], a: float, b: float, **kwargs):
        super().__init__(f, a, b, **kwargs)
        _check_bounds(self.a, self.b)

    def next(self) -> Tensor:
        a, b = self.a, self.b
        self.n += 1

        if self.n == 1:
            values = self._evaluate(self._points([a, b]))
            return self._update(0.0, 0.5 * (b - a), values)

        it = 2 ** (self.n - 2)
        # Spacing of the points to be added
        delta = (b - a) / it
        x = a + (self._arange(it) + 0.5) * delta
        return self._update(0.5, 0.5 * (b - a) / it, self._evaluate(x))
