"""Open midpoint rule and its change-of-variable variants."""

import math
from typing import Callable

import torch
from torch import Tensor

from torchquadrature.integration._quadrature import Quadrature, _check_bounds
from torchquadrature.integration._types import QuadratureType


class MidPointQuadrature(Quadrature):
    """
    Extended midpoint rule refined by interval tripling.

    The endpoints are never sampled, so integrable singularities at the
    bounds are tolerated. Level 1 samples the midpoint of ``[a, b]``; level
    ``n > 1`` splits every subinterval in three and samples the two new
    midpoints, reusing the ``3^(n-2)`` samples of the previous level.

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
    Subclasses apply a change of variable by overriding :meth:`_func`,
    which maps sample points of the substituted integral to weighted
    integrand values.
    """

    quadrature_type = QuadratureType.MID_POINT
    # Tripling the number of points divides the squared step size by 9
    step_ratio = 1.0 / 9.0
    max_steps = 14

    def __init__(self, f: Callable[..., Tensor], a: float, b: float, **kwargs):
        super().__init__(f, a, b, **kwargs)
        _check_bounds(self.a, self.b)

    def next(self) -> Tensor:
        a, b = self.a, self.b
        self.n += 1

        if self.n == 1:
            values = self._func(self._points([0.5 * (a + b)]))
            return self._update(0.0, b - a, values)

        it = 3 ** (self.n - 2)
        delta = (b - a) / (3.0 * it)
        # The added points alternate in spacing between delta and 2 * delta
        left = a + (3.0 * self._arange(it) + 0.5) * delta
        x = torch.cat([left, left + 2.0 * delta])
        return self._update(1.0 / 3.0, (b - a) / (3.0 * it), self._func(x))

    def _func(self, x: Tensor) -> Tensor:
        return self._evaluate(x)


class InfinityMidPointQuadrature(MidPointQuadrature):
    """
    Midpoint rule after the substitution ``x = 1 / t``.

    Integrates ``f(1/t) / t^2`` over ``[1/b, 1/a]``, which maps a bound at
    infinity to zero. Either bound may be infinite, but both must have the
    same sign (``a * b > 0``).
    """

    quadrature_type = QuadratureType.INFINITY_MID_POINT

    def __init__(self, f: Callable[..., Tensor], a: float, b: float, **kwargs):
        a = float(a)
        b = float(b)
        if not a * b > 0.0:
            raise ValueError(
                f"infinity mid-point rule requires a * b > 0, got a={a}, b={b}"
            )
        super().__init__(f, 1.0 / b, 1.0 / a, **kwargs)

    def _func(self, x: Tensor) -> Tensor:
        return self._evaluate(1.0 / x) / self._expand(x * x)


class LowerSquareRootMidPointQuadrature(MidPointQuadrature):
    """
    Midpoint rule after the substitution ``x = a + t^2``.

    Integrates ``2 t f(a + t^2)`` over ``[0, sqrt(b - a)]``, which removes an
    inverse square root singularity at the lower bound. Requires ``a < b``.
    """

    quadrature_type = QuadratureType.LOWER_SQUARE_ROOT_MID_POINT

    def __init__(self, f: Callable[..., Tensor], a: float, b: float, **kwargs):
        a = float(a)
        b = float(b)
        if not a < b:
            raise ValueError(f"requires a < b, got a={a}, b={b}")
        super().__init__(f, 0.0, math.sqrt(b - a), **kwargs)
        self.lower = a

    def _func(self, x: Tensor) -> Tensor:
        return 2.0 * self._expand(x) * self._evaluate(self.lower + x * x)


class UpperSquareRootMidPointQuadrature(MidPointQuadrature):
    """
    Midpoint rule after the substitution ``x = b - t^2``.

    Integrates ``2 t f(b - t^2)`` over ``[0, sqrt(b - a)]``, which removes an
    inverse square root singularity at the upper bound. Requires ``a < b``.
    """

    quadrature_type = QuadratureType.UPPER_SQUARE_ROOT_MID_POINT

    def __init__(self, f: Callable[..., Tensor], a: float, b: float, **kwargs):
        a = float(a)
        b = float(b)
        if not a < b:
            raise ValueError(f"requires a < b, got a={a}, b={b}")
        super().__init__(f, 0.0, math.sqrt(b - a), **kwargs)
        self.upper = b

    def _func(self, x: Tensor) -> Tensor:
        return 2.0 * self._expand(x) * self._evaluate(self.upper - x * x)


class ExponentialMidPointQuadrature(MidPointQuadrature):
    """
    Midpoint rule after the substitution ``x = -log(t)``.

    Integrates ``f(-log t) / t`` over ``[0, exp(-a)]``, which is the
    integral of ``f`` over ``[a, inf)``. Suited to integrands that decay
    exponentially. Its estimates are only usable through Romberg
    extrapolation.
    """

    quadrature_type = QuadratureType.EXPONENTIAL_MID_POINT

    def __init__(self, f: Callable[..., Tensor], a: float, **kwargs):
        a = float(a)
        if not math.isfinite(a):
            raise ValueError(f"lower bound must be finite, got a={a}")
        try:
            upper = math.exp(-a)
        except OverflowError:
            raise ValueError(f"lower bound is out of range, got a={a}") from None
        super().__init__(f, 0.0, upper, **kwargs)
        self.lower = a

    def _func(self, x: Tensor) -> Tensor:
        return self._evaluate(-torch.log(x)) / self._expand(x)
