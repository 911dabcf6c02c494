"""Double exponential (tanh-sinh) rule."""

from typing import Callable

import torch
from torch import Tensor

from torchquadrature.integration._quadrature import Quadrature, _check_bounds
from torchquadrature.integration._types import QuadratureType


class DoubleExponentialRuleQuadrature(Quadrature):
    """
    Tanh-sinh rule refined by halving the step in the transformed variable.

    Substitutes ``x = (b - a) / 2 * tanh(sinh(t)) + (a + b) / 2``
    and applies the trapezoidal rule in ``t`` over ``[-hmax, hmax]``. The
    transformed integrand decays double exponentially, which makes the rule
    robust to endpoint singularities and unbounded derivatives.

    Parameters
    ----------
    f : callable
        Integrand, see :class:`Quadrature`. With ``endpoint_distance=True``
        it is called as ``f(x, delta)``.
    a, b : float
        Finite, distinct integration bounds.
    hmax : float
        Truncation of the transformed interval. Default is 3.7, past which
        the weights are below double precision.
    endpoint_distance : bool
        If True, the integrand also receives ``delta``, the distance from
        each sample point to the nearest bound. Close to a bound ``x``
        rounds to the bound itself while ``delta`` keeps full precision, so
        factors such as ``log(1 - x)`` can be computed as ``log(delta)``.
    **kwargs
        ``value_shape``, ``dtype`` and ``device``, see :class:`Quadrature`.

    Notes
    -----
    Sample points whose weight factor ``exp(-2 sinh t)`` underflows below
    the machine epsilon of ``dtype`` contribute zero and are never
    evaluated, so the rule does not sample the bounds themselves.

    Examples
    --------
    >>> q = DoubleExponentialRuleQuadrature(
    ...     lambda x, d: torch.log(x) * torch.log(d), 0.0, 1.0,
    ...     endpoint_distance=True,
    ... )
    """

    quadrature_type = QuadratureType.DOUBLE_EXPONENTIAL_RULE
    step_ratio = 0.25
    max_steps = 20

    HMAX = 3.7

    def __init__(
        self,
        f: Callable[..., Tensor],
        a: float,
        b: float,
        *,
        hmax: float = HMAX,
        endpoint_distance: bool = False,
        **kwargs,
    ):
        super().__init__(f, a, b, **kwargs)
        _check_bounds(self.a, self.b)
        if not hmax > 0.0:
            raise ValueError(f"hmax must be positive, got {hmax}")
        self.hmax = float(hmax)
        self.endpoint_distance = endpoint_distance

    def next(self) -> Tensor:
        a, b, hmax = self.a, self.b, self.hmax
        self.n += 1

        if self.n == 1:
            x = self._points([0.5 * (a + b)])
            delta = self._points([0.5 * abs(b - a)])
            return self._update(0.0, 0.5 * hmax * (b - a), self._func(x, delta))

        it = 2 ** (self.n - 2)
        # Twice the spacing of the points to be added
        twoh = hmax / it
        t = (self._arange(it) + 0.5) * twoh
        q = torch.exp(-2.0 * torch.sinh(t))

        keep = q > torch.finfo(self.dtype).eps
        t = t[keep]
        q = q[keep]

        delta = (b - a) * q / (1.0 + q)
        fact = q / (1.0 + q) ** 2 * torch.cosh(t)
        if q.numel() > 0:
            values = self._func(
                torch.cat([a + delta, b - delta]), torch.cat([delta, delta]).abs()
            )
        else:
            values = torch.zeros(
                (0, *self.value_shape), dtype=self.dtype, device=self.device
            )
        terms = self._expand(torch.cat([fact, fact])) * values

        return self._update(0.5, (b - a) * twoh, terms)

    def _func(self, x: Tensor, delta: Tensor) -> Tensor:
        if self.endpoint_distance:
            return self._evaluate(x, delta)
        return self._evaluate(x)
