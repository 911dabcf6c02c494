"""Construction of quadratures by rule type."""

from typing import Callable, Union

from torch import Tensor

from torchquadrature.integration._double_exponential_rule_quadrature import (
    DoubleExponentialRuleQuadrature,
)
from torchquadrature.integration._mid_point_quadrature import (
    ExponentialMidPointQuadrature,
    InfinityMidPointQuadrature,
    LowerSquareRootMidPointQuadrature,
    MidPointQuadrature,
    UpperSquareRootMidPointQuadrature,
)
from torchquadrature.integration._quadrature import Quadrature
from torchquadrature.integration._trapezoidal_quadrature import (
    TrapezoidalQuadrature,
)
from torchquadrature.integration._types import QuadratureType

_QUADRATURES = {
    QuadratureType.TRAPEZOIDAL: TrapezoidalQuadrature,
    QuadratureType.MID_POINT: MidPointQuadrature,
    QuadratureType.INFINITY_MID_POINT: InfinityMidPointQuadrature,
    QuadratureType.LOWER_SQUARE_ROOT_MID_POINT: LowerSquareRootMidPointQuadrature,
    QuadratureType.UPPER_SQUARE_ROOT_MID_POINT: UpperSquareRootMidPointQuadrature,
    QuadratureType.DOUBLE_EXPONENTIAL_RULE: DoubleExponentialRuleQuadrature,
}


def create_quadrature(
    f: Callable[..., Tensor],
    a: float,
    b: float,
    quadrature_type: Union[QuadratureType, str] = QuadratureType.TRAPEZOIDAL,
    **kwargs,
) -> Quadrature:
    """
    Create the quadrature implementing a substitution rule.

    Parameters
    ----------
    f : callable
        Integrand, see :class:`Quadrature`.
    a, b : float
        Integration bounds. ``b`` is ignored by
        ``QuadratureType.EXPONENTIAL_MID_POINT``, which integrates over
        ``[a, inf)``.
    quadrature_type : QuadratureType or str
        Rule to build.
    **kwargs
        Forwarded to the quadrature constructor (``value_shape``, ``dtype``,
        ``device`` and rule specific options such as ``hmax``).

    Returns
    -------
    Quadrature
        A fresh quadrature with no levels computed.
    """
    quadrature_type = QuadratureType(quadrature_type)

    if quadrature_type is QuadratureType.EXPONENTIAL_MID_POINT:
        return ExponentialMidPointQuadrature(f, a, **kwargs)

    return _QUADRATURES[quadrature_type](f, a, b, **kwargs)
