"""Functional interface to refinement integration."""

from typing import Callable, Optional, Sequence, Union

import torch
from torch import Tensor

from torchquadrature.integration._integrator import Integrator
from torchquadrature.integration._types import IntegratorType, QuadratureType


def integrate(
    f: Callable[..., Tensor],
    a: float,
    b: float,
    *,
    eps: Optional[float] = None,
    integrator_type: Union[IntegratorType, str] = IntegratorType.ROMBERG,
    quadrature_type: Union[QuadratureType, str] = QuadratureType.TRAPEZOIDAL,
    value_shape: Sequence[int] = (),
    dtype: torch.dtype = torch.float64,
    device: Optional[torch.device] = None,
    **options,
) -> Tensor:
    """
    Compute a definite integral by iterative refinement.

    Parameters
    ----------
    f : callable
        Integrand. Receives a 1-D tensor of points, returns values of shape
        ``(len(x), *value_shape)``.
    a, b : float
        Integration bounds.
    eps : float, optional
        Relative tolerance. Defaults to the strategy's default.
    integrator_type : IntegratorType or str
        Convergence strategy: ``"quadrature"``, ``"simpson"`` or
        ``"romberg"``.
    quadrature_type : QuadratureType or str
        Substitution rule, e.g. ``"trapezoidal"`` or
        ``"double_exponential_rule"``.
    value_shape : tuple of int
        Shape of one integrand value; ``(rows, columns)`` for matrices.
    dtype, device
        Type and placement of sample points and estimates.
    **options
        See :meth:`Integrator.create`.

    Returns
    -------
    Tensor
        Integral estimate, shape ``value_shape``.

    Raises
    ------
    ValueError
        If the configuration is invalid.
    IntegrationError
        If the integration does not converge or the integrand fails.

    Examples
    --------
    >>> integrate(torch.sin, 0, torch.pi)  # approximately 2.0

    >>> integrate(
    ...     lambda x: torch.log(x) * torch.log1p(-x), 0.0, 1.0,
    ...     quadrature_type="lower_square_root_mid_point",
    ... )  # approximately 2 - pi^2 / 6
    """
    integrator = Integrator.create(
        a,
        b,
        f,
        eps,
        integrator_type,
        quadrature_type,
        value_shape=value_shape,
        dtype=dtype,
        device=device,
        **options,
    )
    return integrator.integrate()
