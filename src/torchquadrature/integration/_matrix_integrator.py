"""Integration of matrix-valued functions."""

from typing import Callable, Optional, Union

import torch
from torch import Tensor

from torchquadrature.integration._integrator import Integrator
from torchquadrature.integration._types import IntegratorType, QuadratureType


class MatrixIntegrator:
    """
    Integrates a matrix-valued function of one variable.

    Wraps an :class:`Integrator` whose quadrature accumulates
    ``(rows, columns)`` estimates. The integrand is evaluated once per
    sample point for the whole matrix, and convergence is tested on the
    Frobenius norm, so the control flow is the one used for scalars.

    Parameters
    ----------
    integrator : Integrator
        Integrator over a quadrature with a 2-D ``value_shape``.

    Examples
    --------
    >>> A = torch.tensor([[0.0, 1.0], [-1.0, 0.0]], dtype=torch.float64)
    >>> integrator = MatrixIntegrator.create(
    ...     0.0, 1.0, lambda t: torch.matrix_exp(A * t[:, None, None]), 2, 2
    ... )
    >>> result = torch.empty(2, 2, dtype=torch.float64)
    >>> integrator.integrate(result)
    """

    def __init__(self, integrator: Integrator):
        if len(integrator.quadrature.value_shape) != 2:
            raise ValueError(
                f"integrator must accumulate matrices, got value_shape "
                f"{integrator.quadrature.value_shape}"
            )
        self.integrator = integrator

    @property
    def rows(self) -> int:
        return self.integrator.quadrature.value_shape[0]

    @property
    def columns(self) -> int:
        return self.integrator.quadrature.value_shape[1]

    @property
    def integrator_type(self) -> IntegratorType:
        return self.integrator.integrator_type

    @property
    def quadrature_type(self) -> QuadratureType:
        return self.integrator.quadrature_type

    def integrate(self, result: Optional[Tensor] = None) -> Tensor:
        """
        Integrate, optionally writing into ``result``.

        Parameters
        ----------
        result : Tensor, optional
            ``(rows, columns)`` tensor filled in place with the integral.

        Returns
        -------
        Tensor
            ``result`` if given, otherwise a new ``(rows, columns)`` tensor.

        Raises
        ------
        ValueError
            If ``result`` does not have shape ``(rows, columns)``.
        IntegrationError
            If integration does not converge or the integrand fails.
        """
        if result is not None and tuple(result.shape) != (self.rows, self.columns):
            raise ValueError(
                f"result must have shape ({self.rows}, {self.columns}), "
                f"got {tuple(result.shape)}"
            )

        value = self.integrator.integrate()
        if result is None:
            return value

        result.copy_(value)
        return result

    @classmethod
    def create(
        cls,
        a: float,
        b: float,
        f: Callable[..., Tensor],
        rows: int,
        columns: int,
        eps: Optional[float] = None,
        integrator_type: Union[IntegratorType, str] = Integrator.DEFAULT_INTEGRATOR_TYPE,
        quadrature_type: Union[QuadratureType, str] = Integrator.DEFAULT_QUADRATURE_TYPE,
        *,
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
        **options,
    ) -> "MatrixIntegrator":
        """
        Create a matrix integrator for ``f`` over ``[a, b]``.

        ``f`` receives a 1-D tensor of ``n`` points and returns an
        ``(n, rows, columns)`` tensor. Remaining arguments are as in
        :meth:`Integrator.create`.
        """
        if rows < 1 or columns < 1:
            raise ValueError(
                f"rows and columns must be positive, got {rows}x{columns}"
            )

        return cls(
            Integrator.create(
                a,
                b,
                f,
                eps,
                integrator_type,
                quadrature_type,
                value_shape=(rows, columns),
                dtype=dtype,
                device=device,
                **options,
            )
        )
