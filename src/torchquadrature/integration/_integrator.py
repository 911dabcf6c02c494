"""Base class and factory for refinement integrators."""

import enum
import warnings
from abc import ABC, abstractmethod
from typing import Callable, FrozenSet, Optional, Sequence, Union

import torch
from torch import Tensor

from torchquadrature.integration._exceptions import (
    EvaluationError,
    IntegrationError,
    QuadratureWarning,
)
from torchquadrature.integration._quadrature import Quadrature
from torchquadrature.integration._types import IntegratorType, QuadratureType

# Options consumed by quadrature constructors rather than integrators
_QUADRATURE_OPTIONS = ("hmax", "endpoint_distance")


class IntegratorState(enum.Enum):
    """Lifecycle of an integrator."""

    INITIALIZED = "initialized"
    REFINING = "refining"
    CONVERGED = "converged"
    MAX_STEPS_EXCEEDED = "max_steps_exceeded"
    FAILED = "failed"


def _norm(x: Tensor) -> Tensor:
    """Absolute value of a scalar, Frobenius norm of a matrix."""
    return torch.linalg.vector_norm(x.reshape(-1))


class Integrator(ABC):
    """
    Drives a :class:`Quadrature` through successive refinements until the
    requested tolerance is met.

    Parameters
    ----------
    quadrature : Quadrature
        Quadrature to refine. It must not have been refined yet.
    eps : float, optional
        Relative tolerance. Defaults to the strategy's ``DEFAULT_EPS``.
    max_steps : int, optional
        Refinement ceiling. Defaults to ``quadrature.max_steps``.
    min_steps : int, optional
        Number of refinement steps before convergence is tested, which
        guards against accidental early agreement. Defaults to
        ``MIN_STEPS``.

    Attributes
    ----------
    state : IntegratorState
        Current lifecycle state.
    error : Tensor or None
        Last error estimate computed by the convergence test.

    Notes
    -----
    Integrators are single-use: :meth:`integrate` may be called once.
    """

    DEFAULT_INTEGRATOR_TYPE = IntegratorType.ROMBERG
    DEFAULT_QUADRATURE_TYPE = QuadratureType.TRAPEZOIDAL
    DEFAULT_EPS: float = 1e-8
    MIN_STEPS = 5

    integrator_type: IntegratorType
    unsupported_quadrature_types: FrozenSet[QuadratureType] = frozenset()

    def __init__(
        self,
        quadrature: Quadrature,
        eps: Optional[float] = None,
        *,
        max_steps: Optional[int] = None,
        min_steps: Optional[int] = None,
    ):
        if quadrature.quadrature_type in self.unsupported_quadrature_types:
            raise ValueError(
                f"{quadrature.quadrature_type.name} quadrature is not supported "
                f"by the {self.integrator_type.name} integrator"
            )
        if quadrature.n != 0:
            raise ValueError("quadrature has already been refined")

        eps = self.DEFAULT_EPS if eps is None else float(eps)
        max_steps = quadrature.max_steps if max_steps is None else int(max_steps)
        min_steps = self.MIN_STEPS if min_steps is None else int(min_steps)

        if not eps > 0.0:
            raise ValueError(f"eps must be positive, got {eps}")
        if max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {max_steps}")
        if not 0 <= min_steps < max_steps:
            raise ValueError(
                f"min_steps must be in [0, max_steps), got {min_steps}"
            )
        if eps < torch.finfo(quadrature.dtype).eps:
            warnings.warn(
                f"eps={eps:.2e} is below the resolution of {quadrature.dtype}; "
                f"convergence is unlikely",
                QuadratureWarning,
                stacklevel=2,
            )

        self.quadrature = quadrature
        self.eps = eps
        self.max_steps = max_steps
        self.min_steps = min_steps
        self.state = IntegratorState.INITIALIZED
        self.error: Optional[Tensor] = None

    @property
    def quadrature_type(self) -> QuadratureType:
        return self.quadrature.quadrature_type

    def integrate(self) -> Tensor:
        """
        Refine the quadrature until convergence.

        Returns
        -------
        Tensor
            Integral estimate, shape ``quadrature.value_shape``.

        Raises
        ------
        IntegrationError
            If the tolerance is not met within ``max_steps`` refinements or
            the integrand fails.
        RuntimeError
            If called more than once.
        """
        if self.state is not IntegratorState.INITIALIZED:
            raise RuntimeError(
                "integrators are single-use; create a new one to integrate again"
            )
        self.state = IntegratorState.REFINING

        try:
            result = self._refine()
        except EvaluationError as e:
            self.state = IntegratorState.FAILED
            raise IntegrationError(
                f"Integrand evaluation failed at step {self.quadrature.n}: {e}"
            ) from e
        except Exception as e:
            self.state = IntegratorState.FAILED
            raise IntegrationError(
                f"Integrand raised {type(e).__name__} at step "
                f"{self.quadrature.n}: {e}"
            ) from e

        if result is None:
            self.state = IntegratorState.MAX_STEPS_EXCEEDED
            message = (
                f"Integration failed to converge after {self.max_steps} steps."
            )
            if self.error is not None:
                message += f" Error estimate: {_norm(self.error).item():.2e}"
            raise IntegrationError(message)

        self.state = IntegratorState.CONVERGED
        return result

    @abstractmethod
    def _refine(self) -> Optional[Tensor]:
        """Run the refinement loop; return the converged value or None."""
        ...

    def _within_tolerance(self, error: Tensor, reference: Tensor) -> bool:
        """
        Relative test against ``reference``, absolute when it is ~0.

        ``reference`` is ~0 when it is below the requested accuracy of the
        integral of ``|f|``, as for odd integrands over symmetric intervals
        whose estimates settle at round-off. The error is then compared
        with ``eps`` times the integral of ``|f|``.
        """
        self.error = error
        scale = _norm(reference)
        abs_scale = _norm(self.quadrature.s_abs)
        if scale > self.eps * abs_scale:
            tolerance = self.eps * scale
        else:
            tolerance = self.eps * abs_scale
        return bool(_norm(error) <= tolerance)

    @classmethod
    def create(
        cls,
        a: float,
        b: float,
        f: Callable[..., Tensor],
        eps: Optional[float] = None,
        integrator_type: Union[IntegratorType, str] = DEFAULT_INTEGRATOR_TYPE,
        quadrature_type: Union[QuadratureType, str] = DEFAULT_QUADRATURE_TYPE,
        *,
        value_shape: Sequence[int] = (),
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
        **options,
    ) -> "Integrator":
        """
        Create an integrator for ``f`` over ``[a, b]``.

        Parameters
        ----------
        a, b : float
            Integration bounds. ``b`` is ignored by
            ``QuadratureType.EXPONENTIAL_MID_POINT``.
        f : callable
            Batched integrand, see :class:`Quadrature`.
        eps : float, optional
            Relative tolerance. Defaults to the strategy's ``DEFAULT_EPS``.
        integrator_type : IntegratorType or str
            Convergence strategy. Default ``ROMBERG``.
        quadrature_type : QuadratureType or str
            Substitution rule. Default ``TRAPEZOIDAL``.
        value_shape : tuple of int
            Shape of one integrand value.
        dtype, device
            Type and placement of sample points and estimates.
        **options
            ``hmax`` and ``endpoint_distance`` go to the double exponential
            rule; ``max_steps``, ``min_steps`` and ``extrapolation_points``
            go to the integrator.

        Returns
        -------
        Integrator

        Raises
        ------
        ValueError
            If the strategy does not support the rule, or the interval or
            options are invalid.
        """
        from torchquadrature.integration._create_quadrature import (
            create_quadrature,
        )
        from torchquadrature.integration._quadrature_integrator import (
            QuadratureIntegrator,
        )
        from torchquadrature.integration._romberg_integrator import (
            RombergIntegrator,
        )
        from torchquadrature.integration._simpson_integrator import (
            SimpsonIntegrator,
        )

        integrator_type = IntegratorType(integrator_type)
        quadrature_type = QuadratureType(quadrature_type)

        integrator_cls = {
            IntegratorType.QUADRATURE: QuadratureIntegrator,
            IntegratorType.SIMPSON: SimpsonIntegrator,
            IntegratorType.ROMBERG: RombergIntegrator,
        }[integrator_type]

        if quadrature_type in integrator_cls.unsupported_quadrature_types:
            raise ValueError(
                f"{quadrature_type.name} quadrature is not supported by the "
                f"{integrator_type.name} integrator"
            )

        quadrature_options = {
            key: options.pop(key) for key in _QUADRATURE_OPTIONS if key in options
        }
        quadrature = create_quadrature(
            f,
            a,
            b,
            quadrature_type,
            value_shape=value_shape,
            dtype=dtype,
            device=device,
            **quadrature_options,
        )

        return integrator_cls(quadrature, eps, **options)
