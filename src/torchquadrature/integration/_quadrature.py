"""Base class for incrementally refined quadrature rules."""

import math
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence, Tuple

import torch
from torch import Tensor

from torchquadrature.integration._exceptions import EvaluationError
from torchquadrature.integration._types import QuadratureType


def _check_bounds(a: float, b: float) -> None:
    """Reject intervals a refinement rule cannot sample."""
    if not (math.isfinite(a) and math.isfinite(b)):
        raise ValueError(
            f"integration bounds must be finite, got a={a}, b={b}"
        )
    if a == b:
        raise ValueError(f"integration interval is degenerate: a = b = {a}")


class Quadrature(ABC):
    """
    Incrementally refined approximation of a definite integral.

    Every call to :meth:`next` refines the estimate by one level. Samples
    taken by earlier levels are reused, so each level only evaluates the
    integrand at the points it adds.

    Parameters
    ----------
    f : callable
        Integrand. Receives a 1-D tensor of sample points and returns a
        tensor of shape ``(len(x), *value_shape)``. A 0-dim result is
        broadcast to every point.
    a, b : float
        Integration bounds of the (possibly substituted) integral.
    value_shape : tuple of int
        Shape of one integrand value. ``()`` for scalar integrands,
        ``(rows, columns)`` for matrix-valued ones.
    dtype : torch.dtype
        Floating point type of sample points and estimates.
    device : torch.device, optional
        Device of sample points and estimates. Defaults to CPU.

    Attributes
    ----------
    n : int
        Number of refinement levels completed.
    neval : int
        Number of integrand samples taken so far.
    s : Tensor
        Current estimate of the integral, shape ``value_shape``.
    s_abs : Tensor
        Estimate of the integral of ``|f|`` with the same samples and
        weights, shape ``value_shape``. It measures the round-off level of
        ``s`` when the integral cancels to zero.
    step_ratio : float
        Ratio between the squared step sizes of two successive levels.
        Romberg extrapolation uses it as its step size proxy.
    max_steps : int
        Default refinement ceiling for this rule.

    Notes
    -----
    Levels must be requested in strict sequence. Instances are single-use
    and are not safe to share between threads.
    """

    quadrature_type: QuadratureType
    step_ratio: float = 0.25
    max_steps: int = 20

    def __init__(
        self,
        f: Callable[..., Tensor],
        a: float,
        b: float,
        *,
        value_shape: Sequence[int] = (),
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
    ):
        value_shape = tuple(int(size) for size in value_shape)
        if any(size < 1 for size in value_shape):
            raise ValueError(
                f"value_shape must contain positive sizes, got {value_shape}"
            )
        if not dtype.is_floating_point:
            raise ValueError(f"dtype must be a floating point type, got {dtype}")

        self.f = f
        self.a = float(a)
        self.b = float(b)
        self.value_shape: Tuple[int, ...] = value_shape
        self.dtype = dtype
        self.device = torch.device("cpu") if device is None else torch.device(device)
        self.n = 0
        self.neval = 0
        self.s = torch.zeros(value_shape, dtype=dtype, device=self.device)
        self.s_abs = torch.zeros_like(self.s)

    @abstractmethod
    def next(self) -> Tensor:
        """
        Refine the estimate by one level.

        Returns
        -------
        Tensor
            Updated estimate of the integral, shape ``value_shape``.

        Raises
        ------
        EvaluationError
            If the integrand fails or returns non-finite values.
        """
        ...

    def _points(self, values: Sequence[float]) -> Tensor:
        return torch.tensor(values, dtype=self.dtype, device=self.device)

    def _arange(self, count: int) -> Tensor:
        return torch.arange(count, dtype=self.dtype, device=self.device)

    def _update(self, alpha: float, beta: float, terms: Tensor) -> Tensor:
        """Set ``s = alpha * s + beta * sum(terms)`` and track ``s_abs``."""
        self.s = alpha * self.s + beta * terms.sum(dim=0)
        self.s_abs = alpha * self.s_abs + abs(beta) * terms.abs().sum(dim=0)
        return self.s

    def _expand(self, x: Tensor) -> Tensor:
        """Reshape per-point factors so they broadcast against values."""
        return x.reshape(-1, *([1] * len(self.value_shape)))

    def _evaluate(self, x: Tensor, *args: Tensor) -> Tensor:
        """Evaluate the integrand at ``x`` and validate the result."""
        values = torch.as_tensor(
            self.f(x, *args), dtype=self.dtype, device=self.device
        )
        expected = (x.shape[0], *self.value_shape)
        if values.dim() == 0:
            values = values.expand(expected)
        elif values.shape != expected:
            raise EvaluationError(
                f"integrand returned shape {tuple(values.shape)}, "
                f"expected {expected}"
            )

        self.neval += x.shape[0]

        finite = torch.isfinite(values)
        if not finite.all():
            bad = (~finite).reshape(x.shape[0], -1).any(dim=-1)
            raise EvaluationError(
                f"integrand returned non-finite values at "
                f"{int(bad.sum())} of {x.shape[0]} points "
                f"(first at x={x[bad][0].item():.17g})"
            )

        return values

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(a={self.a}, b={self.b}, n={self.n}, "
            f"value_shape={self.value_shape})"
        )
