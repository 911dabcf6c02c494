"""Polynomial extrapolation with Neville's algorithm."""

from typing import Sequence, Tuple

import torch
from torch import Tensor


def polynomial_extrapolation(
    x: Sequence[float],
    y: Tensor,
    point: float = 0.0,
) -> Tuple[Tensor, Tensor]:
    """
    Evaluate the interpolating polynomial through ``(x, y)`` at ``point``.

    Uses Neville's algorithm. The tableau is walked from the abscissa
    closest to ``point``, and the last correction added is returned as the
    error estimate.

    Parameters
    ----------
    x : sequence of float
        Distinct abscissas.
    y : Tensor
        Ordinates, shape ``(len(x), *value_shape)``. Every trailing element
        is interpolated independently.
    point : float
        Where to evaluate the polynomial. Default 0.0, the zero step size
        limit used by Romberg integration.

    Returns
    -------
    value : Tensor
        Polynomial value at ``point``, shape ``value_shape``.
    error : Tensor
        Error estimate, shape ``value_shape``.

    Examples
    --------
    >>> h = [1.0, 0.25, 0.0625]
    >>> y = torch.tensor([1.0 + h_ for h_ in h], dtype=torch.float64)
    >>> value, error = polynomial_extrapolation(h, y)  # value == 1.0
    """
    m = len(x)
    if m < 1:
        raise ValueError("at least one point is required")
    if y.shape[0] != m:
        raise ValueError(
            f"y must have {m} entries along dim 0, got {y.shape[0]}"
        )

    # Start from the tableau entry closest to the evaluation point
    ns = min(range(m), key=lambda i: abs(point - x[i]))
    c = list(y.unbind(dim=0))
    d = list(c)

    value = y[ns]
    error = torch.zeros_like(value)
    ns -= 1

    for level in range(1, m):
        for i in range(m - level):
            ho = x[i] - point
            hp = x[i + level] - point
            den = ho - hp
            if den == 0.0:
                raise ValueError("abscissas must be distinct")
            w = (c[i + 1] - d[i]) / den
            d[i] = hp * w
            c[i] = ho * w

        # Take the straightest path through the tableau
        if 2 * (ns + 1) < m - level:
            error = c[ns + 1]
        else:
            error = d[ns]
            ns -= 1
        value = value + error

    return value, error
