"""Exceptions for refinement quadrature."""


class QuadratureWarning(UserWarning):
    """Warning for quadrature issues (e.g., unreachable tolerance)."""

    pass


class IntegrationError(Exception):
    """Error when integration fails to converge or the integrand fails."""

    pass


class EvaluationError(Exception):
    """Error raised when the integrand cannot be evaluated.

    Integrands may raise it themselves. It is also raised when an integrand
    returns non-finite values or values of an unexpected shape.
    """

    pass
