"""
Refinement quadrature for scalar and matrix-valued functions.

Quadrature rules (refined one level per ``next()`` call):
    TrapezoidalQuadrature, MidPointQuadrature, InfinityMidPointQuadrature,
    LowerSquareRootMidPointQuadrature, UpperSquareRootMidPointQuadrature,
    ExponentialMidPointQuadrature, DoubleExponentialRuleQuadrature

Integrators (drive a rule to convergence):
    QuadratureIntegrator, SimpsonIntegrator, RombergIntegrator,
    MatrixIntegrator

Function-based integration:
    integrate

Exceptions:
    QuadratureWarning, IntegrationError, EvaluationError
"""

from torchquadrature.integration._create_quadrature import create_quadrature
from torchquadrature.integration._double_exponential_rule_quadrature import (
    DoubleExponentialRuleQuadrature,
)
from torchquadrature.integration._exceptions import (
    EvaluationError,
    IntegrationError,
    QuadratureWarning,
)
from torchquadrature.integration._integrate import integrate
from torchquadrature.integration._integrator import Integrator, IntegratorState
from torchquadrature.integration._matrix_integrator import MatrixIntegrator
from torchquadrature.integration._mid_point_quadrature import (
    ExponentialMidPointQuadrature,
    InfinityMidPointQuadrature,
    LowerSquareRootMidPointQuadrature,
    MidPointQuadrature,
    UpperSquareRootMidPointQuadrature,
)
from torchquadrature.integration._polynomial_extrapolation import (
    polynomial_extrapolation,
)
from torchquadrature.integration._quadrature import Quadrature
from torchquadrature.integration._quadrature_integrator import (
    QuadratureIntegrator,
)
from torchquadrature.integration._romberg_integrator import RombergIntegrator
from torchquadrature.integration._simpson_integrator import SimpsonIntegrator
from torchquadrature.integration._trapezoidal_quadrature import (
    TrapezoidalQuadrature,
)
from torchquadrature.integration._types import IntegratorType, QuadratureType

__all__ = [
    # Types
    "QuadratureType",
    "IntegratorType",
    "IntegratorState",
    # Rules
    "Quadrature",
    "TrapezoidalQuadrature",
    "MidPointQuadrature",
    "InfinityMidPointQuadrature",
    "LowerSquareRootMidPointQuadrature",
    "UpperSquareRootMidPointQuadrature",
    "ExponentialMidPointQuadrature",
    "DoubleExponentialRuleQuadrature",
    "create_quadrature",
    # Integrators
    "Integrator",
    "QuadratureIntegrator",
    "SimpsonIntegrator",
    "RombergIntegrator",
    "MatrixIntegrator",
    # Function-based
    "integrate",
    "polynomial_extrapolation",
    # Exceptions
    "QuadratureWarning",
    "IntegrationError",
    "EvaluationError",
]
