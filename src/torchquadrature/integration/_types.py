"""Enumerations of quadrature rules and integration strategies."""

import enum


class QuadratureType(enum.Enum):
    """Substitution rule applied by a quadrature."""

    TRAPEZOIDAL = "trapezoidal"
    MID_POINT = "mid_point"
    # x = 1 / t, for intervals not containing the origin (a * b > 0)
    INFINITY_MID_POINT = "infinity_mid_point"
    # x = a + t^2, removes an inverse square root singularity at a
    LOWER_SQUARE_ROOT_MID_POINT = "lower_square_root_mid_point"
    # x = b - t^2, removes an inverse square root singularity at b
    UPPER_SQUARE_ROOT_MID_POINT = "upper_square_root_mid_point"
    # x = -log(t), for [a, inf) with exponentially decaying integrands
    EXPONENTIAL_MID_POINT = "exponential_mid_point"
    # tanh-sinh substitution
    DOUBLE_EXPONENTIAL_RULE = "double_exponential_rule"


class IntegratorType(enum.Enum):
    """Strategy used to drive a quadrature to convergence."""

    QUADRATURE = "quadrature"
    SIMPSON = "simpson"
    ROMBERG = "romberg"
