import math

import pytest
import torch

from torchquadrature.integration import (
    EvaluationError,
    IntegrationError,
    Integrator,
    IntegratorState,
    IntegratorType,
    MatrixIntegrator,
    QuadratureType,
)


def _rotation_generator(w):
    return torch.tensor([[0.0, w], [-w, 0.0]], dtype=torch.float64)


def _expected(A, a, b):
    """Integral of expm(A t) from a to b for invertible A"""
    return torch.linalg.solve(
        A, torch.matrix_exp(A * b) - torch.matrix_exp(A * a)
    )


class TestMatrixIntegrator:
    @pytest.mark.parametrize(
        "integrator_type,quadrature_type",
        [
            (IntegratorType.ROMBERG, QuadratureType.TRAPEZOIDAL),
            (IntegratorType.ROMBERG, QuadratureType.MID_POINT),
            (IntegratorType.ROMBERG, QuadratureType.DOUBLE_EXPONENTIAL_RULE),
            (IntegratorType.SIMPSON, QuadratureType.TRAPEZOIDAL),
            (IntegratorType.QUADRATURE, QuadratureType.DOUBLE_EXPONENTIAL_RULE),
        ],
    )
    def test_matrix_exponential(self, integrator_type, quadrature_type):
        A = _rotation_generator(1.5)
        integrator = MatrixIntegrator.create(
            0.0,
            2.0,
            lambda t: torch.matrix_exp(A * t[:, None, None]),
            2,
            2,
            integrator_type=integrator_type,
            quadrature_type=quadrature_type,
        )

        result = integrator.integrate()

        torch.testing.assert_close(
            result, _expected(A, 0.0, 2.0), rtol=1e-7, atol=1e-7
        )

    def test_result_is_filled_in_place(self):
        A = _rotation_generator(0.5)
        integrator = MatrixIntegrator.create(
            1.0, 3.0, lambda t: torch.matrix_exp(A * t[:, None, None]), 2, 2
        )
        result = torch.empty(2, 2, dtype=torch.float64)

        returned = integrator.integrate(result)

        assert returned is result
        torch.testing.assert_close(
            result, _expected(A, 1.0, 3.0), rtol=1e-7, atol=1e-7
        )

    def test_rectangular(self):
        """Entry (i, j) of the integrand is (i + 1) * x^j"""

        def f(x):
            powers = torch.stack([torch.ones_like(x), x, x**2], dim=-1)
            return torch.stack([powers, 2 * powers], dim=1)

        result = MatrixIntegrator.create(0.0, 3.0, f, 2, 3).integrate()

        torch.testing.assert_close(
            result,
            torch.tensor(
                [[3.0, 4.5, 9.0], [6.0, 9.0, 18.0]], dtype=torch.float64
            ),
        )

    def test_one_by_one_log_log(self):
        integrator = MatrixIntegrator.create(
            0.0,
            1.0,
            lambda x: (torch.log(x) * torch.log1p(-x)).reshape(-1, 1, 1),
            1,
            1,
            quadrature_type=QuadratureType.DOUBLE_EXPONENTIAL_RULE,
        )
        result = torch.zeros(1, 1, dtype=torch.float64)

        integrator.integrate(result)

        assert result.item() == pytest.approx(2.0 - math.pi**2 / 6.0, abs=1e-8)

    def test_properties(self):
        integrator = MatrixIntegrator.create(
            0.0,
            1.0,
            lambda x: torch.zeros(x.shape[0], 2, 3),
            2,
            3,
            integrator_type="simpson",
            quadrature_type="mid_point",
        )

        assert integrator.rows == 2
        assert integrator.columns == 3
        assert integrator.integrator_type == IntegratorType.SIMPSON
        assert integrator.quadrature_type == QuadratureType.MID_POINT

    def test_wraps_existing_integrator(self):
        integrator = Integrator.create(
            0.0, 1.0, lambda x: torch.ones(x.shape[0], 2, 2), value_shape=(2, 2)
        )

        result = MatrixIntegrator(integrator).integrate()

        torch.testing.assert_close(
            result, torch.ones(2, 2, dtype=torch.float64)
        )


class TestMatrixIntegratorErrors:
    @pytest.mark.parametrize("rows,columns", [(0, 2), (2, 0), (-1, 1)])
    def test_invalid_dimensions(self, rows, columns):
        with pytest.raises(ValueError, match="positive"):
            MatrixIntegrator.create(
                0.0, 1.0, torch.exp, rows, columns
            )

    def test_result_shape_checked_before_integrating(self):
        integrator = MatrixIntegrator.create(
            0.0, 1.0, lambda x: torch.ones(x.shape[0], 2, 2), 2, 2
        )

        with pytest.raises(ValueError, match="shape"):
            integrator.integrate(torch.empty(3, 2, dtype=torch.float64))
        assert integrator.integrator.state == IntegratorState.INITIALIZED

    def test_requires_matrix_value_shape(self):
        integrator = Integrator.create(0.0, 1.0, torch.exp)

        with pytest.raises(ValueError, match="matrices"):
            MatrixIntegrator(integrator)

    def test_wrong_integrand_shape(self):
        integrator = MatrixIntegrator.create(
            0.0, 1.0, lambda x: torch.ones(x.shape[0], 2, 2), 2, 3
        )

        with pytest.raises(IntegrationError) as excinfo:
            integrator.integrate()
        assert isinstance(excinfo.value.__cause__, EvaluationError)

    @pytest.mark.parametrize("integrator_type", ["quadrature", "simpson"])
    def test_exponential_mid_point_requires_romberg(self, integrator_type):
        with pytest.raises(ValueError, match="not supported"):
            MatrixIntegrator.create(
                0.0,
                math.inf,
                lambda x: torch.exp(-x)[:, None, None],
                1,
                1,
                integrator_type=integrator_type,
                quadrature_type="exponential_mid_point",
            )
