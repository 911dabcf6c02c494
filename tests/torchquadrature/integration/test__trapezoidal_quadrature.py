import math

import pytest
import torch

from torchquadrature.integration import (
    EvaluationError,
    QuadratureType,
    TrapezoidalQuadrature,
)


class TestTrapezoidalQuadrature:
    def test_first_level_is_exact_for_linear(self):
        """Two-point trapezoid integrates 2x + 1 on [0, 2] exactly"""
        q = TrapezoidalQuadrature(lambda x: 2 * x + 1, 0.0, 2.0)

        result = q.next()

        torch.testing.assert_close(
            result, torch.tensor(6.0, dtype=torch.float64)
        )
        assert q.n == 1

    def test_second_level_adds_midpoint(self):
        """x^2 on [0, 1]: 0.5 then 0.375"""
        q = TrapezoidalQuadrature(lambda x: x**2, 0.0, 1.0)

        assert q.next().item() == pytest.approx(0.5)
        assert q.next().item() == pytest.approx(0.375)

    def test_only_new_points_are_evaluated(self):
        """Level k evaluates 2^(k-2) new points"""
        calls = []

        def f(x):
            calls.append(x.shape[0])
            return torch.sin(x)

        q = TrapezoidalQuadrature(f, 0.0, 1.0)
        for _ in range(6):
            q.next()

        assert calls == [2, 1, 2, 4, 8, 16]
        assert q.neval == 2**5 + 1

    def test_new_points_are_previous_midpoints(self):
        points = []

        def f(x):
            points.append(x.clone())
            return x

        q = TrapezoidalQuadrature(f, 0.0, 1.0)
        for _ in range(4):
            q.next()

        torch.testing.assert_close(
            points[3],
            torch.tensor([0.125, 0.375, 0.625, 0.875], dtype=torch.float64),
        )

    def test_converges_to_integral(self):
        """sin(x) from 0 to pi = 2.0"""
        q = TrapezoidalQuadrature(torch.sin, 0.0, math.pi)

        for _ in range(16):
            result = q.next()

        assert result.item() == pytest.approx(2.0, abs=1e-8)

    def test_reversed_bounds_change_sign(self):
        forward = TrapezoidalQuadrature(torch.exp, 0.0, 1.0)
        backward = TrapezoidalQuadrature(torch.exp, 1.0, 0.0)

        for _ in range(5):
            f_result = forward.next()
            b_result = backward.next()

        torch.testing.assert_close(f_result, -b_result)

    def test_abs_estimate(self):
        """|sin(x)| from -pi to pi = 4 while sin(x) cancels to 0"""
        q = TrapezoidalQuadrature(torch.sin, -math.pi, math.pi)

        for _ in range(16):
            result = q.next()

        assert abs(result.item()) < 1e-12
        assert q.s_abs.item() == pytest.approx(4.0, abs=1e-8)

    def test_type(self):
        q = TrapezoidalQuadrature(torch.sin, 0.0, 1.0)

        assert q.quadrature_type == QuadratureType.TRAPEZOIDAL
        assert q.step_ratio == 0.25


class TestTrapezoidalQuadratureValues:
    def test_vector_valued(self):
        """Each component is integrated independently"""
        q = TrapezoidalQuadrature(
            lambda x: torch.stack([x, 3 * torch.ones_like(x)], dim=-1),
            0.0,
            2.0,
            value_shape=(2,),
        )

        result = q.next()

        torch.testing.assert_close(
            result, torch.tensor([2.0, 6.0], dtype=torch.float64)
        )

    def test_scalar_result_is_broadcast(self):
        q = TrapezoidalQuadrature(lambda x: 3.0, 1.0, 2.0)

        assert q.next().item() == pytest.approx(3.0)

    @pytest.mark.parametrize("dtype", [torch.float32, torch.float64])
    def test_dtype_preserved(self, dtype):
        q = TrapezoidalQuadrature(torch.sin, 0.0, 1.0, dtype=dtype)

        assert q.next().dtype == dtype


class TestTrapezoidalQuadratureErrors:
    def test_degenerate_interval(self):
        with pytest.raises(ValueError, match="degenerate"):
            TrapezoidalQuadrature(torch.sin, 1.0, 1.0)

    def test_infinite_bound(self):
        with pytest.raises(ValueError, match="finite"):
            TrapezoidalQuadrature(torch.sin, 0.0, math.inf)

    def test_invalid_value_shape(self):
        with pytest.raises(ValueError, match="value_shape"):
            TrapezoidalQuadrature(torch.sin, 0.0, 1.0, value_shape=(0, 2))

    def test_wrong_shape_raises(self):
        q = TrapezoidalQuadrature(
            lambda x: torch.zeros(x.shape[0], 3), 0.0, 1.0, value_shape=(2,)
        )

        with pytest.raises(EvaluationError, match="shape"):
            q.next()

    def test_non_finite_raises(self):
        """log(x) * log(1 - x) is NaN at x = 0"""
        q = TrapezoidalQuadrature(
            lambda x: torch.log(x) * torch.log1p(-x), 0.0, 1.0
        )

        with pytest.raises(EvaluationError, match="non-finite"):
            q.next()
