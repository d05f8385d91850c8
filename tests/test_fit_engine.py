import dataclasses

import numpy as np
import pytest

from photopeak_fit import (
    BoundsInfeasibleError, InsufficientDataError, SolverError, SolverOptions,
    build_model, levenberg_marquardt,
)
from photopeak_fit.analysis.fit_engine import numerical_jacobian, resolve_bounds


def linear(x, p):
    return p[0] + p[1] * x


def test_numerical_jacobian_matches_analytic():
    f = build_model("gaussian", 1)
    x = np.linspace(985, 991, 13)
    p = np.array([600.0, 0.05, 1000.0, 988.0, 0.8])
    lb, ub = resolve_bounds(None, None, 5)
    J = numerical_jacobian(f, x, p, lb, ub, 6e-6)

    g = 1000.0 / np.sqrt(2 * np.pi * 0.64) * np.exp(-0.5 * (x - 988.0)**2 / 0.64)
    expected = np.column_stack([
        np.ones_like(x),
        x,
        g / 1000.0,
        g * (x - 988.0) / 0.64,
        g * ((x - 988.0)**2 / 0.8**3 - 1 / 0.8),
    ])
    np.testing.assert_allclose(J, expected, rtol=1e-3, atol=1e-2)


def test_numerical_jacobian_one_sided_at_bounds():
    x = np.linspace(0, 10, 11)
    p = np.array([1.0, 2.0])
    lb = np.array([1.0, -np.inf])
    ub = np.array([np.inf, 2.0])
    calls = []

    def recording(x, q):
        calls.append(q.copy())
        return linear(x, q)

    J = numerical_jacobian(recording, x, p, lb, ub, 1e-6)
    np.testing.assert_allclose(J, np.column_stack([np.ones_like(x), x]), rtol=1e-6)
    probes = np.array(calls[1:])
    assert np.all(probes[:, 0] >= 1.0)
    assert np.all(probes[:, 1] <= 2.0)


def test_linear_model_matches_polyfit():
    rng = np.random.default_rng(3)
    x = np.linspace(0, 20, 41)
    y = 3.0 - 0.4 * x + rng.normal(0, 0.5, x.size)
    result = levenberg_marquardt(linear, x, y, [0.0, 0.0])
    slope, intercept = np.polyfit(x, y, 1)
    np.testing.assert_allclose(result.params, [intercept, slope], rtol=1e-5)
    assert [f.name for f in dataclasses.fields(result)] == ["params", "jacobian", "residuals", "ssr", "iterations"]
    assert result.iterations >= 1
    assert result.jacobian.shape == (41, 2)
    np.testing.assert_allclose(result.residuals, y - linear(x, result.params))
    assert result.ssr == pytest.approx(float(result.residuals @ result.residuals))


def test_bounds_clamp_solution():
    x = np.linspace(0, 10, 21)
    y = 1.0 + 2.0 * x
    result = levenberg_marquardt(linear, x, y, [0.0, 0.0], [-10.0, 0.0], [10.0, 1.5])
    assert result.params[1] == pytest.approx(1.5)
    assert -10.0 <= result.params[0] <= 10.0
    # best intercept for a slope pinned at 1.5
    assert result.params[0] == pytest.approx(1.0 + 0.5 * x.mean(), rel=1e-6)


def test_initial_parameters_outside_bounds_are_projected():
    x = np.linspace(0, 10, 21)
    y = 1.0 + 2.0 * x
    result = levenberg_marquardt(linear, x, y, [50.0, -5.0], [-10.0, 0.0], [10.0, 5.0])
    np.testing.assert_allclose(result.params, [1.0, 2.0], rtol=1e-6)


def test_infeasible_bounds():
    x = np.linspace(0, 10, 21)
    with pytest.raises(BoundsInfeasibleError):
        levenberg_marquardt(linear, x, x, [0.0, 0.0], [0.0, 2.0], [1.0, 1.0])


@pytest.mark.parametrize("n_points", [0, 1])
def test_fewer_points_than_parameters(n_points):
    x = np.arange(float(n_points))
    with pytest.raises(InsufficientDataError):
        levenberg_marquardt(linear, x, x, [0.0, 0.0])


def test_insufficient_data_is_a_solver_error():
    assert issubclass(InsufficientDataError, SolverError)


def test_iteration_budget_exhausted():
    f = build_model("gaussian", 1)
    x = np.arange(970.0, 1010.0, 0.5)
    y = f(x, [600.0, 0.05, 1000.0, 988.0, 0.8])
    with pytest.raises(SolverError, match="did not converge"):
        levenberg_marquardt(f, x, y, [550.0, 0.0, 800.0, 987.5, 1.0],
                            options=SolverOptions(max_iter=1))


def test_non_finite_model_at_start():
    f = build_model("gaussian", 1)
    x = np.arange(980.0, 1000.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        with pytest.raises(SolverError):
            levenberg_marquardt(f, x, x, [600.0, 0.05, 1000.0, 988.0, 0.0])


def test_identity_damping_also_converges():
    x = np.linspace(0, 10, 21)
    y = 1.0 + 2.0 * x
    result = levenberg_marquardt(linear, x, y, [0.0, 0.0], options=SolverOptions(scale_diagonal=False))
    np.testing.assert_allclose(result.params, [1.0, 2.0], rtol=1e-6)


def test_solver_options_from_kwargs():
    assert SolverOptions.from_kwargs(max_iter=50).max_iter == 50
    with pytest.raises(TypeError):
        SolverOptions.from_kwargs(maxfev=50)
    with pytest.raises(ValueError):
        SolverOptions(lambda_decrease=2.0)
