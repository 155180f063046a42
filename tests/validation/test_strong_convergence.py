"""
Validation: strong order of convergence against the exact GBM solution.

[T1] Euler: strong order 0.5; Milstein: strong order 1.0
     (Kloeden & Platen 1992, Theorems 10.2.2 and 10.3.5)

Errors are measured on nested Brownian increments, so each refinement
level is compared against the same exact terminal values.
"""

import numpy as np
import pandas as pd
import pytest

from sde_pricing.models.sde import CEVModel, GBMModel
from sde_pricing.simulation.builder import SchemeType
from sde_pricing.simulation.convergence import strong_convergence_analysis
from sde_pricing.simulation.schemes import MilsteinScheme

pytestmark = [pytest.mark.validation, pytest.mark.slow]

STEP_COUNTS = [8, 16, 32, 64]
N_PATHS = 2000


@pytest.fixture(scope="module")
def volatile_model() -> GBMModel:
    """High volatility makes the order gap visible on coarse grids."""
    return GBMModel(
        drift_coeff=0.05, diffusion_coeff=0.5, dividend=0.0, initial_value=100.0, horizon=1.0
    )


@pytest.fixture(scope="module")
def euler_result(volatile_model):
    return strong_convergence_analysis(volatile_model, SchemeType.EULER, STEP_COUNTS, N_PATHS, seed=42)


@pytest.fixture(scope="module")
def milstein_result(volatile_model):
    return strong_convergence_analysis(volatile_model, SchemeType.MILSTEIN, STEP_COUNTS, N_PATHS, seed=42)


class TestStrongOrder:
    def test_euler_half_order(self, euler_result, tolerances):
        assert abs(euler_result.order - 0.5) < tolerances.strong_order, euler_result.to_dataframe()

    def test_milstein_first_order(self, milstein_result, tolerances):
        assert abs(milstein_result.order - 1.0) < tolerances.strong_order, milstein_result.to_dataframe()

    def test_milstein_roughly_twice_euler(self, euler_result, milstein_result):
        assert milstein_result.order > euler_result.order + 0.25

    def test_milstein_more_accurate_at_every_level(self, euler_result, milstein_result):
        assert all(m < e for m, e in zip(milstein_result.errors, euler_result.errors))

    def test_errors_decrease(self, milstein_result):
        errors = np.array(milstein_result.errors)
        assert np.all(np.diff(errors) < 0)

    def test_exact_scheme_has_no_strong_error(self, volatile_model):
        result = strong_convergence_analysis(volatile_model, SchemeType.EXACT, [4, 8], n_paths=200)
        assert max(result.errors) < 1e-9


class TestStrongConvergenceResult:
    def test_to_dataframe(self, euler_result):
        df = euler_result.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["n_steps", "dt", "strong_error"]
        assert df["n_steps"].tolist() == STEP_COUNTS
        assert df["dt"].iloc[0] == pytest.approx(1.0 / 8)

    def test_metadata(self, euler_result):
        assert euler_result.scheme_name == "euler"
        assert euler_result.n_paths == N_PATHS

    def test_accepts_bound_scheme(self, volatile_model):
        result = strong_convergence_analysis(volatile_model, MilsteinScheme(volatile_model), [2, 4], n_paths=50)
        assert result.scheme_name == "milstein"


class TestInputValidation:
    def test_rejects_cev(self):
        model = CEVModel(
            drift_coeff=0.05, diffusion_coeff=0.3, dividend=0.0, initial_value=100.0, horizon=1.0
        )
        with pytest.raises(TypeError, match="exact GBM solution"):
            strong_convergence_analysis(model, SchemeType.EULER)

    def test_rejects_non_nested_levels(self, volatile_model):
        with pytest.raises(ValueError, match="positive divisors"):
            strong_convergence_analysis(volatile_model, SchemeType.EULER, [3, 8], n_paths=10)

    def test_rejects_foreign_scheme(self, volatile_model):
        other = GBMModel(
            drift_coeff=0.01, diffusion_coeff=0.1, dividend=0.0, initial_value=50.0, horizon=1.0
        )
        with pytest.raises(ValueError, match="different model"):
            strong_convergence_analysis(volatile_model, MilsteinScheme(other), [2, 4], n_paths=10)
