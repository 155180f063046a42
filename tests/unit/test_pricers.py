"""
Tests for path-consuming pricers.

Tests correctness of:
- Running aggregates, discounting, standard error and confidence interval
- Once-only finalization and the empty-run boundary
- European, Asian and barrier payoffs on hand-built paths
- Brownian-bridge crossing probability
"""

import logging
import math

import numpy as np
import pytest

from sde_pricing.models.sde import GBMModel
from sde_pricing.pricers import (
    AsianPricer,
    AveragingMethod,
    BarrierPricer,
    BrownianBridgePricer,
    EuropeanPricer,
    PricingResult,
)
from sde_pricing.simulation.mediator import MCMediator
from sde_pricing.simulation.random_sources import BoxMullerSource, MersenneTwisterSource
from sde_pricing.simulation.schemes import EulerScheme, ExactScheme
from sde_pricing.simulation.time_grid import TimeGrid

STRIKE = 100.0
DF = 0.95


def call_payoff(spot: float) -> float:
    return max(spot - STRIKE, 0.0)


def discounter() -> float:
    return DF


def _path(*values: float) -> np.ndarray:
    path = np.array(values, dtype=float)
    path.flags.writeable = False
    return path


class TestAggregation:
    """[T1] price = DF mean(payoff), SE = DF s / √N."""

    def test_price_and_standard_error(self):
        pricer = EuropeanPricer(call_payoff, discounter)
        pricer.process_path(_path(100.0, 110.0))
        pricer.process_path(_path(100.0, 90.0))
        pricer.post_process()

        result = pricer.result
        assert result.price == pytest.approx(DF * 5.0)
        # payoffs 10 and 0: sample variance 50
        assert result.standard_error == pytest.approx(DF * math.sqrt(50.0 / 2.0))
        assert result.n_paths == 2
        assert result.discount_factor == DF
        assert result.confidence_interval[0] < result.price < result.confidence_interval[1]
        assert result.ci_width == pytest.approx(2 * 1.96 * result.standard_error)

    def test_running_sums(self):
        pricer = EuropeanPricer(call_payoff, discounter)
        for terminal in (103.0, 95.0, 120.0):
            pricer.process_path(_path(100.0, terminal))

        assert pricer.sum == pytest.approx(23.0)
        assert pricer.sum_sq == pytest.approx(9.0 + 400.0)
        assert pricer.n_paths == 3

    def test_single_path_has_undefined_error(self):
        pricer = EuropeanPricer(call_payoff, discounter)
        pricer.process_path(_path(100.0, 104.0))
        pricer.post_process()

        assert pricer.price == pytest.approx(DF * 4.0)
        assert math.isnan(pricer.result.standard_error)

    def test_relative_error(self):
        result = PricingResult(
            price=2.0, standard_error=0.1, confidence_interval=(1.8, 2.2), n_paths=10, discount_factor=1.0
        )
        assert result.relative_error == pytest.approx(0.05)

    def test_relative_error_zero_price(self):
        result = PricingResult(
            price=0.0, standard_error=0.0, confidence_interval=(0.0, 0.0), n_paths=10, discount_factor=1.0
        )
        assert result.relative_error == float("inf")


class TestFinalization:
    """Finalization happens exactly once; no path is accepted afterwards."""

    def test_price_nan_before_finalization(self):
        pricer = EuropeanPricer(call_payoff, discounter)
        pricer.process_path(_path(100.0, 110.0))
        assert math.isnan(pricer.price)
        assert not pricer.is_finalized

    def test_result_before_finalization_raises(self):
        with pytest.raises(RuntimeError, match="not finalized"):
            EuropeanPricer(call_payoff, discounter).result

    def test_double_finalization_raises(self):
        pricer = EuropeanPricer(call_payoff, discounter)
        pricer.post_process()
        with pytest.raises(RuntimeError, match="already finalized"):
            pricer.post_process()

    def test_path_after_finalization_raises(self):
        pricer = EuropeanPricer(call_payoff, discounter)
        pricer.post_process()
        with pytest.raises(RuntimeError, match="already finalized"):
            pricer.process_path(_path(100.0, 110.0))

    def test_empty_run_gives_nan(self, caplog):
        pricer = EuropeanPricer(call_payoff, discounter)
        with caplog.at_level(logging.WARNING, logger="sde_pricing.pricers.base"):
            pricer.post_process()

        assert pricer.is_finalized
        assert math.isnan(pricer.price)
        assert pricer.result.n_paths == 0
        assert "no paths" in caplog.text

    def test_price_logged(self, caplog):
        pricer = EuropeanPricer(call_payoff, discounter)
        pricer.process_path(_path(100.0, 110.0))
        with caplog.at_level(logging.INFO, logger="sde_pricing.pricers.base"):
            pricer.post_process()
        assert "Price, #Sims:" in caplog.text


class TestAttach:
    """attach() wires path and finish channels."""

    def test_attach_to_mediator(self, gbm_model):
        mediator = MCMediator(
            model=gbm_model,
            scheme=ExactScheme(gbm_model),
            source=BoxMullerSource(seed=3),
            n_simulations=40,
            grid=TimeGrid.from_model(gbm_model, 5),
        )
        pricer = EuropeanPricer(call_payoff, discounter)
        pricer.attach(mediator)
        mediator.run()

        assert pricer.is_finalized
        assert pricer.result.n_paths == 40

    def test_zero_simulation_run(self, gbm_model):
        mediator = MCMediator(
            model=gbm_model,
            scheme=ExactScheme(gbm_model),
            source=BoxMullerSource(seed=3),
            n_simulations=0,
            grid=TimeGrid.from_model(gbm_model, 5),
        )
        pricer = EuropeanPricer(call_payoff, discounter)
        pricer.attach(mediator)
        mediator.run()

        assert pricer.is_finalized
        assert math.isnan(pricer.price)


class TestAsianPricer:
    """[T1] Payoff of the average of all grid points."""

    def test_arithmetic(self):
        pricer = AsianPricer(call_payoff, discounter)
        assert pricer.path_payoff(_path(100.0, 110.0, 120.0)) == pytest.approx(10.0)

    def test_geometric(self):
        pricer = AsianPricer(call_payoff, discounter, averaging=AveragingMethod.GEOMETRIC)
        expected = (100.0 * 110.0 * 120.0) ** (1.0 / 3.0) - STRIKE
        assert pricer.path_payoff(_path(100.0, 110.0, 120.0)) == pytest.approx(expected)

    def test_geometric_below_arithmetic(self):
        """AM-GM: geometric average never exceeds arithmetic."""
        path = _path(100.0, 130.0, 85.0, 150.0)
        arithmetic = AsianPricer(call_payoff, discounter).path_payoff(path)
        geometric = AsianPricer(call_payoff, discounter, AveragingMethod.GEOMETRIC).path_payoff(path)
        assert geometric <= arithmetic

    def test_geometric_rejects_non_positive_path(self):
        pricer = AsianPricer(call_payoff, discounter, averaging=AveragingMethod.GEOMETRIC)
        with pytest.raises(ValueError, match="strictly positive"):
            pricer.path_payoff(_path(100.0, 0.0, 120.0))


class TestBarrierPricer:
    """Up-and-out, discrete monitoring."""

    def test_knock_out_pays_rebate(self):
        pricer = BarrierPricer(call_payoff, discounter, barrier=170.0, rebate=1.5)
        assert pricer.path_payoff(_path(100.0, 175.0, 120.0)) == 1.5
        assert pricer.n_knocked_out == 1

    def test_touching_barrier_knocks_out(self):
        pricer = BarrierPricer(call_payoff, discounter, barrier=170.0)
        assert pricer.is_knocked_out(_path(100.0, 170.0, 120.0))

    def test_surviving_path_pays_terminal_payoff(self):
        pricer = BarrierPricer(call_payoff, discounter, barrier=170.0)
        assert pricer.path_payoff(_path(100.0, 160.0, 120.0)) == pytest.approx(20.0)
        assert pricer.n_knocked_out == 0

    def test_knockout_rate(self):
        pricer = BarrierPricer(call_payoff, discounter, barrier=170.0)
        assert math.isnan(pricer.knockout_rate)
        pricer.process_path(_path(100.0, 180.0))
        pricer.process_path(_path(100.0, 120.0))
        assert pricer.knockout_rate == pytest.approx(0.5)

    def test_invalid_barrier(self):
        with pytest.raises(ValueError, match="barrier must be > 0"):
            BarrierPricer(call_payoff, discounter, barrier=0.0)


class TestBrownianBridgePricer:
    """[T1] P = exp(-2 (L - x0)(L - x1) / (σ_loc² dt))."""

    @pytest.fixture
    def grid(self, gbm_model):
        return TimeGrid.from_model(gbm_model, 4)

    def _pricer(self, model, grid, barrier=170.0, seed=1):
        return BrownianBridgePricer(
            call_payoff,
            discounter,
            model=model,
            grid=grid,
            barrier=barrier,
            uniform_source=MersenneTwisterSource(seed=seed),
        )

    def test_rejects_normal_source(self, gbm_model, grid):
        with pytest.raises(TypeError, match="needs uniform variates"):
            BrownianBridgePricer(
                call_payoff,
                discounter,
                model=gbm_model,
                grid=grid,
                barrier=170.0,
                uniform_source=BoxMullerSource(seed=1),
            )

    def test_crossing_probability(self, gbm_model, grid):
        pricer = self._pricer(gbm_model, grid)
        x0, x1 = 150.0, 160.0
        sigma_loc = 0.3 * x0
        expected = math.exp(-2.0 * (170.0 - x0) * (170.0 - x1) / (sigma_loc**2 * grid.step_size))
        assert pricer.crossing_probability(x0, x1, 0.0) == pytest.approx(expected)

    def test_crossing_probability_at_barrier_is_one(self, gbm_model, grid):
        pricer = self._pricer(gbm_model, grid)
        assert pricer.crossing_probability(170.0, 150.0, 0.0) == pytest.approx(1.0)

    def test_zero_volatility_never_bridges(self, zero_vol_model):
        grid = TimeGrid.from_model(zero_vol_model, 4)
        pricer = self._pricer(zero_vol_model, grid)
        assert pricer.crossing_probability(169.0, 169.5, 0.0) == 0.0
        assert not pricer.is_knocked_out(_path(100.0, 169.0, 169.5, 160.0, 150.0))

    def test_initial_point_checked(self, gbm_model, grid):
        pricer = self._pricer(gbm_model, grid)
        assert pricer.is_knocked_out(_path(175.0, 100.0, 100.0, 100.0, 100.0))

    def test_endpoint_breach(self, gbm_model, grid):
        pricer = self._pricer(gbm_model, grid)
        assert pricer.is_knocked_out(_path(100.0, 100.0, 171.0, 100.0, 100.0))
        assert pricer.n_bridge_crossings == 0

    def test_near_barrier_bridge_crossing(self, gbm_model, grid):
        """Both endpoints just below L: crossing probability is ~1."""
        pricer = self._pricer(gbm_model, grid)
        assert pricer.is_knocked_out(_path(100.0, 169.999, 169.999, 100.0, 100.0))
        assert pricer.n_bridge_crossings == 1

    def test_far_from_barrier_survives(self, gbm_model, grid):
        pricer = self._pricer(gbm_model, grid, barrier=1000.0)
        assert not pricer.is_knocked_out(_path(100.0, 101.0, 99.0, 100.0, 102.0))

    def test_superset_of_discrete_knockouts(self, gbm_model, grid):
        """Every discretely knocked-out path is also bridge knocked-out."""
        discrete = BarrierPricer(call_payoff, discounter, barrier=170.0)
        bridge = self._pricer(gbm_model, grid)
        rng = np.random.default_rng(0)
        for _ in range(200):
            path = _path(*(100.0 * np.exp(np.cumsum(np.r_[0.0, rng.normal(0.0, 0.3, 4)]))))
            if discrete.is_knocked_out(path):
                assert bridge.is_knocked_out(path)

    def test_label(self, gbm_model, grid):
        assert "bridge" in self._pricer(gbm_model, grid).label.lower()

    @pytest.mark.parametrize("n_points", [3, 11])
    def test_path_length_must_match_grid(self, gbm_model, grid, n_points):
        pricer = self._pricer(gbm_model, grid, barrier=1000.0)
        with pytest.raises(ValueError, match="path has .* points, grid has 5"):
            pricer.process_path(_path(*([100.0] * n_points)))
        assert pricer.n_paths == 0

    def test_attach_rejects_mismatched_grid(self, gbm_model, grid):
        mediator = MCMediator(
            model=gbm_model,
            scheme=EulerScheme(gbm_model),
            source=BoxMullerSource(seed=3),
            n_simulations=1,
            grid=TimeGrid.from_model(gbm_model, 10),
        )
        with pytest.raises(ValueError, match="does not match pricer grid"):
            self._pricer(gbm_model, grid).attach(mediator)

    def test_attach_rejects_mismatched_model(self, gbm_model, cev_model, grid):
        mediator = MCMediator(
            model=cev_model,
            scheme=EulerScheme(cev_model),
            source=BoxMullerSource(seed=3),
            n_simulations=1,
            grid=grid,
        )
        with pytest.raises(ValueError, match="model does not match"):
            self._pricer(gbm_model, grid).attach(mediator)

    def test_attach_matching_mediator(self, gbm_model, grid):
        mediator = MCMediator(
            model=gbm_model,
            scheme=EulerScheme(gbm_model),
            source=BoxMullerSource(seed=3),
            n_simulations=20,
            grid=grid,
        )
        pricer = self._pricer(gbm_model, grid, barrier=1000.0)
        pricer.attach(mediator)
        mediator.run()
        assert pricer.n_paths == 20
