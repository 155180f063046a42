"""
Centralized pytest fixtures for sde-pricing test suite.

This module provides shared fixtures used across all test categories:
- anti_patterns/
- unit/
- validation/
- properties/

Fixture Categories:
1. Tolerance Tiers - Deterministic vs stochastic precision
2. Market Parameters - The classic European call test case
3. Models and Grids - Bound GBM / CEV models, uniform grids
4. Collectors - Subscribers recording mediator channel traffic
"""

from dataclasses import dataclass

import numpy as np
import pytest

from sde_pricing.config.tolerances import (
    ANTI_PATTERN_TOLERANCE,
    MC_Z_SCORE_LIMIT,
    STRONG_ORDER_TOLERANCE,
    ZERO_SHOCK_TOLERANCE,
)
from sde_pricing.models.sde import CEVModel, GBMModel
from sde_pricing.options.payoffs import OptionData, OptionType
from sde_pricing.simulation.time_grid import TimeGrid

# =============================================================================
# TOLERANCE TIERS
# =============================================================================

@dataclass(frozen=True)
class ToleranceTiers:
    """
    Tiered tolerance framework for different test types.

    Derived from precision requirements, not ad hoc.
    See: sde_pricing.config.tolerances
    """

    # Anti-pattern tests: Very tight (fundamental violations)
    anti_pattern: float = ANTI_PATTERN_TOLERANCE

    # Deterministic scheme checks (zero-variate paths)
    zero_shock: float = ZERO_SHOCK_TOLERANCE

    # Strong order slope vs theory
    strong_order: float = STRONG_ORDER_TOLERANCE

    # Monte Carlo vs analytical: number of standard errors
    mc_z_score: float = MC_Z_SCORE_LIMIT


TOLERANCES = ToleranceTiers()


@pytest.fixture(scope="session")
def tolerances() -> ToleranceTiers:
    """Provide tiered tolerance settings for all tests."""
    return TOLERANCES


# =============================================================================
# MARKET PARAMETERS
# =============================================================================

@dataclass(frozen=True)
class MarketParams:
    """
    Classic European call test case.

    K = 65, T = 0.25, r = 0.08, σ = 0.3, q = 0.0022, S0 = 100
    """

    spot: float = 100.0
    strike: float = 65.0
    rate: float = 0.08
    dividend: float = 0.0022
    volatility: float = 0.30
    time_to_expiry: float = 0.25


@pytest.fixture
def market_params() -> MarketParams:
    """Classic deep in-the-money call parameters."""
    return MarketParams()


@pytest.fixture
def call_option(market_params: MarketParams) -> OptionData:
    """European call matching market_params."""
    return OptionData(
        strike=market_params.strike,
        expiry=market_params.time_to_expiry,
        rate=market_params.rate,
        volatility=market_params.volatility,
        dividend=market_params.dividend,
        option_type=OptionType.CALL,
    )


# =============================================================================
# MODELS AND GRIDS
# =============================================================================

@pytest.fixture
def gbm_model(market_params: MarketParams) -> GBMModel:
    """Risk-neutral GBM model for market_params."""
    return GBMModel(
        drift_coeff=market_params.rate,
        diffusion_coeff=market_params.volatility,
        dividend=market_params.dividend,
        initial_value=market_params.spot,
        horizon=market_params.time_to_expiry,
    )


@pytest.fixture
def cev_model(market_params: MarketParams) -> CEVModel:
    """Risk-neutral CEV model (β = 0.5) for market_params."""
    return CEVModel(
        drift_coeff=market_params.rate,
        diffusion_coeff=market_params.volatility,
        dividend=market_params.dividend,
        initial_value=market_params.spot,
        horizon=market_params.time_to_expiry,
        elasticity=0.5,
    )


@pytest.fixture
def zero_vol_model(market_params: MarketParams) -> GBMModel:
    """GBM with σ = 0: every scheme must reduce to a deterministic recursion."""
    return GBMModel(
        drift_coeff=market_params.rate,
        diffusion_coeff=0.0,
        dividend=market_params.dividend,
        initial_value=market_params.spot,
        horizon=market_params.time_to_expiry,
    )


@pytest.fixture
def small_grid(gbm_model: GBMModel) -> TimeGrid:
    """Ten-step grid over the model horizon."""
    return TimeGrid.from_model(gbm_model, n_steps=10)


# =============================================================================
# COLLECTORS
# =============================================================================

class ChannelRecorder:
    """Subscriber recording every mediator notification."""

    def __init__(self):
        self.paths: list[np.ndarray] = []
        self.finish_count = 0
        self.progress: list[int] = []

    def on_path(self, path: np.ndarray) -> None:
        self.paths.append(path)

    def on_finish(self) -> None:
        self.finish_count += 1

    def on_progress(self, index: int) -> None:
        self.progress.append(index)

    def subscribe(self, mediator) -> "ChannelRecorder":
        mediator.on_path(self.on_path)
        mediator.on_finish(self.on_finish)
        mediator.on_progress(self.on_progress)
        return self


@pytest.fixture
def recorder() -> ChannelRecorder:
    """Fresh channel recorder."""
    return ChannelRecorder()
