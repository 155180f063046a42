"""
sde-pricing: Monte Carlo option pricing on discretized SDE paths.

Quick Start
-----------
>>> from sde_pricing import OptionData, EuropeanPricer, default_config, run_pricer
>>> option = OptionData(strike=65.0, expiry=0.25, rate=0.08, volatility=0.3)
>>> config = default_config(rate=0.08, volatility=0.3, dividend=0.0022,
...                         spot=100.0, expiry=0.25, seed=42)
>>> result = run_pricer(config, EuropeanPricer(option.payoff, option.discounter))

See Also
--------
- examples/01_european_call.py for a console run
- DESIGN.md for methodology

Version: 0.1.0
"""

__version__ = "0.1.0"

# =============================================================================
# Models
# =============================================================================
from sde_pricing.models import CEVModel, DiffusionDomainError, GBMModel, StochasticModel

# =============================================================================
# Pricers
# =============================================================================
from sde_pricing.pricers import (
    AsianPricer,
    AveragingMethod,
    BarrierPricer,
    BasePricer,
    BrownianBridgePricer,
    EuropeanPricer,
    PricingResult,
)

# =============================================================================
# Simulation
# =============================================================================
from sde_pricing.simulation import (
    BoxMullerSource,
    MCMediator,
    MersenneTwisterSource,
    ModelType,
    PolarMarsagliaSource,
    RngType,
    SchemeType,
    SimulationConfig,
    TimeGrid,
    build_mediator,
    default_config,
    run_pricer,
    strong_convergence_analysis,
)

# =============================================================================
# Options
# =============================================================================
from sde_pricing.options import (
    OptionData,
    OptionType,
    black_scholes_call,
    black_scholes_put,
    up_and_out_call,
)

# =============================================================================
# Configuration
# =============================================================================
from sde_pricing.config.settings import SETTINGS

__all__ = [
    "__version__",
    # Models
    "StochasticModel",
    "GBMModel",
    "CEVModel",
    "DiffusionDomainError",
    # Pricers
    "BasePricer",
    "PricingResult",
    "EuropeanPricer",
    "AsianPricer",
    "AveragingMethod",
    "BarrierPricer",
    "BrownianBridgePricer",
    # Simulation
    "TimeGrid",
    "BoxMullerSource",
    "PolarMarsagliaSource",
    "MersenneTwisterSource",
    "MCMediator",
    "ModelType",
    "SchemeType",
    "RngType",
    "SimulationConfig",
    "build_mediator",
    "default_config",
    "run_pricer",
    "strong_convergence_analysis",
    # Options
    "OptionType",
    "OptionData",
    "black_scholes_call",
    "black_scholes_put",
    "up_and_out_call",
    # Configuration
    "SETTINGS",
]
