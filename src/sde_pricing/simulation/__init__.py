"""
Monte Carlo path simulation.

Provides:
- Uniform time grid
- Random-variate sources (polar Marsaglia, Box-Muller, Mersenne Twister uniform)
- Mediator streaming paths to subscribed pricers
- Builder assembling a run from a SimulationConfig
- Strong-order and terminal-moment diagnostics

Discretization schemes live in sde_pricing.simulation.schemes.
"""

from sde_pricing.simulation.time_grid import TimeGrid
from sde_pricing.simulation.random_sources import (
    BoxMullerSource,
    Distribution,
    GeneratorExhaustedError,
    MersenneTwisterSource,
    PolarMarsagliaSource,
    RandomSource,
)
from sde_pricing.simulation.mediator import (
    MCMediator,
    SimulationError,
    SimulationSummary,
    log_progress,
)
from sde_pricing.simulation.builder import (
    ModelType,
    RngType,
    SchemeType,
    SimulationConfig,
    build_grid,
    build_mediator,
    build_model,
    build_scheme,
    build_source,
    default_config,
    run_pricer,
)
from sde_pricing.simulation.convergence import (
    StrongConvergenceResult,
    strong_convergence_analysis,
    validate_terminal_mean,
)

__all__ = [
    # Grid
    "TimeGrid",
    # Random sources
    "RandomSource",
    "Distribution",
    "PolarMarsagliaSource",
    "BoxMullerSource",
    "MersenneTwisterSource",
    "GeneratorExhaustedError",
    # Mediator
    "MCMediator",
    "SimulationSummary",
    "SimulationError",
    "log_progress",
    # Builder
    "ModelType",
    "SchemeType",
    "RngType",
    "SimulationConfig",
    "build_model",
    "build_grid",
    "build_scheme",
    "build_source",
    "build_mediator",
    "default_config",
    "run_pricer",
    # Diagnostics
    "StrongConvergenceResult",
    "strong_convergence_analysis",
    "validate_terminal_mean",
]
