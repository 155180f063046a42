"""
Single assembly point for simulation runs.

A SimulationConfig holds every choice a run needs (model, grid, scheme,
random source, replication count) fully resolved and validated. The
build_* functions turn it into the objects the mediator wires together;
nothing downstream asks questions or reads global state.

Examples
--------
>>> config = default_config(rate=0.08, volatility=0.3, dividend=0.0022,
...                         spot=100.0, expiry=0.25, n_simulations=10_000)
>>> option = OptionData(strike=65.0, expiry=0.25, rate=0.08, volatility=0.3)
>>> result = run_pricer(config, EuropeanPricer(option.payoff, option.discounter))
>>> result.price
"""

import logging
from dataclasses import dataclass
from enum import Enum

from sde_pricing.config.settings import SETTINGS
from sde_pricing.models.sde import CEVModel, GBMModel, StochasticModel
from sde_pricing.pricers.base import BasePricer, PricingResult
from sde_pricing.simulation.mediator import MCMediator, log_progress
from sde_pricing.simulation.random_sources import (
    BoxMullerSource,
    PolarMarsagliaSource,
    RandomSource,
)
from sde_pricing.simulation.schemes import (
    DerivativeFreeScheme,
    DiscreteMilsteinScheme,
    DiscretizationScheme,
    EulerScheme,
    ExactScheme,
    FittedMidpointPredictorCorrectorScheme,
    FRKIScheme,
    Heun2Scheme,
    HeunScheme,
    MidpointPredictorCorrectorScheme,
    MilsteinScheme,
    ModifiedPredictorCorrectorScheme,
    PlatenScheme,
    PredictorCorrectorScheme,
    WeightedScheme,
)
from sde_pricing.simulation.time_grid import TimeGrid

logger = logging.getLogger(__name__)


class ModelType(Enum):
    """Underlying model."""

    GBM = "gbm"
    CEV = "cev"


class SchemeType(Enum):
    """Discretization scheme. Values match the scheme classes' `name`."""

    EULER = "euler"
    MILSTEIN = "milstein"
    DISCRETE_MILSTEIN = "discrete_milstein"
    PREDICTOR_CORRECTOR = "predictor_corrector"
    MODIFIED_PREDICTOR_CORRECTOR = "modified_predictor_corrector"
    MIDPOINT_PREDICTOR_CORRECTOR = "midpoint_predictor_corrector"
    FITTED_MIDPOINT_PREDICTOR_CORRECTOR = "fitted_midpoint_predictor_corrector"
    EXACT = "exact"
    PLATEN = "platen"
    HEUN = "heun"
    HEUN2 = "heun2"
    DERIVATIVE_FREE = "derivative_free"
    FRKI = "frki"


class RngType(Enum):
    """Normal variate generator."""

    BOX_MULLER = "box_muller"
    POLAR_MARSAGLIA = "polar_marsaglia"


SCHEME_REGISTRY: dict[SchemeType, type[DiscretizationScheme]] = {
    SchemeType.EULER: EulerScheme,
    SchemeType.MILSTEIN: MilsteinScheme,
    SchemeType.DISCRETE_MILSTEIN: DiscreteMilsteinScheme,
    SchemeType.PREDICTOR_CORRECTOR: PredictorCorrectorScheme,
    SchemeType.MODIFIED_PREDICTOR_CORRECTOR: ModifiedPredictorCorrectorScheme,
    SchemeType.MIDPOINT_PREDICTOR_CORRECTOR: MidpointPredictorCorrectorScheme,
    SchemeType.FITTED_MIDPOINT_PREDICTOR_CORRECTOR: FittedMidpointPredictorCorrectorScheme,
    SchemeType.EXACT: ExactScheme,
    SchemeType.PLATEN: PlatenScheme,
    SchemeType.HEUN: HeunScheme,
    SchemeType.HEUN2: Heun2Scheme,
    SchemeType.DERIVATIVE_FREE: DerivativeFreeScheme,
    SchemeType.FRKI: FRKIScheme,
}

SOURCE_REGISTRY: dict[RngType, type[RandomSource]] = {
    RngType.BOX_MULLER: BoxMullerSource,
    RngType.POLAR_MARSAGLIA: PolarMarsagliaSource,
}


@dataclass(frozen=True)
class SimulationConfig:
    """
    Fully resolved simulation configuration.

    Attributes
    ----------
    model_type : ModelType
        GBM or CEV
    drift : float
        Drift μ (the risk-free rate for risk-neutral pricing)
    volatility : float
        Volatility σ
    dividend : float
        Dividend yield q
    spot : float
        Initial value S0
    expiry : float
        Horizon T in years
    elasticity : float
        CEV exponent β (ignored for GBM)
    n_steps : int
        Time steps per path
    scheme_type : SchemeType
        Discretization scheme
    weight_a, weight_b : float
        Predictor-corrector weights in [0, 1] (ignored by other schemes)
    fitting_rate : float, optional
        Rate r of the fitted midpoint predictor; None uses the model's μ - q
    rng_type : RngType
        Normal variate generator
    n_simulations : int
        Number of replications (<= 0 runs none)
    seed : int, optional
        Engine seed; None spawns a child stream of SETTINGS.random.default_seed
    progress_interval : int
        Replications between progress notifications
    verbose : bool
        Subscribe the progress logger and log the assembled parts
    """

    model_type: ModelType
    drift: float
    volatility: float
    dividend: float
    spot: float
    expiry: float
    elasticity: float = SETTINGS.simulation.cev_elasticity
    n_steps: int = SETTINGS.simulation.n_steps
    scheme_type: SchemeType = SchemeType.EULER
    weight_a: float = SETTINGS.simulation.predictor_weight
    weight_b: float = SETTINGS.simulation.corrector_weight
    fitting_rate: float | None = None
    rng_type: RngType = RngType.BOX_MULLER
    n_simulations: int = SETTINGS.simulation.n_simulations
    seed: int | None = None
    progress_interval: int = SETTINGS.simulation.progress_interval
    verbose: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.spot <= 0:
            raise ValueError(f"CRITICAL: spot must be > 0, got {self.spot}")
        if self.expiry <= 0:
            raise ValueError(f"CRITICAL: expiry must be > 0, got {self.expiry}")
        if self.volatility < 0:
            raise ValueError(f"CRITICAL: volatility must be >= 0, got {self.volatility}")
        if self.n_steps < 1:
            raise ValueError(f"CRITICAL: n_steps must be >= 1, got {self.n_steps}")
        if not 0.0 <= self.weight_a <= 1.0 or not 0.0 <= self.weight_b <= 1.0:
            raise ValueError(
                f"CRITICAL: scheme weights must be in [0, 1], "
                f"got a={self.weight_a}, b={self.weight_b}"
            )
        if self.progress_interval < 0:
            raise ValueError(
                f"CRITICAL: progress_interval must be >= 0, got {self.progress_interval}"
            )
        if self.model_type == ModelType.CEV and self.scheme_type == SchemeType.EXACT:
            raise ValueError("CRITICAL: exact scheme is only available for the GBM model")


def build_model(config: SimulationConfig) -> StochasticModel:
    """Build the model described by the configuration."""
    params = dict(
        drift_coeff=config.drift,
        diffusion_coeff=config.volatility,
        dividend=config.dividend,
        initial_value=config.spot,
        horizon=config.expiry,
    )
    if config.model_type == ModelType.CEV:
        return CEVModel(**params, elasticity=config.elasticity)
    return GBMModel(**params)


def build_grid(config: SimulationConfig) -> TimeGrid:
    """Build the uniform grid over [0, expiry]."""
    return TimeGrid(horizon=config.expiry, n_steps=config.n_steps)


def build_scheme(config: SimulationConfig, model: StochasticModel) -> DiscretizationScheme:
    """
    Build the configured scheme bound to `model`.

    Predictor-corrector schemes receive the configured weights, and the
    fitted midpoint scheme also receives the fitting rate.
    """
    scheme_cls = SCHEME_REGISTRY[config.scheme_type]
    if scheme_cls is FittedMidpointPredictorCorrectorScheme:
        return scheme_cls(
            model, a=config.weight_a, b=config.weight_b, fitting_rate=config.fitting_rate
        )
    if issubclass(scheme_cls, WeightedScheme):
        return scheme_cls(model, a=config.weight_a, b=config.weight_b)
    return scheme_cls(model)


def build_source(config: SimulationConfig) -> RandomSource:
    """Build the configured normal variate source."""
    return SOURCE_REGISTRY[config.rng_type](seed=config.seed)


def build_mediator(config: SimulationConfig) -> MCMediator:
    """
    Assemble model, grid, scheme and source into a mediator.

    When `config.verbose` is set, progress notifications are logged.
    """
    model = build_model(config)
    grid = build_grid(config)
    scheme = build_scheme(config, model)
    source = build_source(config)

    mediator = MCMediator(
        model=model,
        scheme=scheme,
        source=source,
        n_simulations=config.n_simulations,
        grid=grid,
        progress_interval=config.progress_interval,
    )

    if config.verbose:
        mediator.on_progress(log_progress)
        logger.info(
            f"Assembled {type(model).__name__} / {scheme!r} / {source!r}, "
            f"{config.n_simulations} paths x {grid.n_steps} steps"
        )

    return mediator


def default_config(
    rate: float,
    volatility: float,
    dividend: float,
    spot: float,
    expiry: float,
    n_steps: int = SETTINGS.simulation.n_steps,
    n_simulations: int = SETTINGS.simulation.n_simulations,
    seed: int | None = None,
    verbose: bool = False,
) -> SimulationConfig:
    """
    Preset configuration: GBM model, Euler scheme, Box-Muller normals.

    Parameters
    ----------
    rate : float
        Risk-neutral drift r
    volatility : float
        Volatility σ
    dividend : float
        Dividend yield q
    spot : float
        Initial value S0
    expiry : float
        Horizon T in years
    n_steps, n_simulations : int
        Grid size and replication count
    seed : int, optional
        Engine seed
    verbose : bool
        Log progress and assembly

    Returns
    -------
    SimulationConfig
    """
    return SimulationConfig(
        model_type=ModelType.GBM,
        drift=rate,
        volatility=volatility,
        dividend=dividend,
        spot=spot,
        expiry=expiry,
        n_steps=n_steps,
        scheme_type=SchemeType.EULER,
        rng_type=RngType.BOX_MULLER,
        n_simulations=n_simulations,
        seed=seed,
        verbose=verbose,
    )


def run_pricer(config: SimulationConfig, pricer: BasePricer) -> PricingResult:
    """
    Build a mediator, attach the pricer, run and return its result.

    Parameters
    ----------
    config : SimulationConfig
        Run configuration
    pricer : BasePricer
        Fresh (not yet finalized) pricer

    Returns
    -------
    PricingResult
        Price, standard error and confidence interval
    """
    mediator = build_mediator(config)
    pricer.attach(mediator)
    mediator.run()
    return pricer.result
