"""
Frozen configuration settings for path simulation.

All configuration is immutable (frozen dataclasses) to ensure reproducibility.
"""

import os
from dataclasses import dataclass

# =============================================================================
# Random Number Configuration
# =============================================================================

def _resolve_default_seed() -> int | None:
    """
    Resolve the default generator seed with environment variable override.

    Priority:
    1. SDE_PRICING_SEED environment variable (if set)
    2. Default: None (seed from OS entropy)

    Returns
    -------
    int or None
        Seed for reproducible runs, or None for an entropy-seeded engine
    """
    env_seed = os.environ.get("SDE_PRICING_SEED")
    if env_seed:
        return int(env_seed)
    return None


@dataclass(frozen=True)
class RandomConfig:
    """
    Immutable random-variate configuration.

    Attributes
    ----------
    default_seed : int, optional
        Seed applied when a source is built without one.
        Override with SDE_PRICING_SEED environment variable.
    polar_max_attempts : int
        Rejection attempts per draw before the polar method gives up.
        Acceptance probability is π/4, so 200 failures in a row has
        probability ~1e-134.
    """

    default_seed: int | None = None  # Set in __post_init__
    polar_max_attempts: int = 200

    def __post_init__(self) -> None:
        """Initialize default_seed using resolver function."""
        # Frozen dataclass workaround: use object.__setattr__
        if self.default_seed is None:
            object.__setattr__(self, "default_seed", _resolve_default_seed())


# =============================================================================
# Simulation Configuration
# =============================================================================

@dataclass(frozen=True)
class SimulationDefaults:
    """
    Immutable simulation defaults. [T3: Assumptions]

    Attributes
    ----------
    n_steps : int
        Time steps per path
    n_simulations : int
        Number of replications
    progress_interval : int
        Replications between progress notifications
    predictor_weight : float
        Default predictor-corrector drift weight A
    corrector_weight : float
        Default predictor-corrector diffusion weight B
    cev_elasticity : float
        Default CEV exponent β
    """

    n_steps: int = 100
    n_simulations: int = 10_000
    progress_interval: int = 100
    predictor_weight: float = 0.5
    corrector_weight: float = 0.5
    cev_elasticity: float = 0.5


# =============================================================================
# Barrier Configuration
# =============================================================================

@dataclass(frozen=True)
class BarrierDefaults:
    """
    Immutable barrier option defaults.

    Attributes
    ----------
    barrier : float
        Up-and-out barrier level
    rebate : float
        Amount paid on knock-out
    """

    barrier: float = 170.0
    rebate: float = 0.0


# =============================================================================
# Master Configuration
# =============================================================================

@dataclass(frozen=True)
class Settings:
    """
    Master frozen configuration combining all sub-configs.

    Usage
    -----
    >>> from sde_pricing.config.settings import SETTINGS
    >>> SETTINGS.simulation.progress_interval
    100
    """

    random: RandomConfig = RandomConfig()
    simulation: SimulationDefaults = SimulationDefaults()
    barrier: BarrierDefaults = BarrierDefaults()


# Singleton instance - import this
SETTINGS = Settings()
