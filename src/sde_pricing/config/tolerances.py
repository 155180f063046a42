"""
Tolerances for simulation and pricing checks, kept in one place.

Each value comes from float64 precision or from the CLT; none is tuned
to make a particular run pass.

Tiers:
    1. Closed form: deterministic formulas, float64 rounding only
    2. Scheme: deterministic discretization checks (zero-shock paths, grids)
    3. Stochastic: Monte Carlo estimates, in units of standard error

References:
    [T1] Higham (2002) "Accuracy and Stability of Numerical Algorithms", Ch. 3
    [T1] Kloeden & Platen (1992) "Numerical Solution of Stochastic Differential Equations"
    [T1] Glasserman (2003) Section 1.1.3 "Efficiency of Simulation Estimators"
"""

from typing import Final

import numpy as np

# =============================================================================
# Tier 1: Closed Form
# =============================================================================

#: Ordering and bound checks (barrier <= European, price >= 0)
#: Summing a few thousand payoffs in float64 stays well inside 1e-10
ANTI_PATTERN_TOLERANCE: Final[float] = 1e-10

#: [T1] C - P = S e^(-qT) - K e^(-rT) between the two closed forms
PUT_CALL_PARITY_TOLERANCE: Final[float] = 1e-8


# =============================================================================
# Tier 2: Scheme
# =============================================================================

#: Zero-variate paths must reproduce the drift-only recursion exactly,
#: up to float64 rounding of a few multiplications per step
ZERO_SHOCK_TOLERANCE: Final[float] = 1e-12

#: Time grid end point must land on the horizon
GRID_ENDPOINT_TOLERANCE: Final[float] = 1e-12

#: Estimated strong order of convergence vs theory (0.5 Euler, 1.0 Milstein)
#: Log-log slopes over four levels carry visible sampling noise
STRONG_ORDER_TOLERANCE: Final[float] = 0.25


# =============================================================================
# Tier 3: Stochastic
# =============================================================================

def mc_tolerance(n_paths: int, payoff_std: float = 0.20, n_std: float = 3.0) -> float:
    """
    Half-width of a CLT band around a Monte Carlo estimate.

    [T1] SE = s / √N, band = n_std * SE

    Parameters
    ----------
    n_paths : int
        Replications behind the estimate
    payoff_std : float, default 0.20
        Standard deviation of one (relative) payoff sample
    n_std : float, default 3.0
        Band width in standard errors (3 is about 99.7%)

    Returns
    -------
    float
        Allowed distance between estimate and reference

    Examples
    --------
    >>> mc_tolerance(10_000)
    0.006
    """
    return n_std * payoff_std / np.sqrt(n_paths)


#: Standard errors allowed between an estimate and its reference value
MC_Z_SCORE_LIMIT: Final[float] = 4.0

#: mc_tolerance(10_000) with the defaults
MC_10K_TOLERANCE: Final[float] = 0.006

#: Relative gap allowed between a simulated vanilla price and Black-Scholes
BS_MC_CONVERGENCE_TOLERANCE: Final[float] = 0.01


# =============================================================================
# Lookup by name
# =============================================================================

TOLERANCE_REGISTRY: dict[str, float] = {
    "anti_pattern": ANTI_PATTERN_TOLERANCE,
    "put_call_parity": PUT_CALL_PARITY_TOLERANCE,
    "zero_shock": ZERO_SHOCK_TOLERANCE,
    "grid_endpoint": GRID_ENDPOINT_TOLERANCE,
    "strong_order": STRONG_ORDER_TOLERANCE,
    "mc_z_score": MC_Z_SCORE_LIMIT,
    "mc_10k": MC_10K_TOLERANCE,
    "bs_mc_convergence": BS_MC_CONVERGENCE_TOLERANCE,
}


def get_tolerance(name: str) -> float:
    """
    Look up a tolerance in TOLERANCE_REGISTRY.

    Raises
    ------
    KeyError
        If `name` is not registered; the message lists the known names
    """
    try:
        return TOLERANCE_REGISTRY[name]
    except KeyError:
        known = ", ".join(sorted(TOLERANCE_REGISTRY))
        raise KeyError(f"Unknown tolerance '{name}'. Known: {known}") from None
