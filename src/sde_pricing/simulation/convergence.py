"""
Convergence diagnostics for discretization schemes.

[T1] Strong order p:  E|X_N - S(T)| ~ C dt^p
     Euler: p = 0.5, Milstein: p = 1.0 (Kloeden & Platen 1992, Ch. 10)

Strong errors are measured on nested Brownian increments: one set of
fine-grid normals per path, aggregated into coarser increments, so every
level is compared against the same exact terminal value.

See: Glasserman (2003) Section 6.1.1 "Strong and weak convergence"
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from sde_pricing.config.tolerances import MC_Z_SCORE_LIMIT
from sde_pricing.models.sde import GBMModel, StochasticModel
from sde_pricing.simulation.builder import (
    SCHEME_REGISTRY,
    SchemeType,
    SimulationConfig,
    build_mediator,
)
from sde_pricing.simulation.schemes.base import DiscretizationScheme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrongConvergenceResult:
    """
    Strong error per refinement level.

    Attributes
    ----------
    scheme_name : str
        Scheme under test
    step_counts : tuple[int, ...]
        Steps per path at each level
    step_sizes : tuple[float, ...]
        dt at each level
    errors : tuple[float, ...]
        Mean absolute terminal error at each level
    order : float
        Estimated strong order (log-log slope of error against dt)
    n_paths : int
        Paths per level
    """

    scheme_name: str
    step_counts: tuple[int, ...]
    step_sizes: tuple[float, ...]
    errors: tuple[float, ...]
    order: float
    n_paths: int

    def to_dataframe(self) -> pd.DataFrame:
        """One row per level: n_steps, dt, strong_error."""
        return pd.DataFrame(
            {
                "n_steps": self.step_counts,
                "dt": self.step_sizes,
                "strong_error": self.errors,
            }
        )


def _resolve_scheme(
    model: StochasticModel, scheme: SchemeType | DiscretizationScheme
) -> DiscretizationScheme:
    if isinstance(scheme, DiscretizationScheme):
        if scheme.model != model:
            raise ValueError("CRITICAL: scheme is bound to a different model")
        return scheme
    return SCHEME_REGISTRY[scheme](model)


def strong_convergence_analysis(
    model: GBMModel,
    scheme: SchemeType | DiscretizationScheme,
    step_counts: tuple[int, ...] = (8, 16, 32, 64),
    n_paths: int = 2000,
    seed: int = 42,
) -> StrongConvergenceResult:
    """
    Measure strong error of a scheme against the exact GBM solution.

    [T1] S(T) = S0 exp((μ - q - σ²/2)T + σ W(T))

    Parameters
    ----------
    model : GBMModel
        Lognormal model (the exact solution is only known for GBM)
    scheme : SchemeType or DiscretizationScheme
        Scheme under test; a bound instance keeps its own weights
    step_counts : list[int]
        Refinement levels; each must divide the largest
    n_paths : int
        Paths per level
    seed : int
        Seed for the fine-grid normals

    Returns
    -------
    StrongConvergenceResult

    Raises
    ------
    TypeError
        If the model is not GBM
    ValueError
        If the levels are not nested
    """
    if not isinstance(model, GBMModel):
        raise TypeError(
            f"CRITICAL: strong error needs the exact GBM solution, got {type(model).__name__}"
        )
    if n_paths < 1:
        raise ValueError(f"CRITICAL: n_paths must be >= 1, got {n_paths}")

    levels = sorted(step_counts)
    n_fine = levels[-1]
    if levels[0] < 1 or any(n_fine % n != 0 for n in levels):
        raise ValueError(f"CRITICAL: step counts must be positive divisors of {n_fine}, got {levels}")

    stepper = _resolve_scheme(model, scheme)
    horizon = model.horizon
    sigma = model.diffusion_coeff

    rng = np.random.Generator(np.random.MT19937(seed))
    fine_normals = rng.standard_normal((n_paths, n_fine))

    brownian_terminal = fine_normals.sum(axis=1) * math.sqrt(horizon / n_fine)
    exact_terminal = model.initial_value * np.exp(
        (model.growth_rate - 0.5 * sigma**2) * horizon + sigma * brownian_terminal
    )

    step_sizes = []
    errors = []
    for n_steps in levels:
        block = n_fine // n_steps
        dt = horizon / n_steps
        # Sum of `block` fine normals, rescaled to a standard normal coarse increment
        coarse = fine_normals.reshape(n_paths, n_steps, block).sum(axis=2) / math.sqrt(block)

        terminal = np.empty(n_paths)
        for p in range(n_paths):
            x = model.initial_value
            z = coarse[p].tolist()
            for n in range(n_steps):
                x = stepper.advance(x, n * dt, dt, z[n])
            terminal[p] = x

        error = float(np.mean(np.abs(terminal - exact_terminal)))
        step_sizes.append(dt)
        errors.append(error)
        logger.debug(f"{stepper.name}: N={n_steps}, dt={dt:.6f}, strong error={error:.6e}")

    order = _estimate_convergence_rate(step_sizes, errors)
    logger.info(f"{stepper.name}: estimated strong order {order:.3f} over {levels}")

    return StrongConvergenceResult(
        scheme_name=stepper.name,
        step_counts=tuple(levels),
        step_sizes=tuple(step_sizes),
        errors=tuple(errors),
        order=order,
        n_paths=n_paths,
    )


def _estimate_convergence_rate(step_sizes: list[float], errors: list[float]) -> float:
    """
    Estimate convergence order from (dt, error) pairs.

    Returns
    -------
    float
        Slope of log(error) against log(dt)
    """
    # Log-log regression: log(error) = order * log(dt) + const
    log_dt = np.log(step_sizes)
    log_error = np.log(np.asarray(errors) + 1e-15)

    n = len(log_dt)
    slope = (n * np.sum(log_dt * log_error) - np.sum(log_dt) * np.sum(log_error)) / (
        n * np.sum(log_dt**2) - np.sum(log_dt) ** 2
    )

    return float(slope)


def validate_terminal_mean(
    config: SimulationConfig,
    z_limit: float = MC_Z_SCORE_LIMIT,
) -> dict:
    """
    Compare the simulated mean terminal value to its theoretical value.

    [T1] E[S(T)] = S0 * exp((μ - q) * T) for both GBM and CEV,
    since the drift is linear and the diffusion term has zero mean.

    Parameters
    ----------
    config : SimulationConfig
        Configuration to run (at least two replications)
    z_limit : float
        Largest |z| accepted as a pass

    Returns
    -------
    dict
        Theoretical vs simulated mean, standard error and z-score
    """
    if config.n_simulations < 2:
        raise ValueError(
            f"CRITICAL: need at least 2 replications, got {config.n_simulations}"
        )

    mediator = build_mediator(config)
    terminal_values: list[float] = []
    mediator.on_path(lambda path: terminal_values.append(float(path[-1])))
    summary = mediator.run()

    terminal = np.asarray(terminal_values)
    expected_mean = config.spot * math.exp((config.drift - config.dividend) * config.expiry)
    simulated_mean = float(terminal.mean())
    se_mean = float(terminal.std(ddof=1) / np.sqrt(len(terminal)))
    if se_mean > 0:
        z_score = (simulated_mean - expected_mean) / se_mean
    else:
        z_score = 0.0 if math.isclose(simulated_mean, expected_mean) else math.inf

    return {
        "n_paths": summary.n_simulations,
        "scheme": mediator.scheme.name,
        "theoretical_mean": expected_mean,
        "simulated_mean": simulated_mean,
        "mean_error": abs(simulated_mean - expected_mean),
        "mean_error_pct": abs(simulated_mean - expected_mean) / expected_mean * 100,
        "mean_se": se_mean,
        "mean_z_score": z_score,
        "validation_passed": abs(z_score) < z_limit,
    }
