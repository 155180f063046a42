"""
Ito-Taylor family schemes: Euler, Milstein and their relatives.

[T1] Euler-Maruyama: strong order 0.5, weak order 1.0
[T1] Milstein: strong order 1.0 (adds the ½ b b' (ΔW² - dt) term)
[T1] Platen explicit order 1.0: Milstein term from a support value, no b'

See: Kloeden & Platen (1992) Ch. 10-11
See: Glasserman (2003) Ch. 6 "Discretization Methods"
"""

import math

from sde_pricing.models.sde import GBMModel, StochasticModel
from sde_pricing.simulation.schemes.base import DiscretizationScheme


class EulerScheme(DiscretizationScheme):
    """
    Euler-Maruyama scheme.

    [T1] x + a(x,t) dt + b(x,t) √dt z
    """

    name = "euler"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        return xn + sde.drift(xn, tn) * dt + sde.diffusion(xn, tn) * math.sqrt(dt) * variate


class MilsteinScheme(DiscretizationScheme):
    """
    Milstein scheme.

    [T1] Euler + ½ b b' dt (z² - 1)
    """

    name = "milstein"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        b = sde.diffusion(xn, tn)
        return (
            xn
            + sde.drift(xn, tn) * dt
            + b * math.sqrt(dt) * variate
            + 0.5 * dt * b * sde.diffusion_derivative(xn, tn) * (variate * variate - 1.0)
        )


class DiscreteMilsteinScheme(DiscretizationScheme):
    """
    Milstein scheme with a finite-difference estimate of b b'.

    [T1] Y = x + a dt + b √dt
         x + a dt + b √dt z + ½ √dt (b(Y) - b)(z² - 1)

    Uses one extra diffusion evaluation instead of the analytic derivative.
    """

    name = "discrete_milstein"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        sqrt_dt = math.sqrt(dt)
        a = sde.drift(xn, tn)
        b = sde.diffusion(xn, tn)
        support = xn + a * dt + b * sqrt_dt
        return (
            xn
            + a * dt
            + b * sqrt_dt * variate
            + 0.5 * sqrt_dt * (sde.diffusion(support, tn) - b) * (variate * variate - 1.0)
        )


class PlatenScheme(DiscretizationScheme):
    """
    Platen explicit strong order 1.0 scheme.

    [T1] a_s = a - ½ b b'
         s   = x + a_s dt + b √dt
         x + a_s dt + b √dt z + ½ √dt (b(s) - b) z²
    """

    name = "platen"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        sqrt_dt = math.sqrt(dt)
        b = sde.diffusion(xn, tn)
        drift_strat = sde.drift(xn, tn) - 0.5 * b * sde.diffusion_derivative(xn, tn)
        support = xn + drift_strat * dt + b * sqrt_dt

        return (
            xn
            + drift_strat * dt
            + b * sqrt_dt * variate
            + 0.5 * sqrt_dt * (sde.diffusion(support, tn) - b) * variate * variate
        )


class ExactScheme(DiscretizationScheme):
    """
    Exact lognormal update, valid for GBMModel only.

    [T1] x * exp((μ - q - σ²/2) dt + σ √dt z)

    The update is step-relative, so consecutive grid points form one
    continuous sample path whose marginals are exact at every grid time.

    Raises
    ------
    TypeError
        If the model is not lognormal
    """

    name = "exact"

    def __init__(self, model: StochasticModel):
        if not isinstance(model, GBMModel):
            raise TypeError(
                f"CRITICAL: exact scheme requires GBMModel, got {type(model).__name__}"
            )
        super().__init__(model)
        sigma = model.diffusion_coeff
        self._log_drift = model.growth_rate - 0.5 * sigma * sigma
        self._sigma = sigma

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        return xn * math.exp(self._log_drift * dt + self._sigma * math.sqrt(dt) * variate)
