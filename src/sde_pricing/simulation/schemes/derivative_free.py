"""
Derivative-free strong order 1.0 schemes.

Both schemes estimate the Milstein term b b' from a second diffusion
evaluation at a shifted support point, so models need not supply b'.

See: Kloeden & Platen (1992) Section 11.1 "Explicit Order 1.0 Strong Schemes"
"""

import math

from sde_pricing.simulation.schemes.base import DiscretizationScheme


class DerivativeFreeScheme(DiscretizationScheme):
    """
    Explicit derivative-free Milstein-type scheme.

    [T1] ΔW = √dt z
         G2 = b(x + b √dt)
         x + a dt + b ΔW + ½ (G2 - b)(ΔW² - dt) / √dt
    """

    name = "derivative_free"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        sqrt_dt = math.sqrt(dt)
        w_incr = sqrt_dt * variate

        f1 = sde.drift(xn, tn)
        g1 = sde.diffusion(xn, tn)
        g2 = sde.diffusion(xn + g1 * sqrt_dt, tn)
        correction = 0.5 * (g2 - g1) * (w_incr * w_incr - dt) / sqrt_dt

        return xn + f1 * dt + g1 * w_incr + correction


class FRKIScheme(DiscretizationScheme):
    """
    Runge-Kutta inspired derivative-free scheme.

    [T1] ΔW = √dt z
         G2 = b(x + ½ b (ΔW - √dt))
         x + a dt + G2 ΔW + (G2 - b) √dt
    """

    name = "frki"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        sqrt_dt = math.sqrt(dt)
        w_incr = sqrt_dt * variate

        f1 = sde.drift(xn, tn)
        g1 = sde.diffusion(xn, tn)
        g2 = sde.diffusion(xn + 0.5 * g1 * (w_incr - sqrt_dt), tn)

        return xn + f1 * dt + g2 * w_incr + (g2 - g1) * sqrt_dt
