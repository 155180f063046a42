"""
Predictor-corrector schemes.

Every scheme here first takes an Euler predictor step

    V = x + a(x, t) dt + b(x, t) √dt z

and then corrects the drift and/or diffusion using V. The weights A and B
blend the predictor's evaluation with the current state's.

[T1] A = B = 0.5 with plain blending gives a trapezoidal rule; the
"modified" variants subtract B b b' from the drift so that the limit is
the Ito solution for any B.

See: Kloeden & Platen (1992) Section 15.5 "Predictor-Corrector Methods"
"""

import math

from sde_pricing.models.sde import StochasticModel
from sde_pricing.simulation.schemes.base import DiscretizationScheme, WeightedScheme


def _euler_predictor(model: StochasticModel, xn: float, tn: float, dt: float, variate: float) -> float:
    return xn + model.drift(xn, tn) * dt + model.diffusion(xn, tn) * math.sqrt(dt) * variate


class PredictorCorrectorScheme(WeightedScheme):
    """
    Predictor-corrector with trapezoidal blending.

    [T1] x + (A a(V, t+dt) + (1-A) a(x, t)) dt
           + (B b(V, t+dt) + (1-B) b(x, t)) √dt z
    """

    name = "predictor_corrector"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        v_mid = _euler_predictor(sde, xn, tn, dt, variate)

        drift_term = (self.a * sde.drift(v_mid, tn + dt) + (1.0 - self.a) * sde.drift(xn, tn)) * dt
        diffusion_term = (
            (self.b * sde.diffusion(v_mid, tn + dt) + (1.0 - self.b) * sde.diffusion(xn, tn))
            * math.sqrt(dt)
            * variate
        )
        return xn + drift_term + diffusion_term


class ModifiedPredictorCorrectorScheme(WeightedScheme):
    """
    Predictor-corrector blending the corrected drift a - B b b'.

    [T1] x + (A ā(V, t+dt) + (1-A) ā(x, t)) dt
           + (B b(V, t+dt) + (1-B) b(x, t)) √dt z,   ā = a - B b b'
    """

    name = "modified_predictor_corrector"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        v_mid = _euler_predictor(sde, xn, tn, dt, variate)

        drift_term = (
            self.a * sde.drift_corrected(v_mid, tn + dt, self.b)
            + (1.0 - self.a) * sde.drift_corrected(xn, tn, self.b)
        ) * dt
        diffusion_term = (
            (self.b * sde.diffusion(v_mid, tn + dt) + (1.0 - self.b) * sde.diffusion(xn, tn))
            * math.sqrt(dt)
            * variate
        )
        return xn + drift_term + diffusion_term


class MidpointPredictorCorrectorScheme(WeightedScheme):
    """
    Predictor-corrector evaluated at blended midpoints.

    [T1] x + ā(A V + (1-A) x, t + dt/2) dt + b(B V + (1-B) x, t + dt/2) √dt z
    """

    name = "midpoint_predictor_corrector"

    def _predict(self, xn: float, tn: float, dt: float, variate: float) -> float:
        return _euler_predictor(self.model, xn, tn, dt, variate)

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        v_mid = self._predict(xn, tn, dt, variate)
        t_mid = tn + 0.5 * dt

        drift_term = sde.drift_corrected(self.a * v_mid + (1.0 - self.a) * xn, t_mid, self.b) * dt
        diffusion_term = (
            sde.diffusion(self.b * v_mid + (1.0 - self.b) * xn, t_mid) * math.sqrt(dt) * variate
        )
        return xn + drift_term + diffusion_term


class FittedMidpointPredictorCorrectorScheme(MidpointPredictorCorrectorScheme):
    """
    Midpoint predictor-corrector with an exponentially fitted predictor.

    The predictor replaces a(x, t) with the fitted linear growth
    ((e^{r dt} - 1) / dt) x, which is exact for deterministic exponential
    growth at rate r.

    Parameters
    ----------
    model : StochasticModel
        Bound model
    a, b : float
        Blending weights in [0, 1]
    fitting_rate : float, optional
        Growth rate r of the fitted predictor. Defaults to the model's μ - q.
    """

    name = "fitted_midpoint_predictor_corrector"

    def __init__(
        self,
        model: StochasticModel,
        a: float = 0.5,
        b: float = 0.5,
        fitting_rate: float | None = None,
    ):
        super().__init__(model, a, b)
        self.fitting_rate = model.growth_rate if fitting_rate is None else fitting_rate

    def _fitted_coefficient(self, dt: float) -> float:
        # expm1 keeps (e^{r dt} - 1)/dt accurate for small r dt
        return math.expm1(self.fitting_rate * dt) / dt

    def _predict(self, xn: float, tn: float, dt: float, variate: float) -> float:
        return (
            xn
            + self._fitted_coefficient(dt) * xn * dt
            + self.model.diffusion(xn, tn) * math.sqrt(dt) * variate
        )


class HeunScheme(DiscretizationScheme):
    """
    Heun (stochastic trapezoidal) scheme.

    [T1] s = x + a dt + b √dt z
         x + ½ (a(s) + a) dt + ½ (b(s) + b) √dt z

    Note: converges to the Stratonovich solution, not the Ito one.
    """

    name = "heun"

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        sqrt_dt = math.sqrt(dt)
        a = sde.drift(xn, tn)
        b = sde.diffusion(xn, tn)
        support = xn + a * dt + b * sqrt_dt * variate

        return (
            xn
            + 0.5 * (sde.drift(support, tn) + a) * dt
            + 0.5 * (sde.diffusion(support, tn) + b) * sqrt_dt * variate
        )


class Heun2Scheme(DiscretizationScheme):
    """
    Heun scheme on the Stratonovich-corrected drift.

    [T1] F(x, t) = a(x, t) - ½ b'(x, t) b(x, t)
         s = x + F(x) dt + b ΔW
         x + ½ (F(x) + F(s)) dt + ½ (b(x) + b(s)) ΔW

    Converges to the Ito solution.
    """

    name = "heun2"

    def _stratonovich_drift(self, x: float, t: float) -> float:
        sde = self.model
        return sde.drift(x, t) - 0.5 * sde.diffusion_derivative(x, t) * sde.diffusion(x, t)

    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        sde = self.model
        w_incr = math.sqrt(dt) * variate

        f1 = self._stratonovich_drift(xn, tn)
        g1 = sde.diffusion(xn, tn)

        support = xn + f1 * dt + g1 * w_incr
        f2 = self._stratonovich_drift(support, tn)
        g2 = sde.diffusion(support, tn)

        return xn + 0.5 * (f1 + f2) * dt + 0.5 * (g1 + g2) * w_incr
