"""
Discretization schemes for one-factor SDEs.

Provides:
- Ito-Taylor schemes (Euler, Milstein, discrete Milstein, Platen, exact GBM)
- Predictor-corrector schemes (trapezoidal, modified, midpoint, fitted, Heun)
- Derivative-free schemes (derivative-free Milstein, FRKI)
"""

from sde_pricing.simulation.schemes.base import DiscretizationScheme, WeightedScheme
from sde_pricing.simulation.schemes.derivative_free import DerivativeFreeScheme, FRKIScheme
from sde_pricing.simulation.schemes.predictor_corrector import (
    FittedMidpointPredictorCorrectorScheme,
    Heun2Scheme,
    HeunScheme,
    MidpointPredictorCorrectorScheme,
    ModifiedPredictorCorrectorScheme,
    PredictorCorrectorScheme,
)
from sde_pricing.simulation.schemes.taylor import (
    DiscreteMilsteinScheme,
    EulerScheme,
    ExactScheme,
    MilsteinScheme,
    PlatenScheme,
)

__all__ = [
    # Base
    "DiscretizationScheme",
    "WeightedScheme",
    # Ito-Taylor
    "EulerScheme",
    "MilsteinScheme",
    "DiscreteMilsteinScheme",
    "PlatenScheme",
    "ExactScheme",
    # Predictor-corrector
    "PredictorCorrectorScheme",
    "ModifiedPredictorCorrectorScheme",
    "MidpointPredictorCorrectorScheme",
    "FittedMidpointPredictorCorrectorScheme",
    "HeunScheme",
    "Heun2Scheme",
    # Derivative-free
    "DerivativeFreeScheme",
    "FRKIScheme",
]
