"""
Stochastic models for the simulated underlying.

Provides:
- StochasticModel abstract base (drift, diffusion, derivative, corrected drift)
- GBMModel (lognormal)
- CEVModel (constant elasticity of variance)
"""

from sde_pricing.models.sde import (
    CEVModel,
    DiffusionDomainError,
    GBMModel,
    StochasticModel,
)

__all__ = [
    "StochasticModel",
    "GBMModel",
    "CEVModel",
    "DiffusionDomainError",
]
