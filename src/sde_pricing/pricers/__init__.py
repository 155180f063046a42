"""
Path-consuming pricers.

Provides:
- BasePricer / PricingResult (running aggregates, discounting, SE and CI)
- EuropeanPricer, AsianPricer (terminal and average-rate payoffs)
- BarrierPricer, BrownianBridgePricer (up-and-out, discrete and bridge-corrected)
"""

from sde_pricing.pricers.barrier import BarrierPricer, BrownianBridgePricer
from sde_pricing.pricers.base import BasePricer, Discounter, Payoff, PricingResult
from sde_pricing.pricers.vanilla import AsianPricer, AveragingMethod, EuropeanPricer

__all__ = [
    "BasePricer",
    "PricingResult",
    "Payoff",
    "Discounter",
    "EuropeanPricer",
    "AsianPricer",
    "AveragingMethod",
    "BarrierPricer",
    "BrownianBridgePricer",
]
