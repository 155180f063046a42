"""
Path-independent and averaging pricers.

- EuropeanPricer: payoff of the terminal value
- AsianPricer: payoff of the path average (average-rate option)
"""

from enum import Enum

import numpy as np

from sde_pricing.pricers.base import BasePricer, Discounter, Payoff


class AveragingMethod(Enum):
    """Path averaging used by AsianPricer."""

    ARITHMETIC = "arithmetic"
    GEOMETRIC = "geometric"


class EuropeanPricer(BasePricer):
    """
    European pricer.

    [T1] payoff(S(T))

    Examples
    --------
    >>> pricer = EuropeanPricer(option.payoff, option.discounter)
    >>> pricer.attach(mediator)
    >>> mediator.run()
    >>> pricer.price
    """

    def path_payoff(self, path: np.ndarray) -> float:
        return self._payoff(float(path[-1]))


class AsianPricer(BasePricer):
    """
    Average-rate pricer.

    [T1] Arithmetic: payoff((1/(N+1)) Σ S(t_n)), all grid points including t_0
    [T1] Geometric:  payoff(exp((1/(N+1)) Σ ln S(t_n)))

    Parameters
    ----------
    payoff : Callable[[float], float]
        Payoff of the average
    discounter : Callable[[], float]
        Discount factor supplier
    averaging : AveragingMethod, default ARITHMETIC
        Averaging applied to the path
    """

    label = "Asian"

    def __init__(
        self,
        payoff: Payoff,
        discounter: Discounter,
        averaging: AveragingMethod = AveragingMethod.ARITHMETIC,
    ):
        super().__init__(payoff, discounter)
        self.averaging = averaging

    def path_payoff(self, path: np.ndarray) -> float:
        if self.averaging == AveragingMethod.GEOMETRIC:
            if np.any(path <= 0):
                raise ValueError("CRITICAL: geometric average requires a strictly positive path")
            average = float(np.exp(np.mean(np.log(path))))
        else:
            average = float(np.mean(path))
        return self._payoff(average)
