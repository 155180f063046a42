"""
Option data supplying payoff and discount functions to pricers.

Pricers never compute payoff formulas themselves; they receive a
payoff-of-underlying function and a zero-argument discounter from here.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import numpy as np


class OptionType(Enum):
    """Option type enumeration."""

    CALL = "call"
    PUT = "put"


@dataclass(frozen=True)
class OptionData:
    """
    Immutable vanilla option parameters.

    Attributes
    ----------
    strike : float
        Strike price K
    expiry : float
        Time to expiry T in years
    rate : float
        Risk-free rate r (annualized, decimal)
    volatility : float
        Volatility σ (annualized, decimal)
    dividend : float
        Dividend yield q (annualized, decimal)
    option_type : OptionType
        CALL or PUT

    Examples
    --------
    >>> option = OptionData(strike=65.0, expiry=0.25, rate=0.08, volatility=0.3,
    ...                     dividend=0.0022, option_type=OptionType.CALL)
    >>> option.payoff(100.0)
    35.0
    """

    strike: float
    expiry: float
    rate: float
    volatility: float
    dividend: float = 0.0
    option_type: OptionType = OptionType.CALL

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.strike <= 0:
            raise ValueError(f"CRITICAL: strike must be > 0, got {self.strike}")
        if self.expiry <= 0:
            raise ValueError(f"CRITICAL: expiry must be > 0, got {self.expiry}")
        if self.volatility < 0:
            raise ValueError(f"CRITICAL: volatility must be >= 0, got {self.volatility}")

    def payoff(self, spot: float) -> float:
        """
        Vanilla payoff.

        [T1] Call: max(S - K, 0)
        [T1] Put:  max(K - S, 0)
        """
        if self.option_type == OptionType.CALL:
            return max(spot - self.strike, 0.0)
        return max(self.strike - spot, 0.0)

    def discounter(self) -> float:
        """[T1] Discount factor e^(-rT)."""
        return float(np.exp(-self.rate * self.expiry))

    def pricer_functions(self) -> tuple[Callable[[float], float], Callable[[], float]]:
        """(payoff, discounter) pair as consumed by pricer constructors."""
        return self.payoff, self.discounter
