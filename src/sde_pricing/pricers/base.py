"""
Base classes for path-consuming pricers.

A pricer subscribes to a mediator, consumes one path at a time, keeps
running aggregates (sum and sum of squares of undiscounted payoffs) and
turns them into a discounted price exactly once, after the finish signal.

[T1] price = DF * (1/N) Σ payoff_i
[T1] SE    = DF * s / √N,  s² = (Σ payoff² - N mean²) / (N - 1)

See: Glasserman (2003) Section 1.1.2 "First Examples"
"""

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from sde_pricing.simulation.mediator import MCMediator

logger = logging.getLogger(__name__)

Payoff = Callable[[float], float]
Discounter = Callable[[], float]

#: z-value of the two-sided 95% normal confidence interval
_Z_95 = 1.96


@dataclass(frozen=True)
class PricingResult:
    """
    Monte Carlo pricing result.

    Attributes
    ----------
    price : float
        Discounted mean payoff (NaN when no path was consumed)
    standard_error : float
        Standard error of the price (NaN for fewer than two paths)
    confidence_interval : tuple[float, float]
        95% confidence interval
    n_paths : int
        Number of paths consumed
    discount_factor : float
        Discount factor applied
    """

    price: float
    standard_error: float
    confidence_interval: tuple[float, float]
    n_paths: int
    discount_factor: float

    @property
    def relative_error(self) -> float:
        """Relative standard error (SE / price)."""
        if abs(self.price) < 1e-10:
            return float("inf")
        return self.standard_error / abs(self.price)

    @property
    def ci_width(self) -> float:
        """Width of 95% confidence interval."""
        return self.confidence_interval[1] - self.confidence_interval[0]


class BasePricer(ABC):
    """
    Abstract path-consuming pricer.

    Subclasses implement path_payoff(); this class owns the aggregates,
    the once-only finalization and the discounting.

    Parameters
    ----------
    payoff : Callable[[float], float]
        Payoff as a function of one underlying value
    discounter : Callable[[], float]
        Zero-argument function returning the discount factor

    Notes
    -----
    Calls are assumed to be sequential. To merge results from independent
    workers, sum their (n_paths, sum, sum_sq) aggregates.
    """

    #: Label used in log messages
    label: str = "Plain"

    def __init__(self, payoff: Payoff, discounter: Discounter):
        self._payoff = payoff
        self._discounter = discounter

        self.sum = 0.0
        self.sum_sq = 0.0
        self.n_paths = 0
        self._result: PricingResult | None = None

    @abstractmethod
    def path_payoff(self, path: np.ndarray) -> float:
        """
        Undiscounted payoff contributed by one path.

        Parameters
        ----------
        path : np.ndarray
            Simulated path, shape (n_steps + 1,)

        Returns
        -------
        float
            Undiscounted payoff
        """
        pass

    @property
    def is_finalized(self) -> bool:
        """Whether post_process() has run."""
        return self._result is not None

    def process_path(self, path: np.ndarray) -> None:
        """
        Consume one published path.

        Raises
        ------
        RuntimeError
            If called after post_process()
        """
        if self.is_finalized:
            raise RuntimeError(f"CRITICAL: {type(self).__name__} already finalized")

        value = self.path_payoff(path)
        self.sum += value
        self.sum_sq += value * value
        self.n_paths += 1

    def discount_factor(self) -> float:
        """Discount factor supplied by the discounter."""
        return self._discounter()

    def post_process(self) -> None:
        """
        Compute and freeze the price.

        Raises
        ------
        RuntimeError
            If called more than once
        """
        if self.is_finalized:
            raise RuntimeError(f"CRITICAL: {type(self).__name__} already finalized")

        df = self.discount_factor()
        n = self.n_paths

        if n == 0:
            logger.warning(f"{type(self).__name__} finalized with no paths; price is NaN")
            price = float("nan")
        else:
            price = df * self.sum / n

        if n > 1:
            mean = self.sum / n
            variance = max(self.sum_sq - n * mean * mean, 0.0) / (n - 1)
            se = df * math.sqrt(variance / n)
        else:
            se = float("nan")

        self._result = PricingResult(
            price=price,
            standard_error=se,
            confidence_interval=(price - _Z_95 * se, price + _Z_95 * se),
            n_paths=n,
            discount_factor=df,
        )
        logger.info(f"Compute {self.label} price: Price, #Sims: {price}, {n}")

    @property
    def price(self) -> float:
        """Final price (NaN before post_process())."""
        if self._result is None:
            return float("nan")
        return self._result.price

    @property
    def result(self) -> PricingResult:
        """
        Full pricing result.

        Raises
        ------
        RuntimeError
            If post_process() has not run
        """
        if self._result is None:
            raise RuntimeError(f"CRITICAL: {type(self).__name__} not finalized yet")
        return self._result

    def attach(self, mediator: "MCMediator") -> None:
        """Subscribe this pricer to a mediator's path and finish channels."""
        mediator.on_path(self.process_path)
        mediator.on_finish(self.post_process)
