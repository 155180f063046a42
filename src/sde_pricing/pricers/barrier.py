"""
Up-and-out barrier pricers.

Two monitoring conventions:

- BarrierPricer: discrete monitoring, only grid points are checked. This
  misses crossings between grid points and so overprices the knock-out.
- BrownianBridgePricer: between consecutive grid points the path is
  treated as a Brownian bridge pinned at both observations, and a crossing
  is sampled with the analytic probability

  [T1] P = exp(-2 (L - x_{n-1}) (L - x_n) / (σ_loc² dt)),
       σ_loc = b(x_{n-1}, t_{n-1})

See: Glasserman (2003) Section 6.4 "Extremes and Barrier Crossings"
See: Beaglehole, Dybvig & Zhou (1997) "Going to extremes"
"""

import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from sde_pricing.models.sde import StochasticModel
from sde_pricing.pricers.base import BasePricer, Discounter, Payoff
from sde_pricing.simulation.random_sources import Distribution, RandomSource
from sde_pricing.simulation.time_grid import TimeGrid

if TYPE_CHECKING:
    from sde_pricing.simulation.mediator import MCMediator

logger = logging.getLogger(__name__)


class BarrierPricer(BasePricer):
    """
    Discretely monitored up-and-out pricer.

    A path is knocked out if any grid point is at or above the barrier;
    it then contributes the rebate instead of payoff(S(T)).

    Parameters
    ----------
    payoff : Callable[[float], float]
        Payoff of the terminal value
    discounter : Callable[[], float]
        Discount factor supplier
    barrier : float
        Barrier level L (> 0)
    rebate : float, default 0.0
        Amount paid on knock-out
    """

    label = "Barrier"

    def __init__(
        self,
        payoff: Payoff,
        discounter: Discounter,
        barrier: float,
        rebate: float = 0.0,
    ):
        super().__init__(payoff, discounter)
        if barrier <= 0:
            raise ValueError(f"CRITICAL: barrier must be > 0, got {barrier}")
        self.barrier = barrier
        self.rebate = rebate
        self.n_knocked_out = 0

    @property
    def knockout_rate(self) -> float:
        """Fraction of consumed paths that were knocked out (NaN if none)."""
        if self.n_paths == 0:
            return float("nan")
        return self.n_knocked_out / self.n_paths

    def is_knocked_out(self, path: np.ndarray) -> bool:
        """Whether any grid point breaches the barrier."""
        return bool(np.any(path >= self.barrier))

    def path_payoff(self, path: np.ndarray) -> float:
        if self.is_knocked_out(path):
            self.n_knocked_out += 1
            return self.rebate
        return self._payoff(float(path[-1]))

    def post_process(self) -> None:
        super().post_process()
        logger.info(
            f"{type(self).__name__}: {self.n_knocked_out} of {self.n_paths} paths knocked out"
        )


class BrownianBridgePricer(BarrierPricer):
    """
    Up-and-out pricer with Brownian-bridge crossing correction.

    Consumes one uniform variate per scanned interval from its own source,
    independent of the variates that generated the path. The scan stops at
    the first knock-out.

    Parameters
    ----------
    payoff : Callable[[float], float]
        Payoff of the terminal value
    discounter : Callable[[], float]
        Discount factor supplier
    model : StochasticModel
        Model whose diffusion gives the local volatility σ_loc
    grid : TimeGrid
        Grid the paths were simulated on
    barrier : float
        Barrier level L (> 0)
    uniform_source : RandomSource
        Source of uniform variates on [0, 1)
    rebate : float, default 0.0
        Amount paid on knock-out

    Raises
    ------
    TypeError
        If `uniform_source` does not produce uniform variates
    ValueError
        If a path (or an attached mediator) does not match `grid`
    """

    label = "Brownian bridge barrier"

    def __init__(
        self,
        payoff: Payoff,
        discounter: Discounter,
        model: StochasticModel,
        grid: TimeGrid,
        barrier: float,
        uniform_source: RandomSource,
        rebate: float = 0.0,
    ):
        super().__init__(payoff, discounter, barrier, rebate)
        if uniform_source.distribution != Distribution.UNIFORM:
            raise TypeError(
                f"CRITICAL: bridge correction needs uniform variates, "
                f"got a {uniform_source.distribution.value} source ({type(uniform_source).__name__})"
            )
        self.model = model
        self.grid = grid
        self.uniform_source = uniform_source
        self.n_bridge_crossings = 0

    def crossing_probability(self, x_start: float, x_end: float, t_start: float) -> float:
        """
        Probability that the bridge between two sub-barrier points crosses L.

        [T1] exp(-2 (L - x_start)(L - x_end) / (σ_loc² dt))

        Zero local diffusion means the path cannot wander between grid
        points, so the probability is 0.
        """
        local_vol = self.model.diffusion(x_start, t_start)
        variance = local_vol * local_vol * self.grid.step_size
        if variance <= 0.0:
            return 0.0
        gap = (self.barrier - x_start) * (self.barrier - x_end)
        return math.exp(-2.0 * gap / variance)

    def attach(self, mediator: "MCMediator") -> None:
        """Subscribe to a mediator that simulates on this pricer's model and grid."""
        if mediator.grid != self.grid:
            raise ValueError(
                f"CRITICAL: mediator grid {mediator.grid} does not match pricer grid {self.grid}"
            )
        if mediator.model != self.model:
            raise ValueError("CRITICAL: mediator model does not match the pricer's model")
        super().attach(mediator)

    def is_knocked_out(self, path: np.ndarray) -> bool:
        if len(path) != len(self.grid):
            raise ValueError(
                f"CRITICAL: path has {len(path)} points, grid has {len(self.grid)}"
            )
        barrier = self.barrier
        if path[0] >= barrier:
            return True

        times = self.grid.times
        for n in range(1, len(path)):
            u = self.uniform_source.next()
            if path[n] >= barrier:
                return True
            if u < self.crossing_probability(float(path[n - 1]), float(path[n]), float(times[n - 1])):
                self.n_bridge_crossings += 1
                return True
        return False
