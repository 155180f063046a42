"""
Monte Carlo path mediator.

Drives independent replications of one model / scheme / random source
combination and streams every completed path to subscribers. Three
channels are kept:

- path:     fires exactly n_simulations times with one read-only path each
- finish:   fires exactly once after the last replication
- progress: advisory, fires every `progress_interval` replications

Callbacks run synchronously, in registration order, on the calling thread.
The mediator holds no aggregate state; pricers subscribe to accumulate.

See: Glasserman (2003) Ch. 1 "Foundations", Ch. 6 "Discretization Methods"
"""

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from sde_pricing.models.sde import StochasticModel
from sde_pricing.simulation.random_sources import Distribution, RandomSource
from sde_pricing.simulation.schemes.base import DiscretizationScheme
from sde_pricing.simulation.time_grid import TimeGrid

logger = logging.getLogger(__name__)

PathCallback = Callable[[np.ndarray], None]
FinishCallback = Callable[[], None]
ProgressCallback = Callable[[int], None]


class SimulationError(RuntimeError):
    """Raised when a replication produces a non-finite state."""

    pass


@dataclass(frozen=True)
class SimulationSummary:
    """
    Summary of a completed mediator run.

    Attributes
    ----------
    n_simulations : int
        Number of paths published
    n_steps : int
        Time steps per path
    elapsed_seconds : float
        Wall-clock time of the run, subscribers included
    """

    n_simulations: int
    n_steps: int
    elapsed_seconds: float


def log_progress(index: int) -> None:
    """Progress subscriber that reports the replication index to the module logger."""
    logger.info(f"Iteration # {index}")


class MCMediator:
    """
    Orchestrates path generation and publication.

    Parameters
    ----------
    model : StochasticModel
        Simulated model (read-only)
    scheme : DiscretizationScheme
        Scheme bound to `model`
    source : RandomSource
        Standard-normal variate source, one draw per step
    n_simulations : int
        Number of replications; <= 0 runs no replications
    grid : TimeGrid
        Time grid over the model's horizon
    progress_interval : int, optional
        Replications between progress notifications (None or 0 disables)

    Raises
    ------
    ValueError
        If the scheme is bound to another model or the grid horizon differs
    TypeError
        If the source does not produce normal variates

    Examples
    --------
    >>> mediator = MCMediator(model, EulerScheme(model), BoxMullerSource(seed=42),
    ...                       n_simulations=10_000, grid=TimeGrid.from_model(model, 100))
    >>> mediator.on_path(pricer.process_path)
    >>> mediator.on_finish(pricer.post_process)
    >>> summary = mediator.run()
    """

    def __init__(
        self,
        model: StochasticModel,
        scheme: DiscretizationScheme,
        source: RandomSource,
        n_simulations: int,
        grid: TimeGrid,
        progress_interval: int | None = 100,
    ):
        if scheme.model != model:
            raise ValueError("CRITICAL: scheme is bound to a different model than the mediator")
        if source.distribution != Distribution.NORMAL:
            raise TypeError(
                f"CRITICAL: path variates must be standard normal, "
                f"got a {source.distribution.value} source ({type(source).__name__})"
            )
        if not math.isclose(grid.horizon, model.horizon):
            raise ValueError(
                f"CRITICAL: grid horizon {grid.horizon} does not match model horizon {model.horizon}"
            )
        if progress_interval is not None and progress_interval < 0:
            raise ValueError(
                f"CRITICAL: progress_interval must be >= 0, got {progress_interval}"
            )

        self.model = model
        self.scheme = scheme
        self.source = source
        self.n_simulations = n_simulations
        self.grid = grid
        self.progress_interval = progress_interval

        self._path_callbacks: list[PathCallback] = []
        self._finish_callbacks: list[FinishCallback] = []
        self._progress_callbacks: list[ProgressCallback] = []

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def on_path(self, callback: PathCallback) -> None:
        """Subscribe to completed paths."""
        self._path_callbacks.append(callback)

    def on_finish(self, callback: FinishCallback) -> None:
        """Subscribe to the end-of-simulation signal."""
        self._finish_callbacks.append(callback)

    def on_progress(self, callback: ProgressCallback) -> None:
        """Subscribe to progress notifications."""
        self._progress_callbacks.append(callback)

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    def generate_path(self) -> np.ndarray:
        """
        Generate one path over the grid.

        [T1] path[0] = S0, path[n] = advance(path[n-1], t[n-1], dt, z_n)

        Returns
        -------
        np.ndarray
            Fresh read-only array of shape (n_steps + 1,)

        Raises
        ------
        SimulationError
            If the scheme produces NaN or Inf
        DiffusionDomainError
            If a step leaves the model's state domain (CEV: x <= 0),
            including the final step
        """
        times = self.grid.times.tolist()
        dt = self.grid.step_size
        advance = self.scheme.advance
        draw = self.source.next
        check_state = self.model.check_state

        path = np.empty(self.grid.n_steps + 1)
        x = self.model.initial_value
        path[0] = x
        for n in range(1, len(path)):
            x = advance(x, times[n - 1], dt, draw())
            if not math.isfinite(x):
                raise SimulationError(
                    f"CRITICAL: {self.scheme.name} produced non-finite state {x} "
                    f"at t={times[n]:.6f} (step {n})"
                )
            check_state(x)
            path[n] = x

        path.flags.writeable = False
        return path

    def run(self) -> SimulationSummary:
        """
        Run all replications and publish paths, then the finish signal.

        Returns
        -------
        SimulationSummary
            Replication count, step count and elapsed time
        """
        start_time = time.perf_counter()
        n_published = 0

        logger.debug(
            f"Starting {self.n_simulations} replications: model={type(self.model).__name__}, "
            f"scheme={self.scheme.name}, source={self.source!r}, n_steps={self.grid.n_steps}"
        )

        for i in range(max(self.n_simulations, 0)):
            if self.progress_interval and i % self.progress_interval == 0:
                for notify in self._progress_callbacks:
                    notify(i)

            path = self.generate_path()
            for publish in self._path_callbacks:
                publish(path)
            n_published += 1

        for finish in self._finish_callbacks:
            finish()

        elapsed = time.perf_counter() - start_time
        logger.info(f"Completed {n_published} replications in {elapsed:.2f}s")

        return SimulationSummary(
            n_simulations=n_published,
            n_steps=self.grid.n_steps,
            elapsed_seconds=elapsed,
        )
