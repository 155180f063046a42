"""
Uniform time discretization of [0, T].

[T1] t_n = n * T / N, n = 0..N
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np

from sde_pricing.models.sde import StochasticModel


@dataclass(frozen=True)
class TimeGrid:
    """
    Immutable uniform partition of [0, horizon].

    Attributes
    ----------
    horizon : float
        End time T in years
    n_steps : int
        Number of intervals N (>= 1)
    step_size : float
        T / N
    times : np.ndarray
        Read-only time points, shape (N + 1,), times[0] = 0, times[-1] = T

    Examples
    --------
    >>> grid = TimeGrid(horizon=1.0, n_steps=4)
    >>> grid.times
    array([0.  , 0.25, 0.5 , 0.75, 1.  ])
    """

    horizon: float
    n_steps: int
    step_size: float = field(init=False)
    times: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate and build the time points."""
        if self.horizon <= 0:
            raise ValueError(f"CRITICAL: horizon must be > 0, got {self.horizon}")
        if self.n_steps < 1:
            raise ValueError(f"CRITICAL: n_steps must be >= 1, got {self.n_steps}")

        times = np.linspace(0.0, self.horizon, self.n_steps + 1)
        times.flags.writeable = False

        object.__setattr__(self, "step_size", self.horizon / self.n_steps)
        object.__setattr__(self, "times", times)

    @classmethod
    def from_model(cls, model: StochasticModel, n_steps: int) -> "TimeGrid":
        """Create the grid spanning a model's horizon."""
        return cls(horizon=model.horizon, n_steps=n_steps)

    def __len__(self) -> int:
        """Number of time points (N + 1)."""
        return self.n_steps + 1

    def intervals(self) -> Iterator[tuple[float, float]]:
        """Yield (t_start, t_end) for each of the N intervals."""
        for n in range(self.n_steps):
            yield float(self.times[n]), float(self.times[n + 1])
