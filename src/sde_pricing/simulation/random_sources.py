"""
Random-variate sources for path simulation.

Every source wraps a NumPy Mersenne Twister engine and produces one float
per call. Two roles are kept apart by the `distribution` attribute:

- NORMAL sources feed the discretization schemes (one variate per step)
- UNIFORM sources feed the Brownian-bridge barrier correction

The mediator and the bridge pricer each reject the wrong role at
construction time, so a uniform stream can never be fed to a scheme that
expects standard-normal shocks.

See: Marsaglia & Bray (1964) "A convenient method for generating normal variables"
See: Box & Muller (1958) "A note on the generation of random normal deviates"
"""

import math
from abc import ABC, abstractmethod
from enum import Enum

import numpy as np

from sde_pricing.config.settings import SETTINGS

# Spawners keyed by base seed; each unseeded source takes the next child stream
_SEED_SPAWNERS: dict[int | None, np.random.SeedSequence] = {}


def _spawn_seed_sequence() -> np.random.SeedSequence:
    """
    Next independent child of the SETTINGS.random.default_seed sequence.

    Unseeded sources built in the same order get the same streams across
    runs, and no two of them share a stream.
    """
    base = SETTINGS.random.default_seed
    if base not in _SEED_SPAWNERS:
        _SEED_SPAWNERS[base] = np.random.SeedSequence(base)
    return _SEED_SPAWNERS[base].spawn(1)[0]


class GeneratorExhaustedError(RuntimeError):
    """Raised when a rejection sampler exceeds its attempt budget."""

    pass


class Distribution(Enum):
    """Distribution of the variates a source produces."""

    NORMAL = "normal"
    UNIFORM = "uniform"


class RandomSource(ABC):
    """
    Abstract random-variate source.

    Parameters
    ----------
    seed : int, optional
        Seed for the underlying engine. None spawns a fresh child stream
        from SETTINGS.random.default_seed (OS entropy when that is unset),
        so two unseeded sources never repeat each other's draws.

    Notes
    -----
    Sources are stateful and not thread-safe. Give every worker its own
    independently seeded instance.
    """

    distribution: Distribution

    def __init__(self, seed: int | None = None):
        self.seed = seed
        if seed is None:
            self._rng = np.random.Generator(np.random.MT19937(_spawn_seed_sequence()))
        else:
            self._rng = np.random.Generator(np.random.MT19937(seed))

    @abstractmethod
    def next(self) -> float:
        """Draw one variate."""
        pass

    def sample(self, n: int) -> np.ndarray:
        """
        Draw n variates from the stream.

        Consumes the stream exactly as n calls to next() would.
        """
        if n < 0:
            raise ValueError(f"CRITICAL: n must be >= 0, got {n}")
        return np.array([self.next() for _ in range(n)], dtype=float)

    def _uniform(self) -> float:
        """Uniform draw on [0, 1)."""
        return float(self._rng.random())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(seed={self.seed})"


class PolarMarsagliaSource(RandomSource):
    """
    Standard normal variates via the polar rejection method.

    [T1] Draw (u, v) uniform on [-1, 1]^2 until 0 < s = u² + v² <= 1,
    return u * sqrt(-2 ln s / s). Acceptance probability is π/4.

    Parameters
    ----------
    seed : int, optional
        Engine seed
    max_attempts : int, optional
        Rejection attempts per draw before raising GeneratorExhaustedError
    """

    distribution = Distribution.NORMAL

    def __init__(self, seed: int | None = None, max_attempts: int | None = None):
        super().__init__(seed)
        if max_attempts is None:
            max_attempts = SETTINGS.random.polar_max_attempts
        if max_attempts < 1:
            raise ValueError(f"CRITICAL: max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts

    def next(self) -> float:
        for _ in range(self.max_attempts):
            u = 2.0 * self._uniform() - 1.0
            v = 2.0 * self._uniform() - 1.0
            s = u * u + v * v
            if 0.0 < s <= 1.0:
                return u * math.sqrt(-2.0 * math.log(s) / s)

        raise GeneratorExhaustedError(
            f"CRITICAL: polar method rejected {self.max_attempts} consecutive candidates"
        )


class BoxMullerSource(RandomSource):
    """
    Standard normal variates via the Box-Muller transform.

    [T1] z = sqrt(-2 ln u1) * cos(2π u2)

    Only the cosine branch is used; the sine companion is discarded.
    """

    distribution = Distribution.NORMAL

    def next(self) -> float:
        u1 = self._uniform()
        while u1 <= 0.0:
            u1 = self._uniform()
        u2 = self._uniform()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


class MersenneTwisterSource(RandomSource):
    """Uniform variates on [0, 1) straight from the Mersenne Twister engine."""

    distribution = Distribution.UNIFORM

    def next(self) -> float:
        return self._uniform()
