"""
Base class for SDE discretization schemes.

A scheme advances the state of a bound model by one time step given a
single standard-normal shock:

    x(n+1) = advance(x(n), t(n), dt, z)

See: Kloeden & Platen (1992) "Numerical Solution of Stochastic Differential Equations"
"""

from abc import ABC, abstractmethod

from sde_pricing.models.sde import StochasticModel


class DiscretizationScheme(ABC):
    """
    Abstract one-step discretization scheme.

    All implementations must:
    1. Read only the bound model and their scalar arguments
    2. Keep no state between advance() calls
    3. Return the same value for the same (xn, tn, dt, variate)

    Parameters
    ----------
    model : StochasticModel
        Model supplying drift and diffusion (shared, read-only)
    """

    #: Short identifier used in logs and reports
    name: str = "base"

    def __init__(self, model: StochasticModel):
        self.model = model

    @abstractmethod
    def advance(self, xn: float, tn: float, dt: float, variate: float) -> float:
        """
        Compute the state at tn + dt.

        Parameters
        ----------
        xn : float
            State at time tn
        tn : float
            Current time (years)
        dt : float
            Step size (years, > 0)
        variate : float
            Standard normal shock for this step

        Returns
        -------
        float
            State at tn + dt
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={type(self.model).__name__})"


class WeightedScheme(DiscretizationScheme):
    """
    Scheme with blending weights A (drift) and B (diffusion) in [0, 1].

    Parameters
    ----------
    model : StochasticModel
        Bound model
    a : float, default 0.5
        Drift weight A
    b : float, default 0.5
        Diffusion weight B
    """

    def __init__(self, model: StochasticModel, a: float = 0.5, b: float = 0.5):
        super().__init__(model)
        for label, weight in (("a", a), ("b", b)):
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"CRITICAL: weight {label} must be in [0, 1], got {weight}")
        self.a = a
        self.b = b

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={type(self.model).__name__}, a={self.a}, b={self.b})"
