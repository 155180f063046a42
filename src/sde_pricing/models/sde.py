"""
Stochastic differential equation models for path simulation.

Each model exposes the coefficient functions of

    dX = a(X, t) dt + b(X, t) dW

plus the spatial derivative b'(X, t) needed by higher-order schemes.

[T1] GBM SDE: dS = (μ - q)S dt + σS dW
[T1] CEV SDE: dS = (μ - q)S dt + σ'S^β dW

See: Kloeden & Platen (1992) "Numerical Solution of Stochastic Differential Equations"
See: Cox (1975) "Notes on option pricing I: Constant elasticity of variance diffusions"
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class DiffusionDomainError(ValueError):
    """Raised when a coefficient is evaluated outside the model's state domain."""

    pass


@dataclass(frozen=True)
class StochasticModel(ABC):
    """
    Abstract one-factor diffusion model.

    Models are immutable after construction and may be shared read-only by
    the mediator and every scheme bound to it.

    Attributes
    ----------
    drift_coeff : float
        Drift rate μ (annualized, decimal)
    diffusion_coeff : float
        Volatility σ (annualized, decimal)
    dividend : float
        Dividend yield q (annualized, decimal)
    initial_value : float
        Initial state S0
    horizon : float
        Expiry T in years
    """

    drift_coeff: float
    diffusion_coeff: float
    dividend: float
    initial_value: float
    horizon: float

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.horizon <= 0:
            raise ValueError(f"CRITICAL: horizon must be > 0, got {self.horizon}")
        if self.initial_value <= 0:
            raise ValueError(
                f"CRITICAL: initial_value must be > 0, got {self.initial_value}"
            )
        if self.diffusion_coeff < 0:
            raise ValueError(
                f"CRITICAL: diffusion_coeff must be >= 0, got {self.diffusion_coeff}"
            )

    @property
    def growth_rate(self) -> float:
        """Net drift rate μ - q."""
        return self.drift_coeff - self.dividend

    def drift(self, x: float, t: float) -> float:
        """[T1] a(x, t) = (μ - q)x for every model in this module."""
        return self.growth_rate * x

    @abstractmethod
    def diffusion(self, x: float, t: float) -> float:
        """
        Diffusion coefficient b(x, t).

        Parameters
        ----------
        x : float
            Current state
        t : float
            Current time (years)

        Returns
        -------
        float
            Diffusion coefficient
        """
        pass

    @abstractmethod
    def diffusion_derivative(self, x: float, t: float) -> float:
        """Spatial derivative ∂b/∂x at (x, t)."""
        pass

    def drift_corrected(self, x: float, t: float, weight: float) -> float:
        """
        Drift with a Stratonovich-type correction.

        [T1] a(x, t) - weight * b(x, t) * b'(x, t)

        Used by predictor-corrector schemes; weight 0.5 gives the
        Stratonovich drift.
        """
        return self.drift(x, t) - weight * self.diffusion(x, t) * self.diffusion_derivative(x, t)

    def check_state(self, x: float) -> None:
        """Raise DiffusionDomainError if x lies outside the state domain."""
        pass


@dataclass(frozen=True)
class GBMModel(StochasticModel):
    """
    Geometric Brownian Motion (lognormal) model.

    [T1] b(x) = σx, b'(x) = σ

    Examples
    --------
    >>> model = GBMModel(drift_coeff=0.08, diffusion_coeff=0.3, dividend=0.0,
    ...                  initial_value=100.0, horizon=0.25)
    >>> model.diffusion(100.0, 0.0)
    30.0
    """

    def diffusion(self, x: float, t: float) -> float:
        return self.diffusion_coeff * x

    def diffusion_derivative(self, x: float, t: float) -> float:
        return self.diffusion_coeff


@dataclass(frozen=True)
class CEVModel(StochasticModel):
    """
    Constant Elasticity of Variance model.

    [T1] b(x) = σ' x^β with σ' = σ S0^(1-β), so that b(S0) = σ S0 and the
    model matches the lognormal local volatility at the initial state.

    The coefficients are only defined for x > 0. Evaluating them at a
    non-positive state raises DiffusionDomainError instead of returning
    NaN or Inf.

    Attributes
    ----------
    elasticity : float
        Exponent β (β = 1 recovers GBM)
    """

    elasticity: float = 0.5
    calibrated_vol: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate parameters and calibrate σ'."""
        super().__post_init__()
        object.__setattr__(
            self,
            "calibrated_vol",
            self.diffusion_coeff * self.initial_value ** (1.0 - self.elasticity),
        )

    def check_state(self, x: float) -> None:
        if x <= 0:
            raise DiffusionDomainError(
                f"CRITICAL: CEV coefficients require x > 0, got {x} "
                f"(elasticity={self.elasticity})"
            )

    def diffusion(self, x: float, t: float) -> float:
        self.check_state(x)
        return self.calibrated_vol * x**self.elasticity

    def diffusion_derivative(self, x: float, t: float) -> float:
        """
        [T1] b'(x) = σ' β x^(β-1).

        For β <= 1 this is written as σ'β / x^(1-β), which diverges as x → 0.
        """
        self.check_state(x)
        beta = self.elasticity
        if beta > 1.0:
            return self.calibrated_vol * beta * x ** (beta - 1.0)
        return self.calibrated_vol * beta / x ** (1.0 - beta)
