"""
Closed-form lognormal prices used as references for the simulation engine.

[T1] Under GBM with rate r, dividend yield q and volatility σ:
     C = S e^(-qT) N(d1) - K e^(-rT) N(d2)
     P = K e^(-rT) N(-d2) - S e^(-qT) N(-d1)
     d1 = (ln(S/K) + (r - q + σ²/2)T) / (σ√T),  d2 = d1 - σ√T

References
----------
[T1] Black, F., & Scholes, M. (1973). The pricing of options and corporate liabilities.
[T1] Hull, J. C. (2018). Options, Futures, and Other Derivatives (10th ed.), Ch. 15, 26.
[T1] Reiner, E., & Rubinstein, M. (1991). Breaking down the barriers.
"""

import numpy as np
from scipy import stats

from sde_pricing.config.tolerances import PUT_CALL_PARITY_TOLERANCE
from sde_pricing.options.payoffs import OptionData, OptionType


def _check_market(spot: float, strike: float, volatility: float, time_to_expiry: float) -> None:
    if spot <= 0:
        raise ValueError(f"CRITICAL: spot must be > 0, got {spot}")
    if strike <= 0:
        raise ValueError(f"CRITICAL: strike must be > 0, got {strike}")
    if volatility <= 0:
        raise ValueError(f"CRITICAL: volatility must be > 0, got {volatility}")
    if time_to_expiry < 0:
        raise ValueError(f"CRITICAL: time_to_expiry must be >= 0, got {time_to_expiry}")


def _vanilla(
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
    sign: float,
) -> float:
    """
    Shared call (sign=+1) / put (sign=-1) formula.

    [T1] sign * (S e^(-qT) N(sign d1) - K e^(-rT) N(sign d2))
    """
    _check_market(spot, strike, volatility, time_to_expiry)

    if time_to_expiry == 0:
        return max(sign * (spot - strike), 0.0)

    vol_sqrt_t = volatility * np.sqrt(time_to_expiry)
    d1 = (np.log(spot / strike) + (rate - dividend + 0.5 * volatility**2) * time_to_expiry) / vol_sqrt_t
    d2 = d1 - vol_sqrt_t

    spot_leg = spot * np.exp(-dividend * time_to_expiry) * stats.norm.cdf(sign * d1)
    strike_leg = strike * np.exp(-rate * time_to_expiry) * stats.norm.cdf(sign * d2)

    return float(sign * (spot_leg - strike_leg))


def black_scholes_call(
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """
    European call under the lognormal model.

    Parameters
    ----------
    spot, strike : float
        Current underlying value S and strike K (> 0)
    rate, dividend : float
        Continuous risk-free rate r and dividend yield q
    volatility : float
        σ (> 0)
    time_to_expiry : float
        T in years; T = 0 returns intrinsic value

    Returns
    -------
    float
        Call price

    Examples
    --------
    >>> round(black_scholes_call(42.0, 40.0, 0.10, 0.0, 0.20, 0.5), 2)
    4.76
    """
    return _vanilla(spot, strike, rate, dividend, volatility, time_to_expiry, 1.0)


def black_scholes_put(
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """European put under the lognormal model; arguments as black_scholes_call."""
    return _vanilla(spot, strike, rate, dividend, volatility, time_to_expiry, -1.0)


def black_scholes_price(option: OptionData, spot: float) -> float:
    """Closed-form price of the vanilla option described by `option`."""
    formula = black_scholes_call if option.option_type == OptionType.CALL else black_scholes_put
    return formula(spot, option.strike, option.rate, option.dividend, option.volatility, option.expiry)


def up_and_out_call(
    spot: float,
    strike: float,
    barrier: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """
    Continuously monitored up-and-out call, zero rebate.

    [T1] For H > K (Hull 2018, Section 26.9):
         c_uo = c - c_ui
         c_ui = S e^(-qT) N(x1) - K e^(-rT) N(x1 - σ√T)
                - S e^(-qT) (H/S)^(2λ) [N(-y) - N(-y1)]
                + K e^(-rT) (H/S)^(2λ-2) [N(-y + σ√T) - N(-y1 + σ√T)]
         λ  = (r - q + σ²/2) / σ²
         y  = ln(H² / (S K)) / (σ√T) + λσ√T
         x1 = ln(S / H) / (σ√T) + λσ√T
         y1 = ln(H / S) / (σ√T) + λσ√T

    The option is worthless when H <= K (it can only pay above H) or when
    the spot already sits at or above the barrier.

    Parameters
    ----------
    spot, strike : float
        Underlying value and strike
    barrier : float
        Up-and-out level H
    rate, dividend, volatility, time_to_expiry : float
        Lognormal model parameters

    Returns
    -------
    float
        Barrier option price
    """
    _check_market(spot, strike, volatility, time_to_expiry)
    if barrier <= spot or barrier <= strike:
        return 0.0

    sig_sqrt_t = volatility * np.sqrt(time_to_expiry)
    lam = (rate - dividend + 0.5 * volatility**2) / volatility**2
    y = np.log(barrier**2 / (spot * strike)) / sig_sqrt_t + lam * sig_sqrt_t
    x1 = np.log(spot / barrier) / sig_sqrt_t + lam * sig_sqrt_t
    y1 = np.log(barrier / spot) / sig_sqrt_t + lam * sig_sqrt_t

    exp_div = np.exp(-dividend * time_to_expiry)
    exp_rate = np.exp(-rate * time_to_expiry)
    ratio = barrier / spot
    N = stats.norm.cdf

    up_and_in = (
        spot * exp_div * N(x1)
        - strike * exp_rate * N(x1 - sig_sqrt_t)
        - spot * exp_div * ratio ** (2 * lam) * (N(-y) - N(-y1))
        + strike * exp_rate * ratio ** (2 * lam - 2) * (N(-y + sig_sqrt_t) - N(-y1 + sig_sqrt_t))
    )
    vanilla = black_scholes_call(spot, strike, rate, dividend, volatility, time_to_expiry)

    return float(max(vanilla - up_and_in, 0.0))


def put_call_parity_check(
    call_price: float,
    put_price: float,
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    time_to_expiry: float,
    tolerance: float = PUT_CALL_PARITY_TOLERANCE,
) -> tuple[bool, float]:
    """
    Check [T1] C - P = S e^(-qT) - K e^(-rT).

    Returns
    -------
    tuple[bool, float]
        (within tolerance, absolute parity gap)
    """
    forward_gap = spot * np.exp(-dividend * time_to_expiry) - strike * np.exp(-rate * time_to_expiry)
    gap = abs((call_price - put_price) - forward_gap)
    return gap < tolerance, gap
