"""
Option data and closed-form reference prices.

Provides:
- OptionType / OptionData (payoff and discounter supplied to pricers)
- Black-Scholes call, put and up-and-out call closed forms
- Put-call parity check
"""

from sde_pricing.options.black_scholes import (
    black_scholes_call,
    black_scholes_price,
    black_scholes_put,
    put_call_parity_check,
    up_and_out_call,
)
from sde_pricing.options.payoffs import OptionData, OptionType

__all__ = [
    # Option data
    "OptionType",
    "OptionData",
    # Closed forms
    "black_scholes_call",
    "black_scholes_put",
    "black_scholes_price",
    "up_and_out_call",
    "put_call_parity_check",
]
