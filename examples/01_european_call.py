#!/usr/bin/env python3
"""
Monte Carlo Option Pricing Demo.

Simulates paths of the underlying with a chosen model, scheme and normal
generator, streams them to a pricer and prints the price next to the
Black-Scholes reference.

Defaults reproduce the classic test case:
    K = 65, T = 0.25, r = 0.08, σ = 0.3, q = 0.0022, S0 = 100

Usage:
    python examples/01_european_call.py                         # European call, Euler
    python examples/01_european_call.py --scheme milstein --steps 200
    python examples/01_european_call.py --pricer bridge --barrier 170
    python examples/01_european_call.py --model cev --beta 0.5 --rng polar_marsaglia

See Also:
    - DESIGN.md
"""

import argparse
import logging
import sys

# Add src to path if running as script
sys.path.insert(0, "src")

from sde_pricing import (
    SETTINGS,
    AsianPricer,
    BarrierPricer,
    BrownianBridgePricer,
    EuropeanPricer,
    MersenneTwisterSource,
    ModelType,
    OptionData,
    OptionType,
    RngType,
    SchemeType,
    SimulationConfig,
    black_scholes_call,
    black_scholes_put,
)
from sde_pricing.pricers.base import BasePricer
from sde_pricing.simulation.builder import build_mediator


def build_pricer(args: argparse.Namespace, option: OptionData, mediator) -> BasePricer:
    """Create the pricer selected on the command line."""
    if args.pricer == "asian":
        return AsianPricer(option.payoff, option.discounter)
    if args.pricer == "barrier":
        return BarrierPricer(option.payoff, option.discounter, barrier=args.barrier)
    if args.pricer == "bridge":
        return BrownianBridgePricer(
            option.payoff,
            option.discounter,
            model=mediator.model,
            grid=mediator.grid,
            barrier=args.barrier,
            uniform_source=MersenneTwisterSource(seed=None if args.seed is None else args.seed + 1),
        )
    return EuropeanPricer(option.payoff, option.discounter)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Monte Carlo Option Pricing Demo")
    parser.add_argument("--strike", type=float, default=65.0, help="Strike (default: 65)")
    parser.add_argument("--expiry", type=float, default=0.25, help="Expiry in years (default: 0.25)")
    parser.add_argument("--rate", type=float, default=0.08, help="Risk-free rate (default: 0.08)")
    parser.add_argument("--vol", type=float, default=0.3, help="Volatility (default: 0.3)")
    parser.add_argument("--div", type=float, default=0.0022, help="Dividend yield (default: 0.0022)")
    parser.add_argument("--spot", type=float, default=100.0, help="Initial spot (default: 100)")
    parser.add_argument("--put", action="store_true", help="Price a put instead of a call")
    parser.add_argument(
        "--model", choices=[m.value for m in ModelType], default=ModelType.GBM.value
    )
    parser.add_argument(
        "--beta", type=float, default=SETTINGS.simulation.cev_elasticity, help="CEV elasticity"
    )
    parser.add_argument(
        "--scheme", choices=[s.value for s in SchemeType], default=SchemeType.EULER.value
    )
    parser.add_argument("--rng", choices=[r.value for r in RngType], default=RngType.BOX_MULLER.value)
    parser.add_argument(
        "--pricer", choices=["european", "asian", "barrier", "bridge"], default="european"
    )
    parser.add_argument(
        "--barrier", type=float, default=SETTINGS.barrier.barrier, help="Up-and-out barrier"
    )
    parser.add_argument("--steps", type=int, default=SETTINGS.simulation.n_steps)
    parser.add_argument("--sims", type=int, default=SETTINGS.simulation.n_simulations)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true", help="Log progress every 100 paths")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(message)s")

    option_type = OptionType.PUT if args.put else OptionType.CALL
    option = OptionData(
        strike=args.strike,
        expiry=args.expiry,
        rate=args.rate,
        volatility=args.vol,
        dividend=args.div,
        option_type=option_type,
    )
    config = SimulationConfig(
        model_type=ModelType(args.model),
        drift=args.rate,
        volatility=args.vol,
        dividend=args.div,
        spot=args.spot,
        expiry=args.expiry,
        elasticity=args.beta,
        n_steps=args.steps,
        scheme_type=SchemeType(args.scheme),
        rng_type=RngType(args.rng),
        n_simulations=args.sims,
        seed=args.seed,
        verbose=args.verbose,
    )

    mediator = build_mediator(config)
    pricer = build_pricer(args, option, mediator)
    pricer.attach(mediator)
    summary = mediator.run()
    result = pricer.result

    closed_form = black_scholes_put if args.put else black_scholes_call
    reference = closed_form(args.spot, args.strike, args.rate, args.div, args.vol, args.expiry)

    print("=" * 60)
    print(f"{option_type.value.upper()} | {args.model} | {args.scheme} | {args.rng} | {args.pricer}")
    print(f"Grid: {mediator.grid.n_steps} steps over {args.expiry} years")
    print("=" * 60)
    print(f"Price, #Sims: {result.price}, {summary.n_simulations}")
    print(f"Standard error: {result.standard_error:.6f}")
    print(f"95% CI: [{result.confidence_interval[0]:.4f}, {result.confidence_interval[1]:.4f}]")
    print(f"Black-Scholes (vanilla): {reference:.4f}")
    print(f"Elapsed time: {summary.elapsed_seconds:.2f}s")
    print("=" * 60)


if __name__ == "__main__":
    main()
