"""
Lookback option pricing implementations.

Provides:
- Closed-form continuous-monitoring prices (with discrete-monitoring correction)
- Finite-difference Greeks, price and delta profiles on the Monte Carlo engine
"""

from lookback_pricing.options.pricing.greeks import (
    GreeksResult,
    delta_profile,
    lookback_greeks,
    price_profile,
    spot_grid,
)
from lookback_pricing.options.pricing.lookback_analytical import (
    fixed_strike_call,
    fixed_strike_put,
    floating_strike_call,
    floating_strike_put,
    lookback_price_analytical,
)

__all__ = [
    # Analytical
    "lookback_price_analytical",
    "fixed_strike_call",
    "fixed_strike_put",
    "floating_strike_call",
    "floating_strike_put",
    # Greeks
    "GreeksResult",
    "lookback_greeks",
    "price_profile",
    "delta_profile",
    "spot_grid",
]
