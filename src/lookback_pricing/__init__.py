"""
lookback-pricing: Monte Carlo pricing of lookback options.

Quick Start
-----------
>>> from lookback_pricing import SimulationParameters, ParallelAggregator
>>> params = SimulationParameters(spot=100.0, volatility=0.2, rate=0.05, dividend=0.0,
...     maturity=1.0, n_steps=252, n_paths=100_000, variant="fixed_call", strike=100.0)
>>> result = ParallelAggregator(n_workers=4).run(params)

Host integration
----------------
>>> from lookback_pricing import price_lookback_option
>>> response = price_lookback_option(100.0, 0.2, 0.05, 0.0, 1.0, 100.0, "fixed_call",
...     paths=100_000, steps=252, seed=42, worker_count=4)

Version: 0.1.0
"""

__version__ = "0.1.0"

# =============================================================================
# Monte Carlo Engine - Primary API
# =============================================================================
from lookback_pricing.options.payoffs.lookback import OptionVariant, lookback_payoff
from lookback_pricing.options.simulation import (
    ParallelAggregator,
    PricingResult,
    RandomSubStream,
    SimulationParameters,
    convergence_analysis,
    create_streams,
    finalize,
    simulate_path,
)

# =============================================================================
# Analytical Pricing & Greeks
# =============================================================================
from lookback_pricing.options.pricing import (
    GreeksResult,
    delta_profile,
    lookback_greeks,
    lookback_price_analytical,
    price_profile,
)

# =============================================================================
# Host Interface
# =============================================================================
from lookback_pricing.interface import PricingResponse, price_lookback_option

# =============================================================================
# Errors
# =============================================================================
from lookback_pricing.errors import (
    InsufficientSamplesError,
    InternalReductionError,
    InvalidParameterError,
    LookbackPricingError,
    SimulationFailureError,
    StatusCode,
)

# =============================================================================
# Configuration
# =============================================================================
from lookback_pricing.config.settings import SETTINGS

__all__ = [
    # Version
    "__version__",
    # Engine
    "OptionVariant",
    "lookback_payoff",
    "SimulationParameters",
    "RandomSubStream",
    "create_streams",
    "simulate_path",
    "ParallelAggregator",
    "PricingResult",
    "finalize",
    "convergence_analysis",
    # Analytical / Greeks
    "lookback_price_analytical",
    "GreeksResult",
    "lookback_greeks",
    "price_profile",
    "delta_profile",
    # Host interface
    "PricingResponse",
    "price_lookback_option",
    # Errors
    "LookbackPricingError",
    "InvalidParameterError",
    "InsufficientSamplesError",
    "SimulationFailureError",
    "InternalReductionError",
    "StatusCode",
    # Config
    "SETTINGS",
]
