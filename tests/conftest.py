"""
Centralized pytest fixtures for lookback-pricing test suite.

This module provides shared fixtures used across all test categories:
- anti_patterns/
- unit/
- validation/
- properties/

Fixture Categories:
1. Market Parameters - Standard market conditions for lookback pricing
2. Simulation Parameters - Small, fast run configurations
3. Engines - Thread-backed aggregators for quick deterministic runs
"""

from dataclasses import dataclass

import pytest

from lookback_pricing.config.tolerances import (
    ANTI_PATTERN_TOLERANCE,
    DISCRETE_MONITORING_TOLERANCE,
    GREEKS_MC_TOLERANCE,
    ZERO_VOL_TOLERANCE,
)
from lookback_pricing.options.payoffs.lookback import OptionVariant
from lookback_pricing.options.simulation.aggregator import ParallelAggregator
from lookback_pricing.options.simulation.gbm import SimulationParameters

# =============================================================================
# TOLERANCE TIERS
# =============================================================================


@dataclass(frozen=True)
class ToleranceTiers:
    """
    Tiered tolerance framework for different test types.

    Values come from lookback_pricing/config/tolerances.py.
    """

    # Anti-pattern tests: Very tight (fundamental violations)
    anti_pattern: float = ANTI_PATTERN_TOLERANCE

    # Deterministic paths (σ = 0): log/exp rounding only
    zero_vol: float = ZERO_VOL_TOLERANCE

    # Monte Carlo vs discretely corrected closed form: relative band
    discrete_monitoring: float = DISCRETE_MONITORING_TOLERANCE

    # Finite-difference Greeks vs closed form: relative band
    greeks_mc: float = GREEKS_MC_TOLERANCE


TOLERANCES = ToleranceTiers()


@pytest.fixture(scope="session")
def tolerances() -> ToleranceTiers:
    """Provide tiered tolerance settings for all tests."""
    return TOLERANCES


# =============================================================================
# MARKET PARAMETERS
# =============================================================================


@dataclass(frozen=True)
class MarketParams:
    """Standard market parameters for lookback pricing tests."""

    spot: float = 100.0
    strike: float = 100.0
    rate: float = 0.05
    dividend: float = 0.0
    volatility: float = 0.20
    maturity: float = 1.0


@pytest.fixture
def market_params() -> MarketParams:
    """Standard ATM market parameters."""
    return MarketParams()


# =============================================================================
# SIMULATION PARAMETERS
# =============================================================================


def make_params(
    variant: OptionVariant = OptionVariant.FIXED_CALL,
    n_paths: int = 2_000,
    n_steps: int = 20,
    seed: int = 42,
    **overrides,
) -> SimulationParameters:
    """Build small SimulationParameters from the standard market."""
    market = MarketParams()
    fields = {
        "spot": market.spot,
        "volatility": market.volatility,
        "rate": market.rate,
        "dividend": market.dividend,
        "maturity": market.maturity,
        "strike": market.strike,
    }
    fields.update(overrides)
    return SimulationParameters(
        n_paths=n_paths,
        n_steps=n_steps,
        variant=variant,
        seed=seed,
        **fields,
    )


@pytest.fixture
def params_factory():
    """Factory for small SimulationParameters (see make_params)."""
    return make_params


@pytest.fixture
def small_params() -> SimulationParameters:
    """Fixed-strike ATM call, 2,000 paths x 20 steps."""
    return make_params()


@pytest.fixture(params=list(OptionVariant), ids=lambda v: v.value)
def any_variant(request) -> OptionVariant:
    """Each of the four lookback variants."""
    return request.param


# =============================================================================
# ENGINES
# =============================================================================


@pytest.fixture
def thread_engine() -> ParallelAggregator:
    """Four-thread aggregator (no process start-up cost)."""
    return ParallelAggregator(n_workers=4, executor="thread")


@pytest.fixture
def serial_engine() -> ParallelAggregator:
    """Single-worker aggregator (runs inline)."""
    return ParallelAggregator(n_workers=1)
