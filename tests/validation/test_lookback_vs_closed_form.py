"""
Closed-form lookback prices and Monte Carlo agreement.

[T1] Goldman-Sosin-Gatto (floating strike), Conze-Viswanathan (fixed strike)
[T1] Broadie-Glasserman-Kou: discrete extrema ≈ continuous extrema × exp(∓βσ√dt)

See: Haug (2007) "The Complete Guide to Option Pricing Formulas" 4.15
"""

import math

import pytest

from lookback_pricing.config.tolerances import ANTI_PATTERN_TOLERANCE
from lookback_pricing.options.payoffs.lookback import OptionVariant
from lookback_pricing.options.pricing.lookback_analytical import (
    fixed_strike_call,
    fixed_strike_put,
    floating_strike_call,
    floating_strike_put,
    lookback_price_analytical,
)
from lookback_pricing.options.simulation.aggregator import ParallelAggregator

S, R, Q, SIGMA, T = 100.0, 0.05, 0.0, 0.20, 1.0


class TestClosedFormKnownAnswers:
    """Known values and identities."""

    @pytest.mark.validation
    def test_floating_call_known_value(self):
        """S=100, r=5%, q=0, σ=20%, T=1."""
        assert floating_strike_call(S, R, Q, SIGMA, T) == pytest.approx(17.217, abs=0.01)

    @pytest.mark.validation
    @pytest.mark.parametrize("dividend", [0.0, 0.03])
    def test_fixed_call_atm_identity(self, dividend):
        """ATM: fixed call = floating put + S e^(-qT) - S e^(-rT)."""
        fixed = fixed_strike_call(S, S, R, dividend, SIGMA, T)
        floating = floating_strike_put(S, R, dividend, SIGMA, T)
        expected = floating + S * math.exp(-dividend * T) - S * math.exp(-R * T)
        assert fixed == pytest.approx(expected, abs=ANTI_PATTERN_TOLERANCE * S)

    @pytest.mark.validation
    @pytest.mark.parametrize("dividend", [0.0, 0.03])
    def test_fixed_put_atm_identity(self, dividend):
        """ATM: fixed put = floating call - S e^(-qT) + S e^(-rT)."""
        fixed = fixed_strike_put(S, S, R, dividend, SIGMA, T)
        floating = floating_strike_call(S, R, dividend, SIGMA, T)
        expected = floating - S * math.exp(-dividend * T) + S * math.exp(-R * T)
        assert fixed == pytest.approx(expected, abs=ANTI_PATTERN_TOLERANCE * S)

    @pytest.mark.validation
    def test_fixed_call_continuous_in_strike(self):
        """Out-of-the-money and in-the-money branches meet at K = S."""
        below = fixed_strike_call(S, S - 1e-7, R, Q, SIGMA, T)
        above = fixed_strike_call(S, S + 1e-7, R, Q, SIGMA, T)
        assert below == pytest.approx(above, abs=1e-5)

    @pytest.mark.validation
    def test_fixed_call_decreasing_in_strike(self):
        prices = [fixed_strike_call(S, k, R, Q, SIGMA, T) for k in (80.0, 100.0, 120.0)]
        assert prices[0] > prices[1] > prices[2] > 0

    @pytest.mark.validation
    def test_prices_positive(self):
        """Lookback prices are strictly positive at inception."""
        assert floating_strike_put(S, R, Q, SIGMA, T) > 0.0
        assert floating_strike_call(S, R, Q, SIGMA, T) > 0.0


class TestDiscreteMonitoringCorrection:
    """Tests for the BGK correction."""

    @pytest.mark.validation
    def test_no_steps_is_continuous(self, any_variant):
        continuous = {
            OptionVariant.FIXED_CALL: fixed_strike_call(S, 100.0, R, Q, SIGMA, T),
            OptionVariant.FIXED_PUT: fixed_strike_put(S, 100.0, R, Q, SIGMA, T),
            OptionVariant.FLOATING_CALL: floating_strike_call(S, R, Q, SIGMA, T),
            OptionVariant.FLOATING_PUT: floating_strike_put(S, R, Q, SIGMA, T),
        }[any_variant]
        assert lookback_price_analytical(S, 100.0, R, Q, SIGMA, T, any_variant) == pytest.approx(continuous)

    @pytest.mark.validation
    def test_discrete_below_continuous(self, any_variant):
        """Discrete monitoring sees a narrower range: lower price."""
        continuous = lookback_price_analytical(S, 100.0, R, Q, SIGMA, T, any_variant)
        discrete = lookback_price_analytical(S, 100.0, R, Q, SIGMA, T, any_variant, n_steps=12)
        assert discrete < continuous

    @pytest.mark.validation
    def test_correction_vanishes_with_steps(self, any_variant):
        continuous = lookback_price_analytical(S, 100.0, R, Q, SIGMA, T, any_variant)
        fine = lookback_price_analytical(S, 100.0, R, Q, SIGMA, T, any_variant, n_steps=100_000_000)
        assert fine == pytest.approx(continuous, rel=1e-3)

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"volatility": 0.0}, "volatility"),
            ({"dividend": R}, "rate != dividend"),
            ({"variant": "fixed_call", "strike": None}, "strike is required"),
            ({"n_steps": 0}, "n_steps"),
        ],
    )
    def test_invalid_inputs(self, kwargs, match):
        args = {
            "spot": S,
            "strike": 100.0,
            "rate": R,
            "dividend": Q,
            "volatility": SIGMA,
            "time_to_expiry": T,
            "variant": "floating_call",
        }
        args.update(kwargs)
        with pytest.raises(ValueError, match=match):
            lookback_price_analytical(**args)


class TestMonteCarloVsClosedForm:
    """Monte Carlo should agree with the discretely corrected closed form."""

    @pytest.mark.validation
    @pytest.mark.slow
    def test_mc_matches_bgk(self, params_factory, any_variant, tolerances):
        params = params_factory(variant=any_variant, n_paths=20_000, n_steps=100)
        result = ParallelAggregator(n_workers=4).run(params)

        reference = lookback_price_analytical(
            S, 100.0, R, Q, SIGMA, T, any_variant, n_steps=params.n_steps
        )
        tolerance = tolerances.discrete_monitoring * reference + 3.0 * result.standard_error
        assert abs(result.price - reference) < tolerance, (
            f"MC {result.price:.4f} ± {result.standard_error:.4f} vs BGK {reference:.4f}"
        )
