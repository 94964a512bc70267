"""
Anti-pattern test: contaminated paths abort the run.

[T1] Dropping non-finite paths would bias the estimator. A single NaN/Inf
anywhere fails the whole run; no partial result is ever returned.
"""

import math

import pytest

from lookback_pricing.errors import SimulationFailureError, StatusCode
from lookback_pricing.interface import price_lookback_option
from lookback_pricing.options.simulation import aggregator
from lookback_pricing.options.simulation.gbm import PathExtrema


def _poison_path(monkeypatch, bad_index: int):
    """Make exactly one path index produce NaN."""
    original = aggregator.simulate_path

    def poisoned(params, stream):
        if stream.index == bad_index:
            return PathExtrema(terminal=float("nan"), minimum=params.spot, maximum=params.spot)
        return original(params, stream)

    monkeypatch.setattr(aggregator, "simulate_path", poisoned)


class TestNoPartialResults:
    """One bad path fails everything."""

    @pytest.mark.anti_pattern
    @pytest.mark.parametrize("bad_index", [0, 499, 999])
    def test_single_nan_fails_run(self, params_factory, thread_engine, monkeypatch, bad_index):
        _poison_path(monkeypatch, bad_index)
        with pytest.raises(SimulationFailureError) as exc_info:
            thread_engine.run(params_factory(n_paths=1_000))
        assert exc_info.value.path_index == bad_index

    @pytest.mark.anti_pattern
    def test_boundary_returns_no_price(self, monkeypatch):
        _poison_path(monkeypatch, 3)
        response = price_lookback_option(
            100.0, 0.2, 0.05, 0.0, 1.0, 100.0, "floating_put", paths=100, steps=5, seed=42, worker_count=1
        )
        assert response.status == StatusCode.SIMULATION_FAILURE
        assert all(math.isnan(v) for v in response.as_tuple())

    @pytest.mark.anti_pattern
    def test_non_negative_prices(self, params_factory, thread_engine, any_variant):
        """[T1] Lookback price and SE are never negative."""
        result = thread_engine.run(params_factory(variant=any_variant, n_paths=500))
        assert result.price >= 0.0
        assert result.standard_error >= 0.0
