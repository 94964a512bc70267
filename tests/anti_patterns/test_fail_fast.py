"""
Anti-pattern test: validation happens before any simulation work.

[T1] Invalid inputs must be rejected up front. HALT before a single path is
simulated; never start a pool to discover a bad parameter.
"""

import pytest

from lookback_pricing.errors import InsufficientSamplesError, InvalidParameterError, StatusCode
from lookback_pricing.interface import price_lookback_option
from lookback_pricing.options.simulation import aggregator


@pytest.fixture
def batch_counter(monkeypatch):
    """Count calls into the batch simulator."""
    calls = []
    original = aggregator.simulate_batch

    def counting(*args, **kwargs):
        calls.append(args)
        return original(*args, **kwargs)

    monkeypatch.setattr(aggregator, "simulate_batch", counting)
    return calls


class TestNoWorkOnInvalidInput:
    """Rejected inputs perform zero simulation work."""

    @pytest.mark.anti_pattern
    def test_negative_volatility(self, params_factory, batch_counter):
        """σ = -0.1 is rejected before the engine is reached."""
        with pytest.raises(InvalidParameterError, match="volatility"):
            params = params_factory(volatility=-0.1)
            aggregator.ParallelAggregator(n_workers=1).run(params)
        assert batch_counter == []

    @pytest.mark.anti_pattern
    def test_negative_volatility_at_boundary(self, batch_counter):
        response = price_lookback_option(
            100.0, -0.1, 0.05, 0.0, 1.0, 100.0, "fixed_call", paths=1_000, steps=10, seed=42, worker_count=1
        )
        assert response.status == StatusCode.INVALID_PARAMETER
        assert batch_counter == []

    @pytest.mark.anti_pattern
    def test_single_path_rejected_before_simulation(self, params_factory, batch_counter):
        with pytest.raises(InsufficientSamplesError):
            aggregator.ParallelAggregator(n_workers=1).run(params_factory(n_paths=1))
        assert batch_counter == []

    @pytest.mark.anti_pattern
    def test_valid_input_does_work(self, params_factory, batch_counter):
        """Sanity check on the counter itself."""
        aggregator.ParallelAggregator(n_workers=1).run(params_factory(n_paths=10))
        assert len(batch_counter) == 1
