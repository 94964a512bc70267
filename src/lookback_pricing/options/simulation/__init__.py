"""
Monte Carlo simulation for lookback option pricing.

Provides:
- Deterministic per-path random sub-streams
- GBM path simulation with running extrema
- Parallel aggregation and price/error estimation
"""

from lookback_pricing.options.simulation.aggregator import (
    ParallelAggregator,
    PartialAccumulator,
    reduce_accumulators,
    run,
    simulate_batch,
    split_batches,
)
from lookback_pricing.options.simulation.convergence import convergence_analysis
from lookback_pricing.options.simulation.estimator import PricingResult, finalize
from lookback_pricing.options.simulation.gbm import (
    PathExtrema,
    PathState,
    SimulationParameters,
    simulate_antithetic_paths,
    simulate_path,
)
from lookback_pricing.options.simulation.random_streams import (
    RandomSubStream,
    create_streams,
    iter_streams,
)

__all__ = [
    # Streams
    "RandomSubStream",
    "create_streams",
    "iter_streams",
    # Paths
    "SimulationParameters",
    "PathState",
    "PathExtrema",
    "simulate_path",
    "simulate_antithetic_paths",
    # Aggregation
    "ParallelAggregator",
    "PartialAccumulator",
    "split_batches",
    "simulate_batch",
    "reduce_accumulators",
    "run",
    # Estimation
    "PricingResult",
    "finalize",
    # Convergence
    "convergence_analysis",
]
