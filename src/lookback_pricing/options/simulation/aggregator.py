"""
Parallel Monte Carlo aggregation for lookback pricing.

Splits the M paths into near-equal contiguous batches, simulates each batch
in a worker pool and reduces the per-batch statistics in batch-index order.

Reproducibility:
- Sub-stream i is always bound to global path index i, whichever worker
  simulates it.
- Batch sums are kept as exact non-overlapping partials (Shewchuk) and
  rounded once with math.fsum, so the global sum is the correctly rounded
  total of all payoffs for ANY batch split. Results are therefore
  bit-identical across worker counts, not only across runs.

Concurrency:
- One task per batch, no shared mutable state during simulation.
- The only join is the ordered collection of futures; the reduction runs on
  the calling thread.

See: Glasserman (2003) Ch. 1 - Sufficient statistics for MC estimates
See: Shewchuk (1997) "Adaptive Precision Floating-Point Arithmetic"
"""

import logging
import math
import time
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import chain
from typing import Iterable, Optional

from lookback_pricing.config.settings import SETTINGS
from lookback_pricing.errors import (
    InsufficientSamplesError,
    InternalReductionError,
    InvalidParameterError,
    SimulationFailureError,
)
from lookback_pricing.options.payoffs.lookback import lookback_payoff
from lookback_pricing.options.simulation.estimator import PricingResult, finalize
from lookback_pricing.options.simulation.gbm import (
    SimulationParameters,
    simulate_antithetic_paths,
    simulate_path,
)
from lookback_pricing.options.simulation.random_streams import iter_streams

logger = logging.getLogger(__name__)


def _add_exact(partials: list[float], x: float) -> None:
    """
    Add x to a list of non-overlapping partials without rounding error.

    Raises
    ------
    OverflowError
        If the running total leaves the finite double range
    """
    i = 0
    for y in partials:
        if abs(x) < abs(y):
            x, y = y, x
        hi = x + y
        if not math.isfinite(hi):
            raise OverflowError(f"intermediate overflow in exact sum: {x!r} + {y!r}")
        lo = y - (hi - x)
        if lo:
            partials[i] = lo
            i += 1
        x = hi
    partials[i:] = [x]


@dataclass
class PartialAccumulator:
    """
    Per-batch payoff statistics.

    Owned by one worker while simulating; read exactly once by the reduction.

    Attributes
    ----------
    batch_index : int
        Position of the batch in the fixed reduction order
    start : int
        First global path index of the batch
    stop : int
        One past the last global path index
    count : int
        Paths processed
    sum_partials : list[float]
        Exact partials of the payoff sum
    sum_sq_partials : list[float]
        Exact partials of the squared payoff sum
    """

    batch_index: int
    start: int
    stop: int
    count: int = 0
    sum_partials: list[float] = field(default_factory=list)
    sum_sq_partials: list[float] = field(default_factory=list)

    def add(self, payoff: float) -> None:
        """
        Accumulate one raw payoff.

        Raises
        ------
        ValueError
            If the payoff is not finite
        OverflowError
            If the squared payoff, the batch sum or the squared sum overflows
        """
        if not math.isfinite(payoff):
            raise ValueError(f"non-finite payoff {payoff!r}")
        square = payoff * payoff
        if not math.isfinite(square):
            raise OverflowError(f"payoff {payoff!r} has no finite square")
        _add_exact(self.sum_partials, payoff)
        _add_exact(self.sum_sq_partials, square)
        self.count += 1

    @property
    def total(self) -> float:
        """Correctly rounded payoff sum of this batch."""
        return math.fsum(self.sum_partials)

    @property
    def total_sq(self) -> float:
        """Correctly rounded squared payoff sum of this batch."""
        return math.fsum(self.sum_sq_partials)


def split_batches(n_paths: int, n_batches: int) -> list[tuple[int, int]]:
    """
    Split path indices [0, n_paths) into near-equal contiguous batches.

    The remainder goes to the first batches, one extra path each.

    Examples
    --------
    >>> split_batches(10, 3)
    [(0, 4), (4, 7), (7, 10)]
    """
    if n_paths < 1:
        raise InvalidParameterError(f"CRITICAL: n_paths must be >= 1, got {n_paths}")
    if n_batches < 1:
        raise InvalidParameterError(f"CRITICAL: n_batches must be >= 1, got {n_batches}")

    n_batches = min(n_batches, n_paths)
    base, remainder = divmod(n_paths, n_batches)

    batches = []
    start = 0
    for i in range(n_batches):
        size = base + (1 if i < remainder else 0)
        batches.append((start, start + size))
        start += size
    return batches


def simulate_batch(
    params: SimulationParameters,
    batch_index: int,
    start: int,
    stop: int,
) -> PartialAccumulator:
    """
    Simulate and evaluate paths [start, stop) sequentially.

    Separate top-level function so it's pickleable by ProcessPoolExecutor.

    With params.antithetic, path i simulates the (+Z, -Z) pair from its own
    sub-stream and contributes the pair's mean payoff as one sample.

    Raises
    ------
    SimulationFailureError
        On the first non-finite price, payoff or running sum; the batch is
        abandoned
    """
    acc = PartialAccumulator(batch_index=batch_index, start=start, stop=stop)

    for stream in iter_streams(params.seed, start, stop):
        if params.antithetic:
            paths = simulate_antithetic_paths(params, stream)
        else:
            paths = (simulate_path(params, stream),)

        payoffs = []
        for extrema in paths:
            if not extrema.is_finite:
                raise SimulationFailureError(
                    f"CRITICAL: non-finite price on path {stream.index}: {extrema}",
                    path_index=stream.index,
                )
            payoffs.append(lookback_payoff(extrema.minimum, extrema.maximum, extrema.terminal, params))

        payoff = sum(payoffs) / len(payoffs)
        if not math.isfinite(payoff):
            raise SimulationFailureError(
                f"CRITICAL: non-finite payoff on path {stream.index}: {payoff}",
                path_index=stream.index,
            )
        try:
            acc.add(payoff)
        except OverflowError as e:
            raise SimulationFailureError(
                f"CRITICAL: payoff statistics overflow at path {stream.index}: {e}",
                path_index=stream.index,
            ) from e

    return acc


def reduce_accumulators(
    accumulators: Iterable[PartialAccumulator],
    n_paths: int,
) -> tuple[float, float]:
    """
    Merge batch statistics in fixed batch-index order.

    Parameters
    ----------
    accumulators : Iterable[PartialAccumulator]
        One accumulator per batch, in any order
    n_paths : int
        Expected total path count M

    Returns
    -------
    tuple[float, float]
        (global payoff sum, global squared payoff sum)

    Raises
    ------
    InternalReductionError
        If the merged count differs from M
    SimulationFailureError
        If the global sums overflow
    """
    ordered = sorted(accumulators, key=lambda acc: acc.batch_index)

    total_count = sum(acc.count for acc in ordered)
    if total_count != n_paths:
        raise InternalReductionError(
            f"CRITICAL: merged path count {total_count} != expected {n_paths}"
        )

    try:
        global_sum = math.fsum(chain.from_iterable(acc.sum_partials for acc in ordered))
        global_sum_sq = math.fsum(chain.from_iterable(acc.sum_sq_partials for acc in ordered))
    except OverflowError as e:
        raise SimulationFailureError(f"CRITICAL: payoff statistics overflow in reduction: {e}") from e

    if not (math.isfinite(global_sum) and math.isfinite(global_sum_sq)):
        raise SimulationFailureError(
            f"CRITICAL: non-finite reduced sums: sum={global_sum}, sum_sq={global_sum_sq}"
        )
    return global_sum, global_sum_sq


class ParallelAggregator:
    """
    Parallel Monte Carlo driver.

    Parameters
    ----------
    n_workers : int, optional
        Worker pool size (None = params.n_workers, then SETTINGS, then CPU count)
    executor : str, optional
        "process" or "thread" (default from SETTINGS)
    z_score : float, optional
        Normal quantile for the confidence bounds

    Examples
    --------
    >>> params = SimulationParameters(spot=100, volatility=0.2, rate=0.05, dividend=0.0,
    ...     maturity=1.0, n_steps=252, n_paths=100_000, variant="fixed_call", strike=100)
    >>> result = ParallelAggregator(n_workers=4).run(params)
    >>> print(f"Price: {result.price:.4f} ± {result.standard_error:.4f}")
    """

    def __init__(
        self,
        n_workers: Optional[int] = None,
        executor: Optional[str] = None,
        z_score: Optional[float] = None,
    ):
        if n_workers is not None and (
            isinstance(n_workers, bool) or not isinstance(n_workers, int) or n_workers < 1
        ):
            raise InvalidParameterError(f"CRITICAL: n_workers must be >= 1, got {n_workers}")
        executor = executor or SETTINGS.simulation.executor
        if executor not in ("process", "thread"):
            raise InvalidParameterError(
                f"CRITICAL: executor must be 'process' or 'thread', got {executor!r}"
            )

        self.n_workers = n_workers
        self.executor = executor
        self.z_score = z_score

    def resolve_workers(self, params: SimulationParameters) -> int:
        """Effective worker count for a run, never more than the path count."""
        requested = self.n_workers if self.n_workers is not None else params.n_workers
        return max(1, min(SETTINGS.simulation.resolve_workers(requested), params.n_paths))

    def run(self, params: SimulationParameters) -> PricingResult:
        """
        Price a lookback option.

        Parameters
        ----------
        params : SimulationParameters
            Validated run parameters

        Returns
        -------
        PricingResult
            Discounted price, standard error and confidence bounds

        Raises
        ------
        InsufficientSamplesError
            If M < 2, before any simulation work
        SimulationFailureError
            If any path produces a non-finite value
        InternalReductionError
            If merged counts do not equal M
        """
        if params.n_paths < 2:
            raise InsufficientSamplesError(
                f"CRITICAL: at least 2 paths are required for a variance estimate, "
                f"got {params.n_paths}"
            )

        start_time = time.time()
        n_workers = self.resolve_workers(params)
        batches = split_batches(params.n_paths, n_workers)

        logger.info(
            f"Pricing {params.variant.value} lookback: {params.n_paths} paths x "
            f"{params.n_steps} steps on {n_workers} {self.executor} worker(s)"
        )

        if n_workers == 1:
            accumulators = [simulate_batch(params, 0, *batches[0])]
        else:
            accumulators = self._run_parallel(params, batches, n_workers)

        global_sum, global_sum_sq = reduce_accumulators(accumulators, params.n_paths)
        result = finalize(global_sum, global_sum_sq, params.n_paths, params, self.z_score)

        execution_time = time.time() - start_time
        logger.info(
            f"Completed in {execution_time:.2f}s: "
            f"price={result.price:.6f} ± {result.standard_error:.6f}"
        )
        return result

    def _make_executor(self, n_workers: int) -> Executor:
        if self.executor == "thread":
            return ThreadPoolExecutor(max_workers=n_workers)
        return ProcessPoolExecutor(max_workers=n_workers)

    def _run_parallel(
        self,
        params: SimulationParameters,
        batches: list[tuple[int, int]],
        n_workers: int,
    ) -> list[PartialAccumulator]:
        """Run batches in a worker pool, collecting results in batch order."""
        accumulators: list[PartialAccumulator] = []

        with self._make_executor(n_workers) as executor:
            futures = []
            for batch_index, (start, stop) in enumerate(batches):
                logger.debug(f"  Batch {batch_index}: paths [{start}, {stop})")
                futures.append(executor.submit(simulate_batch, params, batch_index, start, stop))

            try:
                # Ordered join: completion order never affects the reduction
                for future in futures:
                    accumulators.append(future.result())
                    logger.debug(f"  Completed batch {accumulators[-1].batch_index}")
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        return accumulators


def run(params: SimulationParameters, n_workers: Optional[int] = None) -> PricingResult:
    """
    Convenience function: price with a default-configured aggregator.

    Parameters
    ----------
    params : SimulationParameters
        Validated run parameters
    n_workers : int, optional
        Worker pool size override

    Returns
    -------
    PricingResult
        Monte Carlo pricing result
    """
    return ParallelAggregator(n_workers=n_workers).run(params)
