"""
Monte Carlo convergence analysis for lookback pricing.

[T1] Standard error shrinks at rate 1/√M (CLT): the log-log slope of SE
against M should be close to -0.5.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from lookback_pricing.errors import InvalidParameterError
from lookback_pricing.options.simulation.aggregator import ParallelAggregator
from lookback_pricing.options.simulation.gbm import SimulationParameters


def convergence_analysis(
    params: SimulationParameters,
    path_counts: Sequence[int] = (1000, 5000, 10000, 50000, 100000),
    aggregator: Optional[ParallelAggregator] = None,
) -> dict:
    """
    Price the same contract at increasing path counts.

    Parameters
    ----------
    params : SimulationParameters
        Base run parameters (n_paths is replaced by each count)
    path_counts : Sequence[int]
        Path counts to test, each >= 2
    aggregator : ParallelAggregator, optional
        Engine used for every run

    Returns
    -------
    dict
        "results": DataFrame with n_paths, price, standard_error, ci_width
        "convergence_rate": log-log slope of SE vs M (should be ~-0.5)
    """
    if len(path_counts) < 2:
        raise InvalidParameterError("CRITICAL: need at least 2 path counts to estimate a rate")

    aggregator = aggregator or ParallelAggregator()

    rows = []
    for n in path_counts:
        result = aggregator.run(params.bumped(n_paths=int(n)))
        rows.append(
            {
                "n_paths": int(n),
                "price": result.price,
                "standard_error": result.standard_error,
                "ci_width": result.ci_width,
            }
        )
    results = pd.DataFrame(rows, columns=["n_paths", "price", "standard_error", "ci_width"])

    return {
        "results": results,
        "convergence_rate": _estimate_convergence_rate(results),
    }


def _estimate_convergence_rate(results: pd.DataFrame) -> float:
    """
    Estimate convergence rate from results.

    [T1] Theory predicts rate = -0.5 (SE ~ 1/√M).
    """
    # Log-log regression: log(SE) = rate * log(M) + const
    log_n = np.log(results["n_paths"].to_numpy(dtype=float))
    log_se = np.log(results["standard_error"].to_numpy(dtype=float) + 1e-300)
    slope, _ = np.polyfit(log_n, log_se, 1)
    return float(slope)
