"""
Monte Carlo price and error estimation.

Turns globally reduced payoff statistics into a discounted price, standard
error and confidence interval. Discounting is applied here, once.

[T1] price = exp(-rT) * mean(payoff)
[T1] SE = exp(-rT) * sqrt(s² / M), s² the unbiased sample variance

See: Glasserman (2003) Ch. 1.1 - Monte Carlo error estimates
"""

import math
from dataclasses import dataclass
from typing import Optional

from lookback_pricing.config.settings import SETTINGS
from lookback_pricing.errors import (
    InsufficientSamplesError,
    InvalidParameterError,
    SimulationFailureError,
)
from lookback_pricing.options.simulation.gbm import SimulationParameters


@dataclass(frozen=True)
class PricingResult:
    """
    Monte Carlo pricing result.

    Attributes
    ----------
    price : float
        Option price (discounted expected payoff)
    standard_error : float
        Standard error of the estimate
    lower_bound : float
        price - z * standard_error
    upper_bound : float
        price + z * standard_error
    n_paths : int
        Number of paths used
    z_score : float
        Normal quantile used for the bounds
    discount_factor : float
        Discount factor used
    """

    price: float
    standard_error: float
    lower_bound: float
    upper_bound: float
    n_paths: int
    z_score: float
    discount_factor: float

    @property
    def confidence_interval(self) -> tuple[float, float]:
        """(lower_bound, upper_bound)."""
        return (self.lower_bound, self.upper_bound)

    @property
    def ci_width(self) -> float:
        """Width of the confidence interval."""
        return self.upper_bound - self.lower_bound

    @property
    def relative_error(self) -> float:
        """Relative standard error (SE / price)."""
        if abs(self.price) < 1e-10:
            return float("inf")
        return self.standard_error / abs(self.price)

    def as_tuple(self) -> tuple[float, float, float, float]:
        """(price, standard_error, lower_bound, upper_bound)."""
        return (self.price, self.standard_error, self.lower_bound, self.upper_bound)


def finalize(
    global_sum: float,
    global_sum_sq: float,
    n_paths: int,
    params: SimulationParameters,
    z_score: Optional[float] = None,
) -> PricingResult:
    """
    Compute the pricing result from reduced payoff statistics.

    Parameters
    ----------
    global_sum : float
        Sum of raw payoffs over all paths
    global_sum_sq : float
        Sum of squared raw payoffs over all paths
    n_paths : int
        Number of paths M
    params : SimulationParameters
        Run parameters (rate and maturity for discounting)
    z_score : float, optional
        Normal quantile for the bounds (default 1.959964, 95%)

    Returns
    -------
    PricingResult
        Price, standard error and confidence bounds

    Raises
    ------
    InsufficientSamplesError
        If M < 2 (sample variance undefined)
    SimulationFailureError
        If the sums or the derived variance are not finite
    """
    if n_paths < 2:
        raise InsufficientSamplesError(
            f"CRITICAL: at least 2 paths are required for a variance estimate, got {n_paths}"
        )
    if z_score is None:
        z_score = SETTINGS.simulation.default_z_score
    if not math.isfinite(z_score) or z_score < 0:
        raise InvalidParameterError(f"CRITICAL: z_score must be finite and >= 0, got {z_score}")

    if not (math.isfinite(global_sum) and math.isfinite(global_sum_sq)):
        raise SimulationFailureError(
            f"CRITICAL: non-finite payoff sums: sum={global_sum}, sum_sq={global_sum_sq}"
        )

    df = params.discount_factor

    raw_mean = global_sum / n_paths
    # Unbiased sample variance; cancellation can leave a tiny negative value
    variance = (global_sum_sq / n_paths - raw_mean * raw_mean) * n_paths / (n_paths - 1)
    if not math.isfinite(variance):
        raise SimulationFailureError(f"CRITICAL: non-finite payoff variance {variance}")
    variance = max(0.0, variance)

    price = df * raw_mean
    se = df * math.sqrt(variance / n_paths)

    return PricingResult(
        price=price,
        standard_error=se,
        lower_bound=price - z_score * se,
        upper_bound=price + z_score * se,
        n_paths=n_paths,
        z_score=z_score,
        discount_factor=df,
    )
