"""
Host interface adapter for lookback pricing.

Narrow, synchronous entry point for foreign hosts (spreadsheets, C callers):
scalars in, one fixed-size response out. Exceptions never cross this
boundary; every call yields exactly one status, and a price is never
returned together with an error.

Stateless: identical inputs give identical responses.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

from lookback_pricing.errors import StatusCode, status_for
from lookback_pricing.options.payoffs.lookback import OptionVariant
from lookback_pricing.options.simulation.aggregator import ParallelAggregator
from lookback_pricing.options.simulation.gbm import SimulationParameters

logger = logging.getLogger(__name__)

_NAN = float("nan")


@dataclass(frozen=True)
class PricingResponse:
    """
    Fixed-size boundary response.

    Attributes
    ----------
    status : int
        StatusCode value (0 = OK)
    message : str
        Empty on success, error description otherwise
    price : float
        Discounted price (NaN on error)
    standard_error : float
        Standard error (NaN on error)
    lower_bound : float
        Lower confidence bound (NaN on error)
    upper_bound : float
        Upper confidence bound (NaN on error)
    """

    status: int
    message: str = ""
    price: float = _NAN
    standard_error: float = _NAN
    lower_bound: float = _NAN
    upper_bound: float = _NAN

    @property
    def ok(self) -> bool:
        """Whether the call succeeded."""
        return self.status == StatusCode.OK

    def as_tuple(self) -> tuple[float, float, float, float]:
        """(price, standard_error, lower_bound, upper_bound)."""
        return (self.price, self.standard_error, self.lower_bound, self.upper_bound)


def validate_parameters(
    spot: float,
    volatility: float,
    rate: float,
    dividend: float,
    maturity: float,
    strike: Optional[float],
    variant: Union[OptionVariant, str],
    paths: int,
    steps: int,
    seed: int,
    worker_count: Optional[int] = None,
    antithetic: bool = False,
) -> SimulationParameters:
    """
    Build validated parameters from boundary scalars.

    Floating-strike variants ignore any supplied strike.

    Raises
    ------
    InvalidParameterError
        On the first violated invariant
    """
    return SimulationParameters(
        spot=spot,
        volatility=volatility,
        rate=rate,
        dividend=dividend,
        maturity=maturity,
        n_steps=steps,
        n_paths=paths,
        variant=variant,
        strike=strike,
        seed=seed,
        n_workers=worker_count,
        antithetic=antithetic,
    )


def price_lookback_option(
    spot: float,
    volatility: float,
    rate: float,
    dividend: float,
    maturity: float,
    strike: Optional[float],
    variant: Union[OptionVariant, str],
    paths: int,
    steps: int,
    seed: int,
    worker_count: Optional[int] = None,
    antithetic: bool = False,
) -> PricingResponse:
    """
    Price a lookback option for a foreign host.

    Parameters
    ----------
    spot : float
        Initial spot price (> 0)
    volatility : float
        Volatility (>= 0)
    rate : float
        Risk-free rate (decimal)
    dividend : float
        Dividend yield (decimal)
    maturity : float
        Time to expiry in years (> 0)
    strike : float or None
        Strike for fixed-strike variants; ignored for floating-strike
    variant : OptionVariant or str
        "fixed_call", "fixed_put", "floating_call" or "floating_put"
    paths : int
        Number of Monte Carlo paths (>= 2)
    steps : int
        Monitoring steps per path (>= 1)
    seed : int
        Root random seed (>= 0)
    worker_count : int, optional
        Worker pool size (None = auto)
    antithetic : bool, default False
        Use antithetic variates for variance reduction

    Returns
    -------
    PricingResponse
        Either status OK with price fields, or an error status and message
        with NaN price fields

    Examples
    --------
    >>> response = price_lookback_option(100, 0.2, 0.05, 0.0, 1.0, 100, "fixed_call",
    ...     paths=10_000, steps=252, seed=42, worker_count=4)
    >>> response.ok
    True
    """
    try:
        # Fail fast: all validation happens before any worker starts
        params = validate_parameters(
            spot, volatility, rate, dividend, maturity, strike, variant, paths, steps, seed,
            worker_count, antithetic,
        )
        result = ParallelAggregator(n_workers=params.n_workers).run(params)
    except Exception as e:
        status = status_for(e)
        message = getattr(e, "message", None) or f"{type(e).__name__}: {e}"
        logger.warning(f"Lookback pricing failed with status {status.name}: {message}")
        return PricingResponse(status=int(status), message=message)

    if not all(math.isfinite(v) for v in result.as_tuple()):
        message = f"CRITICAL: non-finite pricing result {result.as_tuple()}"
        logger.warning(message)
        return PricingResponse(status=int(StatusCode.SIMULATION_FAILURE), message=message)

    return PricingResponse(
        status=int(StatusCode.OK),
        price=result.price,
        standard_error=result.standard_error,
        lower_bound=result.lower_bound,
        upper_bound=result.upper_bound,
    )
