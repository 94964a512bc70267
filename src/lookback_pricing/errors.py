"""
Error taxonomy for lookback option pricing.

Library code raises these exceptions; only the host interface adapter
(lookback_pricing.interface) turns them into status codes.

NEVER fails silently - a contaminated path aborts the whole run.
"""

from enum import IntEnum
from typing import Optional


class StatusCode(IntEnum):
    """Status codes surfaced across the host boundary."""

    OK = 0
    INVALID_PARAMETER = 1
    INSUFFICIENT_SAMPLES = 2
    SIMULATION_FAILURE = 3
    INTERNAL_REDUCTION_ERROR = 4
    UNEXPECTED = 99


class LookbackPricingError(Exception):
    """Base class for all pricing errors."""

    code: StatusCode = StatusCode.UNEXPECTED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __reduce__(self):
        # Keep subclass attributes when crossing a process pool
        return (self.__class__, (self.message,), self.__dict__.copy())


class InvalidParameterError(LookbackPricingError, ValueError):
    """Raised when an input violates a parameter invariant."""

    code = StatusCode.INVALID_PARAMETER


class InsufficientSamplesError(LookbackPricingError):
    """Raised when fewer than two paths are available for a variance estimate."""

    code = StatusCode.INSUFFICIENT_SAMPLES


class SimulationFailureError(LookbackPricingError):
    """
    Raised when a path produces a non-finite price or payoff.

    Attributes
    ----------
    path_index : int, optional
        Global index of the offending path
    """

    code = StatusCode.SIMULATION_FAILURE

    def __init__(self, message: str, path_index: Optional[int] = None):
        super().__init__(message)
        self.path_index = path_index


class InternalReductionError(LookbackPricingError):
    """Raised when merged accumulators do not account for every path."""

    code = StatusCode.INTERNAL_REDUCTION_ERROR


def status_for(exc: BaseException) -> StatusCode:
    """Map an exception to its boundary status code."""
    if isinstance(exc, LookbackPricingError):
        return exc.code
    return StatusCode.UNEXPECTED
