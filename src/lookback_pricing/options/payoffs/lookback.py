"""
Lookback option payoffs.

The variant set is closed: fixed/floating strike × call/put, all European
exercise. Payoffs are raw (undiscounted); discounting happens once, in the
pricing estimator.

[T1] Fixed call:     max(0, M - K)        M = running maximum
[T1] Fixed put:      max(0, K - m)        m = running minimum
[T1] Floating call:  S(T) - m
[T1] Floating put:   M - S(T)

See: Goldman, Sosin & Gatto (1979); Conze & Viswanathan (1991)
"""

from enum import Enum
from typing import Callable, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from lookback_pricing.options.simulation.gbm import SimulationParameters


class OptionVariant(Enum):
    """Lookback option variant enumeration."""

    FIXED_CALL = "fixed_call"
    FIXED_PUT = "fixed_put"
    FLOATING_CALL = "floating_call"
    FLOATING_PUT = "floating_put"

    @property
    def is_fixed_strike(self) -> bool:
        """Whether the payoff compares an extremum to a pre-agreed strike."""
        return self in (OptionVariant.FIXED_CALL, OptionVariant.FIXED_PUT)

    @property
    def is_call(self) -> bool:
        """Whether the variant is a call."""
        return self in (OptionVariant.FIXED_CALL, OptionVariant.FLOATING_CALL)

    @classmethod
    def parse(cls, value: Union["OptionVariant", str]) -> "OptionVariant":
        """
        Parse a variant from an enum member or a string.

        Accepts "fixed_call", "fixed-strike-call", "Floating Put", etc.

        Raises
        ------
        ValueError
            If the string does not name one of the four variants
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"CRITICAL: variant must be a string, got {type(value).__name__}")

        tokens = value.strip().lower().replace("-", " ").replace("_", " ").split()
        tokens = [t for t in tokens if t != "strike"]
        key = "_".join(tokens)
        for member in cls:
            if member.value == key:
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"CRITICAL: unknown lookback variant {value!r}. Valid: {valid}")


def _fixed_call(min_price: float, max_price: float, terminal: float, strike: Optional[float]) -> float:
    return max(0.0, max_price - strike)


def _fixed_put(min_price: float, max_price: float, terminal: float, strike: Optional[float]) -> float:
    return max(0.0, strike - min_price)


def _floating_call(min_price: float, max_price: float, terminal: float, strike: Optional[float]) -> float:
    return terminal - min_price


def _floating_put(min_price: float, max_price: float, terminal: float, strike: Optional[float]) -> float:
    return max_price - terminal


_PAYOFFS: dict[OptionVariant, Callable[[float, float, float, Optional[float]], float]] = {
    OptionVariant.FIXED_CALL: _fixed_call,
    OptionVariant.FIXED_PUT: _fixed_put,
    OptionVariant.FLOATING_CALL: _floating_call,
    OptionVariant.FLOATING_PUT: _floating_put,
}


def lookback_payoff(
    min_price: float,
    max_price: float,
    terminal_price: float,
    params: "SimulationParameters",
) -> float:
    """
    Calculate the raw (undiscounted) lookback payoff of one path.

    Pure function: no discounting, no side effects.

    Parameters
    ----------
    min_price : float
        Running minimum of the path (S0 included)
    max_price : float
        Running maximum of the path (S0 included)
    terminal_price : float
        Price at maturity
    params : SimulationParameters
        Supplies the variant and, for fixed-strike variants, the strike

    Returns
    -------
    float
        Raw payoff, always >= 0 for a consistent path

    Examples
    --------
    >>> params = SimulationParameters(spot=100, volatility=0.2, rate=0.05, dividend=0.0,
    ...     maturity=1.0, n_steps=10, n_paths=100, variant=OptionVariant.FIXED_CALL, strike=100)
    >>> lookback_payoff(90.0, 120.0, 110.0, params)
    20.0
    """
    return _PAYOFFS[params.variant](min_price, max_price, terminal_price, params.strike)
