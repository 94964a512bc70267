"""
Closed-form lookback option prices under continuous monitoring.

Used as a reference for the Monte Carlo engine. Valid at inception, when the
running extremum equals the current spot.

References
----------
[T1] Goldman, M. B., Sosin, H. B., & Gatto, M. A. (1979). Path dependent
     options: "Buy at the low, sell at the high". Journal of Finance.
[T1] Conze, A., & Viswanathan (1991). Path dependent options: the case of
     lookback options. Journal of Finance.
[T1] Broadie, M., Glasserman, P., & Kou, S. G. (1999). Connecting discrete
     and continuous path-dependent options. Finance and Stochastics.
[T1] Haug, E. G. (2007). The Complete Guide to Option Pricing Formulas, 4.15.
"""

from typing import Optional, Union

import numpy as np
from scipy import stats

from lookback_pricing.options.payoffs.lookback import OptionVariant

#: [T1] BGK constant: -zeta(1/2) / sqrt(2*pi)
BGK_BETA = 0.5826

#: Cost of carry below which the σ²/(2b) terms are singular
_MIN_CARRY = 1e-10


def _validate_inputs(
    spot: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> None:
    """Validate closed-form inputs."""
    if spot <= 0:
        raise ValueError(f"CRITICAL: spot must be > 0, got {spot}")
    if volatility <= 0:
        raise ValueError(f"CRITICAL: volatility must be > 0, got {volatility}")
    if time_to_expiry <= 0:
        raise ValueError(f"CRITICAL: time_to_expiry must be > 0, got {time_to_expiry}")
    if abs(rate - dividend) < _MIN_CARRY:
        raise ValueError(
            f"CRITICAL: closed form needs rate != dividend, got rate={rate}, dividend={dividend}"
        )


def _reflection_term(
    spot: float,
    extremum: float,
    carry: float,
    rate: float,
    volatility: float,
    time_to_expiry: float,
    d: float,
    sign: float,
) -> float:
    """
    Reflection-principle term shared by all four formulas.

    [T1] S e^(-rT) σ²/(2b) * sign * [ (S/X)^(-2b/σ²) N(sign*(-d + 2b√T/σ))
                                      - e^(bT) N(-sign*d) ]
    """
    sqrt_t = np.sqrt(time_to_expiry)
    ratio = volatility**2 / (2.0 * carry)
    shift = 2.0 * carry * sqrt_t / volatility
    power = (spot / extremum) ** (-2.0 * carry / volatility**2)

    bracket = power * stats.norm.cdf(sign * (-d + shift)) - np.exp(carry * time_to_expiry) * stats.norm.cdf(
        -sign * d
    )
    return spot * np.exp(-rate * time_to_expiry) * ratio * sign * bracket


def _d1(spot: float, level: float, carry: float, volatility: float, time_to_expiry: float) -> float:
    """[T1] d1 = (ln(S/X) + (b + σ²/2)T) / (σ√T)"""
    return (np.log(spot / level) + (carry + 0.5 * volatility**2) * time_to_expiry) / (
        volatility * np.sqrt(time_to_expiry)
    )


def floating_strike_call(
    spot: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """
    Floating strike lookback call, payoff S(T) - min S(t).

    [T1] c = S e^((b-r)T) N(a1) - S e^(-rT) N(a2)
             + S e^(-rT) σ²/(2b) [ N(-a1 + 2b√T/σ) - e^(bT) N(-a1) ]

    Examples
    --------
    >>> round(floating_strike_call(100, 0.05, 0.0, 0.20, 1.0), 2)
    17.22
    """
    _validate_inputs(spot, rate, dividend, volatility, time_to_expiry)
    b = rate - dividend
    T = time_to_expiry

    a1 = _d1(spot, spot, b, volatility, T)
    a2 = a1 - volatility * np.sqrt(T)

    price = (
        spot * np.exp((b - rate) * T) * stats.norm.cdf(a1)
        - spot * np.exp(-rate * T) * stats.norm.cdf(a2)
        + _reflection_term(spot, spot, b, rate, volatility, T, a1, sign=1.0)
    )
    return float(price)


def floating_strike_put(
    spot: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """
    Floating strike lookback put, payoff max S(t) - S(T).

    [T1] p = S e^(-rT) N(-b2) - S e^((b-r)T) N(-b1)
             + S e^(-rT) σ²/(2b) [ -N(b1 - 2b√T/σ) + e^(bT) N(b1) ]
    """
    _validate_inputs(spot, rate, dividend, volatility, time_to_expiry)
    b = rate - dividend
    T = time_to_expiry

    b1 = _d1(spot, spot, b, volatility, T)
    b2 = b1 - volatility * np.sqrt(T)

    price = (
        spot * np.exp(-rate * T) * stats.norm.cdf(-b2)
        - spot * np.exp((b - rate) * T) * stats.norm.cdf(-b1)
        + _reflection_term(spot, spot, b, rate, volatility, T, b1, sign=-1.0)
    )
    return float(price)


def fixed_strike_call(
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """
    Fixed strike lookback call, payoff max(0, max S(t) - K).

    [T1] Out of the money (K > S): priced off the strike.
    [T1] In the money (K <= S): e^(-rT)(S - K) plus the ATM lookback on S.
    """
    _validate_inputs(spot, rate, dividend, volatility, time_to_expiry)
    if strike <= 0:
        raise ValueError(f"CRITICAL: strike must be > 0, got {strike}")
    b = rate - dividend
    T = time_to_expiry

    level = max(strike, spot)
    d1 = _d1(spot, level, b, volatility, T)
    d2 = d1 - volatility * np.sqrt(T)

    intrinsic = np.exp(-rate * T) * max(spot - strike, 0.0)
    price = (
        intrinsic
        + spot * np.exp((b - rate) * T) * stats.norm.cdf(d1)
        - level * np.exp(-rate * T) * stats.norm.cdf(d2)
        + _reflection_term(spot, level, b, rate, volatility, T, d1, sign=-1.0)
    )
    return float(price)


def fixed_strike_put(
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """
    Fixed strike lookback put, payoff max(0, K - min S(t)).

    [T1] Out of the money (K < S): priced off the strike.
    [T1] In the money (K >= S): e^(-rT)(K - S) plus the ATM lookback on S.
    """
    _validate_inputs(spot, rate, dividend, volatility, time_to_expiry)
    if strike <= 0:
        raise ValueError(f"CRITICAL: strike must be > 0, got {strike}")
    b = rate - dividend
    T = time_to_expiry

    level = min(strike, spot)
    d1 = _d1(spot, level, b, volatility, T)
    d2 = d1 - volatility * np.sqrt(T)

    intrinsic = np.exp(-rate * T) * max(strike - spot, 0.0)
    price = (
        intrinsic
        + level * np.exp(-rate * T) * stats.norm.cdf(-d2)
        - spot * np.exp((b - rate) * T) * stats.norm.cdf(-d1)
        + _reflection_term(spot, level, b, rate, volatility, T, d1, sign=1.0)
    )
    return float(price)


def lookback_price_analytical(
    spot: float,
    strike: Optional[float],
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
    variant: Union[OptionVariant, str],
    n_steps: Optional[int] = None,
) -> float:
    """
    Price a lookback option in closed form.

    Parameters
    ----------
    spot : float
        Current spot price (also the running extremum)
    strike : float, optional
        Strike price, required for fixed-strike variants
    rate : float
        Risk-free rate (decimal)
    dividend : float
        Dividend yield (decimal)
    volatility : float
        Volatility (decimal)
    time_to_expiry : float
        Time to expiry (years)
    variant : OptionVariant or str
        Lookback variant
    n_steps : int, optional
        Number of monitoring dates. When given, applies the Broadie-
        Glasserman-Kou correction: discrete extrema ≈ continuous extrema
        shifted by exp(∓βσ√dt).

    Returns
    -------
    float
        Option price
    """
    variant = OptionVariant.parse(variant)
    if variant.is_fixed_strike and strike is None:
        raise ValueError(f"CRITICAL: strike is required for {variant.value} lookback")

    shift = 0.0
    if n_steps is not None:
        if n_steps < 1:
            raise ValueError(f"CRITICAL: n_steps must be >= 1, got {n_steps}")
        shift = BGK_BETA * volatility * np.sqrt(time_to_expiry / n_steps)
    up = np.exp(shift)
    args = (rate, dividend, volatility, time_to_expiry)

    # Discounted forward: e^(-rT) E[S(T)]
    discounted_forward = spot * np.exp(-dividend * time_to_expiry)

    if variant == OptionVariant.FIXED_CALL:
        # max_disc ≈ max_cont / up  =>  (M/up - K)+ = (M - K up)+ / up
        return float(fixed_strike_call(spot, strike * up, *args) / up)
    if variant == OptionVariant.FIXED_PUT:
        # min_disc ≈ min_cont * up  =>  (K - m up)+ = up (K/up - m)+
        return float(fixed_strike_put(spot, strike / up, *args) * up)
    if variant == OptionVariant.FLOATING_CALL:
        discounted_min = discounted_forward - floating_strike_call(spot, *args)
        return float(discounted_forward - up * discounted_min)
    discounted_max = floating_strike_put(spot, *args) + discounted_forward
    return float(discounted_max / up - discounted_forward)
