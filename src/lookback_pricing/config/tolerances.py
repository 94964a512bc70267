"""
Centralized tolerance framework for lookback option pricing.

All tolerances are derived from precision requirements, not ad hoc tuning.

Tolerance Tiers:
    Tier 1 (Analytical): Machine-precision achievable, deterministic results
    Tier 3 (Stochastic): CLT-derived, path-dependent calculations

References:
    [T1] Higham (2002) "Accuracy and Stability of Numerical Algorithms"
    [T1] Glasserman (2003) Ch. 3-4 - Monte Carlo error bounds
    [T1] Broadie, Glasserman & Kou (1999) - Discrete monitoring correction
"""

from typing import Final

import numpy as np

# =============================================================================
# Tier 1: Analytical Tolerances (Deterministic)
# =============================================================================

#: Zero-volatility paths are deterministic; only log/exp rounding over
#: N steps separates MC from the closed form
ZERO_VOL_TOLERANCE: Final[float] = 1e-9

#: No-arbitrage bounds on lookback prices (price >= 0, floating >= 0)
ANTI_PATTERN_TOLERANCE: Final[float] = 1e-10

#: Near-zero maturity: T -> 0 collapses the payoff onto max(0, S0 - K)
NEAR_EXPIRY_TOLERANCE: Final[float] = 1e-2


# =============================================================================
# Tier 3: Stochastic Tolerances (CLT-Derived)
# =============================================================================


def mc_tolerance(n_paths: int, sigma: float = 0.20, confidence: float = 3.0) -> float:
    """
    Calculate CLT-derived Monte Carlo tolerance.

    [T1] Standard error of MC estimate is σ/√N.
    3σ gives 99.7% confidence interval.

    Parameters
    ----------
    n_paths : int
        Number of Monte Carlo paths
    sigma : float
        Estimated volatility of payoff (default 0.20)
    confidence : float
        Number of standard deviations (default 3 for 99.7% CI)

    Returns
    -------
    float
        Tolerance for MC vs analytical comparison
    """
    return confidence * sigma / np.sqrt(n_paths)


#: SE ratio band when M doubles: 1/√2 ≈ 0.7071 ± sampling noise of the SE itself
SE_HALVING_RATIO_TOLERANCE: Final[float] = 0.05

#: Discretely monitored MC vs continuous closed form (relative).
#: Daily monitoring biases extrema by ~0.5826σ√dt, plus CLT noise.
DISCRETE_MONITORING_TOLERANCE: Final[float] = 0.05

#: Finite-difference Greeks under common random numbers (relative)
GREEKS_MC_TOLERANCE: Final[float] = 0.10


# =============================================================================
# Tolerance Registry (For Dynamic Access)
# =============================================================================

TOLERANCE_REGISTRY: dict[str, float] = {
    "zero_vol": ZERO_VOL_TOLERANCE,
    "anti_pattern": ANTI_PATTERN_TOLERANCE,
    "near_expiry": NEAR_EXPIRY_TOLERANCE,
    "se_halving_ratio": SE_HALVING_RATIO_TOLERANCE,
    "discrete_monitoring": DISCRETE_MONITORING_TOLERANCE,
    "greeks_mc": GREEKS_MC_TOLERANCE,
}


def get_tolerance(name: str) -> float:
    """
    Get tolerance by name from registry.

    Parameters
    ----------
    name : str
        Tolerance name (see TOLERANCE_REGISTRY keys)

    Returns
    -------
    float
        Tolerance value

    Raises
    ------
    KeyError
        If tolerance name not found
    """
    if name not in TOLERANCE_REGISTRY:
        available = ", ".join(sorted(TOLERANCE_REGISTRY.keys()))
        raise KeyError(f"Unknown tolerance '{name}'. Available: {available}")
    return TOLERANCE_REGISTRY[name]
