"""
Frozen configuration settings for lookback option pricing.

All configuration is immutable (frozen dataclasses) to ensure reproducibility.
See: lookback_pricing/config/tolerances.py for numerical tolerances.
"""

import os
from dataclasses import dataclass
from typing import Optional

# =============================================================================
# Simulation Configuration
# =============================================================================


def _resolve_n_workers() -> Optional[int]:
    """
    Resolve default worker count with environment variable override.

    Priority:
    1. LOOKBACK_N_WORKERS environment variable (if set)
    2. Default: None (auto-detect from CPU count at run time)

    Returns
    -------
    int or None
        Worker count, or None for auto-detection
    """
    env_workers = os.environ.get("LOOKBACK_N_WORKERS")
    if env_workers:
        return int(env_workers)
    return None


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable Monte Carlo configuration. [T1: Academic standard]

    Attributes
    ----------
    default_n_paths : int
        Number of Monte Carlo paths
    default_n_steps : int
        Monitoring steps per path (252 = daily for 1 year)
    default_seed : int
        Random seed for reproducibility
    default_z_score : float
        Two-sided normal quantile for confidence bounds (95%)
    n_workers : int, optional
        Worker pool size. Override with LOOKBACK_N_WORKERS environment variable.
    executor : str
        "process" or "thread" worker pool
    """

    default_n_paths: int = 100_000
    default_n_steps: int = 252  # [T1]
    default_seed: int = 42  # Reproducibility
    default_z_score: float = 1.959964  # [T1] 95% two-sided
    n_workers: Optional[int] = None  # Set in __post_init__
    executor: str = "process"

    def __post_init__(self) -> None:
        """Initialize n_workers using resolver function."""
        # Frozen dataclass workaround: use object.__setattr__
        if self.n_workers is None:
            object.__setattr__(self, "n_workers", _resolve_n_workers())
        if self.executor not in ("process", "thread"):
            raise ValueError(
                f"CRITICAL: executor must be 'process' or 'thread', got {self.executor!r}"
            )

    def resolve_workers(self, requested: Optional[int] = None) -> int:
        """
        Resolve the effective worker count.

        Explicit request wins, then configuration, then CPU count.
        """
        if requested is not None:
            return requested
        if self.n_workers is not None:
            return self.n_workers
        return os.cpu_count() or 1


# =============================================================================
# Greeks Configuration
# =============================================================================


@dataclass(frozen=True)
class GreeksConfig:
    """
    Immutable finite-difference bump configuration.

    Attributes
    ----------
    spot_bump_rel : float
        Relative spot bump for delta/gamma (1% of spot)
    vol_bump : float
        Absolute volatility bump for vega
    rate_bump : float
        Absolute rate bump for rho (1bp)
    time_bump : float
        Maturity bump for theta, in years (1 day)
    """

    spot_bump_rel: float = 0.01
    vol_bump: float = 0.01
    rate_bump: float = 0.0001
    time_bump: float = 1.0 / 365.0


# =============================================================================
# Validation Configuration
# =============================================================================


@dataclass(frozen=True)
class ValidationConfig:
    """
    Immutable input sanity caps. [T2]

    Attributes
    ----------
    max_volatility : float
        Upper bound on annualized volatility (500%)
    max_steps : int
        Upper bound on monitoring steps per path
    """

    max_volatility: float = 5.0
    max_steps: int = 100_000


# =============================================================================
# Master Configuration
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """
    Master frozen configuration combining all sub-configs.

    Usage
    -----
    >>> from lookback_pricing.config.settings import SETTINGS
    >>> SETTINGS.simulation.default_z_score
    1.959964
    """

    simulation: SimulationConfig = SimulationConfig()
    greeks: GreeksConfig = GreeksConfig()
    validation: ValidationConfig = ValidationConfig()


# Singleton instance - import this
SETTINGS = Settings()
