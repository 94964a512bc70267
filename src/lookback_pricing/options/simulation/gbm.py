"""
Geometric Brownian Motion path simulation with running extrema.

Implements single-path simulation for lookback pricing:
- Log-Euler (exact log-normal) stepping
- Running minimum/maximum tracking, S0 included
- NumPy vectorized operations within a path

[T1] GBM SDE: dS = (r - q)S dt + σS dW
[T1] S(t+dt) = S(t) * exp((r - q - σ²/2)dt + σ√dt * Z)

See: Glasserman (2003) "Monte Carlo Methods in Financial Engineering"
"""

from dataclasses import dataclass, replace
from typing import Any, Optional, Union

import numpy as np

from lookback_pricing.config.settings import SETTINGS
from lookback_pricing.errors import InvalidParameterError
from lookback_pricing.options.payoffs.lookback import OptionVariant
from lookback_pricing.options.simulation.random_streams import RandomSubStream, validate_seed


def _require_finite(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidParameterError(f"CRITICAL: {name} must be a number, got {value!r}")
    if not np.isfinite(value):
        raise InvalidParameterError(f"CRITICAL: {name} must be finite, got {value}")


def _require_count(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidParameterError(f"CRITICAL: {name} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidParameterError(f"CRITICAL: {name} must be >= 1, got {value}")


@dataclass(frozen=True)
class SimulationParameters:
    """
    Parameters for one lookback pricing run. Validated once at construction.

    Attributes
    ----------
    spot : float
        Initial spot price S0 (> 0)
    volatility : float
        Volatility σ (annualized, decimal, >= 0)
    rate : float
        Risk-free rate r (annualized, decimal)
    dividend : float
        Dividend yield q (annualized, decimal)
    maturity : float
        Time to expiry T in years (> 0)
    n_steps : int
        Monitoring steps N per path (>= 1)
    n_paths : int
        Number of paths M (>= 1)
    variant : OptionVariant
        Fixed/floating strike × call/put
    strike : float, optional
        Strike K, required and > 0 for fixed-strike variants
    seed : int
        Root seed for the random sub-streams
    n_workers : int, optional
        Worker pool size (None = configuration/CPU default)
    antithetic : bool
        Use antithetic variates: each path index simulates the (+Z, -Z)
        pair from its own sub-stream and contributes the mean payoff
    """

    spot: float
    volatility: float
    rate: float
    dividend: float
    maturity: float
    n_steps: int
    n_paths: int
    variant: Union[OptionVariant, str]
    strike: Optional[float] = None
    seed: int = SETTINGS.simulation.default_seed
    n_workers: Optional[int] = None
    antithetic: bool = False

    def __post_init__(self) -> None:
        """Validate parameters."""
        for name in ("spot", "volatility", "rate", "dividend", "maturity"):
            _require_finite(name, getattr(self, name))
        if self.spot <= 0:
            raise InvalidParameterError(f"CRITICAL: spot must be > 0, got {self.spot}")
        if self.volatility < 0:
            raise InvalidParameterError(f"CRITICAL: volatility must be >= 0, got {self.volatility}")
        if self.volatility > SETTINGS.validation.max_volatility:
            raise InvalidParameterError(
                f"CRITICAL: volatility must be <= {SETTINGS.validation.max_volatility}, "
                f"got {self.volatility}"
            )
        if self.maturity <= 0:
            raise InvalidParameterError(f"CRITICAL: maturity must be > 0, got {self.maturity}")

        _require_count("n_steps", self.n_steps)
        _require_count("n_paths", self.n_paths)
        if self.n_steps > SETTINGS.validation.max_steps:
            raise InvalidParameterError(
                f"CRITICAL: n_steps must be <= {SETTINGS.validation.max_steps}, got {self.n_steps}"
            )

        try:
            variant = OptionVariant.parse(self.variant)
        except ValueError as e:
            raise InvalidParameterError(str(e)) from e
        # Frozen dataclass workaround: use object.__setattr__
        object.__setattr__(self, "variant", variant)

        if variant.is_fixed_strike:
            if self.strike is None:
                raise InvalidParameterError(
                    f"CRITICAL: strike is required for {variant.value} lookback"
                )
            _require_finite("strike", self.strike)
            if self.strike <= 0:
                raise InvalidParameterError(f"CRITICAL: strike must be > 0, got {self.strike}")
        else:
            # Floating strike: any supplied strike is ignored
            object.__setattr__(self, "strike", None)

        object.__setattr__(self, "seed", validate_seed(self.seed))

        if self.n_workers is not None:
            _require_count("n_workers", self.n_workers)
        if not isinstance(self.antithetic, (bool, np.bool_)):
            raise InvalidParameterError(
                f"CRITICAL: antithetic must be a bool, got {self.antithetic!r}"
            )
        object.__setattr__(self, "antithetic", bool(self.antithetic))

    @property
    def dt(self) -> float:
        """Time step: T / N."""
        return self.maturity / self.n_steps

    @property
    def drift(self) -> float:
        """Risk-neutral log drift: r - q - σ²/2."""
        return self.rate - self.dividend - 0.5 * self.volatility**2

    @property
    def forward(self) -> float:
        """Forward price: S * exp((r-q)*T)."""
        return self.spot * np.exp((self.rate - self.dividend) * self.maturity)

    @property
    def discount_factor(self) -> float:
        """Discount factor: exp(-r*T)."""
        return float(np.exp(-self.rate * self.maturity))

    def bumped(self, **changes: Any) -> "SimulationParameters":
        """Return a validated copy with some fields replaced."""
        return replace(self, **changes)


@dataclass
class PathState:
    """
    Transient state of one path under simulation.

    Created at the start of a path, owned by the task simulating it,
    discarded once its payoff is computed.
    """

    price: float
    running_min: float
    running_max: float
    step: int = 0

    @classmethod
    def start(cls, spot: float) -> "PathState":
        """Initial state: S0 is both the running minimum and maximum."""
        return cls(price=spot, running_min=spot, running_max=spot, step=0)

    def advance(self, prices: np.ndarray) -> None:
        """Fold a block of consecutive prices into the state."""
        self.price = float(prices[-1])
        self.running_min = min(self.running_min, float(prices.min()))
        self.running_max = max(self.running_max, float(prices.max()))
        self.step += len(prices)


@dataclass(frozen=True)
class PathExtrema:
    """
    Completed path summary.

    Attributes
    ----------
    terminal : float
        S(T)
    minimum : float
        min over {S0, S1, ..., S(T)}
    maximum : float
        max over {S0, S1, ..., S(T)}
    """

    terminal: float
    minimum: float
    maximum: float

    @property
    def is_finite(self) -> bool:
        """Whether all three values are finite."""
        return bool(np.isfinite(self.terminal) and np.isfinite(self.minimum) and np.isfinite(self.maximum))


def _path_extrema(params: SimulationParameters, z: np.ndarray) -> PathExtrema:
    """Build a path from a vector of standard normals and fold its extrema."""
    dt = params.dt
    drift_per_step = params.drift * dt
    vol_per_step = params.volatility * np.sqrt(dt)

    log_returns = drift_per_step + vol_per_step * z

    # S(t) = S(0) * exp(cumulative log-returns)
    # Overflow is reported by the caller's finiteness check, not as a warning
    with np.errstate(over="ignore", invalid="ignore"):
        prices = params.spot * np.exp(np.cumsum(log_returns))

    state = PathState.start(params.spot)
    state.advance(prices)

    return PathExtrema(
        terminal=state.price,
        minimum=state.running_min,
        maximum=state.running_max,
    )


def simulate_path(params: SimulationParameters, stream: RandomSubStream) -> PathExtrema:
    """
    Simulate one GBM path and track its running extrema.

    [T1] Uses exact log-normal stepping:
    S(i+1) = S(i) * exp((r - q - σ²/2)dt + σ√dt * Z(i))

    Parameters
    ----------
    params : SimulationParameters
        Validated run parameters
    stream : RandomSubStream
        Sub-stream owned by this path; advances by exactly n_steps draws

    Returns
    -------
    PathExtrema
        Terminal price, running minimum and running maximum

    Notes
    -----
    N=1 degenerates to the two-point path {S0, S(T)}.
    """
    return _path_extrema(params, stream.standard_normal(params.n_steps))


def simulate_antithetic_paths(
    params: SimulationParameters,
    stream: RandomSubStream,
) -> tuple[PathExtrema, PathExtrema]:
    """
    Simulate an antithetic pair of GBM paths from one draw vector.

    Antithetic variates: for each standard normal Z, also use -Z.
    Both paths come from the same n_steps draws, so the stream advances
    exactly as in simulate_path.

    Parameters
    ----------
    params : SimulationParameters
        Validated run parameters
    stream : RandomSubStream
        Sub-stream owned by this path index

    Returns
    -------
    tuple[PathExtrema, PathExtrema]
        Extrema of the +Z path and of the -Z path
    """
    z = stream.standard_normal(params.n_steps)
    return _path_extrema(params, z), _path_extrema(params, -z)
