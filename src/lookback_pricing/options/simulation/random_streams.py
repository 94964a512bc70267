"""
Deterministic, non-overlapping random sub-streams.

Each sub-stream is derived from (seed, index) through NumPy's SeedSequence
spawn tree: stream i is exactly the i-th child of SeedSequence(seed), so it
can be rebuilt anywhere (any worker, any process) without coordination and
without a shared global generator.

[T1] Children of a SeedSequence are statistically independent and their
PCG64 state sequences do not overlap.

See: O'Neill (2014) "PCG: A Family of Simple Fast Space-Efficient
Statistically Good Algorithms for Random Number Generation"
"""

from typing import Iterator, Optional

import numpy as np

from lookback_pricing.errors import InvalidParameterError


def validate_seed(seed: object) -> int:
    """
    Validate a root seed.

    Raises
    ------
    InvalidParameterError
        If seed is absent, not an integer, or negative
    """
    if seed is None:
        raise InvalidParameterError("CRITICAL: seed is required for reproducible streams")
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise InvalidParameterError(f"CRITICAL: seed must be an integer, got {seed!r}")
    if seed < 0:
        raise InvalidParameterError(f"CRITICAL: seed must be >= 0, got {seed}")
    return int(seed)


class RandomSubStream:
    """
    One independent segment of the pseudo-random sequence.

    Owned by exactly one unit of work; advances only through draws.

    Parameters
    ----------
    seed : int
        Root seed shared by all sub-streams of a run
    index : int
        Sub-stream index (the global path index)
    """

    __slots__ = ("seed", "index", "_generator", "_draws")

    def __init__(self, seed: int, index: int):
        if index < 0:
            raise InvalidParameterError(f"CRITICAL: stream index must be >= 0, got {index}")
        self.seed = seed
        self.index = index
        sequence = np.random.SeedSequence(entropy=seed, spawn_key=(index,))
        self._generator = np.random.Generator(np.random.PCG64(sequence))
        self._draws = 0

    @property
    def draws(self) -> int:
        """Number of variates drawn so far."""
        return self._draws

    def standard_normal(self, size: Optional[int] = None):
        """
        Draw standard normal variates.

        Parameters
        ----------
        size : int, optional
            Number of variates; a scalar float is returned when omitted

        Returns
        -------
        float or np.ndarray
        """
        if size is None:
            self._draws += 1
            return float(self._generator.standard_normal())
        self._draws += size
        return self._generator.standard_normal(size)

    def __repr__(self) -> str:
        return f"RandomSubStream(seed={self.seed}, index={self.index}, draws={self._draws})"


def iter_streams(seed: int, start: int, stop: int) -> Iterator[RandomSubStream]:
    """
    Lazily yield sub-streams for indices [start, stop).

    Only one stream is alive at a time for a sequential consumer, so a
    batch never materializes O(batch size) generators.
    """
    seed = validate_seed(seed)
    for index in range(start, stop):
        yield RandomSubStream(seed, index)


def create_streams(seed: int, count: int) -> list[RandomSubStream]:
    """
    Create `count` ordered sub-streams for a root seed.

    Parameters
    ----------
    seed : int
        Root seed (non-negative integer)
    count : int
        Number of sub-streams

    Returns
    -------
    list[RandomSubStream]
        Stream i is bound to index i

    Raises
    ------
    InvalidParameterError
        If seed is absent/malformed or count <= 0

    Examples
    --------
    >>> streams = create_streams(seed=42, count=4)
    >>> [s.index for s in streams]
    [0, 1, 2, 3]
    """
    seed = validate_seed(seed)
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count <= 0:
        raise InvalidParameterError(f"CRITICAL: count must be a positive integer, got {count!r}")
    return list(iter_streams(seed, 0, int(count)))
