"""
Configuration of a CCM analysis.

A ``CCMConfig`` is built once from the two series and the embedding and
sampling parameters, validated, and never modified afterwards. Library
sizes default to an ascending staircase spanning roughly 10%-100% of the
usable embedded points.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

DIRECTIONS = ('x_causes_y', 'y_causes_x')


def generate_lib_sizes(max_size: int) -> List[int]:
    """
    Default library sizes for a given number of embedded points.

    Parameters
    ----------
    max_size : int
        Largest usable library size, ``len(series) - (E-1)*tau``

    Returns
    -------
    list of int
        ``[max_size]`` when fewer than 10 points are available, otherwise
        the values from ``max(5, max_size // 10)`` up to ``max_size`` in
        steps of ``max(2, max_size // 20)``.

    Examples
    --------
    >>> generate_lib_sizes(100)[:3]
    [10, 15, 20]
    """
    if max_size < 10:
        return [max_size]

    start = max(5, max_size // 10)
    step = max(2, max_size // 20)

    return list(range(start, max_size + 1, step))


@dataclass(frozen=True, eq=False)
class CCMConfig:
    """
    Immutable settings of a bidirectional CCM analysis.

    Use ``make_config`` to build one; it validates the inputs and fills in
    the default library sizes. ``seed``, ``n_jobs`` and ``verbose`` only
    control how the bootstrap runs, never its result for a given seed.
    """

    x_series: np.ndarray
    y_series: np.ndarray
    embedding_dim: int = 3
    tau: int = 1
    lib_sizes: Tuple[int, ...] = ()
    num_samples: int = 100
    seed: Optional[int] = None
    n_jobs: int = 1
    verbose: bool = False

    @property
    def max_lib_size(self) -> int:
        return len(self.x_series) - (self.embedding_dim - 1) * self.tau


def _positive_int(name: str, value) -> int:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def _seed(value) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise ValueError(f"seed must be None or a non-negative integer, got {value!r}")
    if value < 0:
        raise ValueError(f"seed must be None or a non-negative integer, got {value!r}")
    return int(value)


def _as_series(name: str, values: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    series = np.array(values, dtype=float)
    if series.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {series.shape}")
    series.setflags(write=False)
    return series


def make_config(x_series: Union[Sequence[float], np.ndarray],
                y_series: Union[Sequence[float], np.ndarray],
                embedding_dim: int = 3,
                tau: int = 1,
                lib_sizes: Optional[Sequence[int]] = None,
                num_samples: int = 100,
                seed: Optional[int] = None,
                n_jobs: int = 1,
                verbose: bool = False) -> CCMConfig:
    """
    Validate inputs and build a CCM configuration.

    Parameters
    ----------
    x_series, y_series : array-like, shape (N,)
        The two observed series (must have the same length)
    embedding_dim : int, default 3
        Embedding dimension E
    tau : int, default 1
        Time delay between embedding coordinates
    lib_sizes : sequence of int or None
        Library sizes to test. If None, generated with
        ``generate_lib_sizes(len(x_series) - (E-1)*tau)``.
    num_samples : int, default 100
        Bootstrap trials per library size
    seed : int or None
        Base seed for all library draws (None = fresh entropy)
    n_jobs : int, default 1
        Worker processes for the bootstrap loop
    verbose : bool, default False
        Show progress and status messages

    Returns
    -------
    CCMConfig

    Raises
    ------
    ValueError
        If the series lengths differ, a series is not one-dimensional, a
        parameter is not a positive integer, or ``seed`` is negative or
        not an integer.
    """
    x = _as_series('x_series', x_series)
    y = _as_series('y_series', y_series)

    if len(x) != len(y):
        raise ValueError(
            f"x_series and y_series must have the same length ({len(x)} != {len(y)})"
        )

    embedding_dim = _positive_int('embedding_dim', embedding_dim)
    tau = _positive_int('tau', tau)
    num_samples = _positive_int('num_samples', num_samples)
    n_jobs = _positive_int('n_jobs', n_jobs)
    seed = _seed(seed)

    if lib_sizes is None:
        sizes = tuple(generate_lib_sizes(len(x) - (embedding_dim - 1) * tau))
    else:
        sizes = tuple(_positive_int('lib_sizes entry', s) for s in lib_sizes)
        if not sizes:
            raise ValueError("lib_sizes must contain at least one library size")

    if verbose:
        print(f"CCM config: N={len(x)}, E={embedding_dim}, tau={tau}, "
              f"{len(sizes)} library sizes, {num_samples} samples each")

    return CCMConfig(
        x_series=x,
        y_series=y,
        embedding_dim=embedding_dim,
        tau=tau,
        lib_sizes=sizes,
        num_samples=num_samples,
        seed=seed,
        n_jobs=n_jobs,
        verbose=bool(verbose),
    )
