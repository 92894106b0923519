"""
Surrogate time series generation for CCM null model testing.

Each generator returns ``n_surr`` randomized copies of a series that keep
some property of the original (amplitude distribution, autocorrelation,
power spectrum) while destroying its coupling to any other series.
"""

import numpy as np
from typing import Callable, Union
from tqdm import tqdm

SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]


def generate_random_surrogates(x: np.ndarray,
                               n_surr: int,
                               seed: SeedLike = None,
                               verbose: bool = False) -> np.ndarray:
    """
    Generate random-shuffled surrogates.

    Destroys all temporal structure while preserving amplitude distribution.

    Parameters
    ----------
    x : np.ndarray, shape (N,)
        Input time series
    n_surr : int
        Number of surrogates to generate
    seed : int, SeedSequence, Generator or None
        Source of randomness
    verbose : bool, default False
        Show progress bar

    Returns
    -------
    np.ndarray, shape (n_surr, N)
        Surrogate time series
    """
    rng = np.random.default_rng(seed)
    x = np.asarray(x, dtype=float)
    surrogates = np.zeros((n_surr, x.shape[0]), dtype=float)

    for k in tqdm(range(n_surr), desc="Random shuffle", disable=not verbose):
        surrogates[k] = rng.permutation(x)

    return surrogates


def generate_circular_surrogates(x: np.ndarray,
                                 n_surr: int,
                                 seed: SeedLike = None,
                                 exclude_zero_shift: bool = True,
                                 verbose: bool = False) -> np.ndarray:
    """
    Generate circularly shifted surrogates.

    Keeps the full autocorrelation structure of ``x`` and only moves its
    phase relative to the other series.

    Parameters
    ----------
    x : np.ndarray, shape (N,)
        Input time series
    n_surr : int
        Number of surrogates to generate
    seed : int, SeedSequence, Generator or None
        Source of randomness
    exclude_zero_shift : bool, default True
        Avoid the identity shift
    verbose : bool, default False
        Show progress bar

    Returns
    -------
    np.ndarray, shape (n_surr, N)
        Surrogate time series
    """
    rng = np.random.default_rng(seed)
    x = np.asarray(x, dtype=float)
    n = x.size
    surrogates = np.zeros((n_surr, n), dtype=float)

    for k in tqdm(range(n_surr), desc="Circular shift", disable=not verbose):
        if n == 0:
            continue

        if exclude_zero_shift and n > 1:
            shift = rng.integers(1, n)
        else:
            shift = rng.integers(0, n)

        surrogates[k] = np.roll(x, shift)

    return surrogates


def generate_iaaft_surrogates(x: np.ndarray,
                              n_surr: int,
                              seed: SeedLike = None,
                              tol_pc: float = 5.0,
                              max_iter: int = 1000,
                              verbose: bool = False) -> np.ndarray:
    """
    Generate Iterative Amplitude Adjusted Fourier Transform (IAAFT) surrogates.

    Preserves both power spectrum AND amplitude distribution.

    Parameters
    ----------
    x : np.ndarray, shape (N,)
        Input time series
    n_surr : int
        Number of surrogates to generate
    seed : int, SeedSequence, Generator or None
        Source of randomness
    tol_pc : float, default 5.0
        Stop once fewer than this percentage of ranks change per iteration
    max_iter : int, default 1000
        Maximum iterations per surrogate
    verbose : bool, default False
        Show progress bar

    Returns
    -------
    np.ndarray, shape (n_surr, N)
        IAAFT surrogate time series
    """
    rng = np.random.default_rng(seed)
    x = np.asarray(x, dtype=float)
    n = x.shape[0]
    surrogates = np.zeros((n_surr, n), dtype=float)

    if n == 0:
        return surrogates

    x_fft_amp = np.abs(np.fft.fft(x))
    x_sorted = np.sort(x)

    for k in tqdm(range(n_surr), desc="IAAFT surrogates", disable=not verbose):
        z = rng.permutation(x)
        r_curr = np.argsort(z, kind='stable')
        percent_unequal = 100.0
        count = 0

        while percent_unequal > tol_pc and count < max_iter:
            r_prev = r_curr

            # Impose the original amplitude spectrum, keep current phases
            phases = np.angle(np.fft.fft(z))
            z = np.real(np.fft.ifft(x_fft_amp * np.exp(1j * phases)))

            # Rescale to the original amplitude distribution
            r_curr = np.argsort(z, kind='stable')
            z[r_curr] = x_sorted

            percent_unequal = (r_curr != r_prev).sum() * 100.0 / n
            count += 1

        if count >= max_iter and verbose:
            print(f"Warning: max iterations reached for surrogate {k}")

        surrogates[k] = z

    return surrogates


SURROGATE_METHODS = {
    'random': generate_random_surrogates,
    'circular': generate_circular_surrogates,
    'iaaft': generate_iaaft_surrogates,
}


def get_surrogate_generator(method: str) -> Callable[..., np.ndarray]:
    """
    Look up a surrogate generator by name.

    Parameters
    ----------
    method : {'random', 'circular', 'iaaft'}

    Returns
    -------
    callable
        ``generator(x, n_surr, seed=None, verbose=False) -> (n_surr, N) array``
    """
    try:
        return SURROGATE_METHODS[method]
    except KeyError:
        raise ValueError(
            f"Unknown surrogate method: {method}. "
            f"Must be one of {sorted(SURROGATE_METHODS)}"
        ) from None
