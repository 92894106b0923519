"""
Convergence testing for CCM skill curves.

The verdict is a plain linear trend test: cross-map skill must grow with
library size faster than a small fixed slope. A saturating curve fit is
also available as a diagnostic of the curve shape; it is reported next to
the verdict and never changes it.
"""

import numpy as np
from typing import Dict, Iterable, Optional, Tuple
from scipy.optimize import curve_fit

# Minimum rho increase per unit of library size
SLOPE_THRESHOLD = 1e-3


def _finite_pairs(results: Iterable[Tuple[float, float]]) -> Tuple[np.ndarray, np.ndarray]:
    """Split (lib_size, rho) pairs into arrays, dropping unusable entries."""
    lib_sizes = []
    rhos = []

    for lib_size, rho in results:
        try:
            L = float(lib_size)
            r = float(rho)
        except (TypeError, ValueError):
            continue

        if np.isfinite(L) and np.isfinite(r):
            lib_sizes.append(L)
            rhos.append(r)

    return np.array(lib_sizes, dtype=float), np.array(rhos, dtype=float)


def trend_slope(results: Iterable[Tuple[float, float]]) -> float:
    """
    Ordinary least squares slope of rho against library size.

    Returns NaN when fewer than 3 valid points remain or all library
    sizes are identical.
    """
    x, y = _finite_pairs(results)
    n = len(x)

    if n < 3:
        return np.nan

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = np.sum(x * y)
    sum_x2 = np.sum(x * x)

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return np.nan

    return float((n * sum_xy - sum_x * sum_y) / denominator)


def is_convergent(results: Iterable[Tuple[float, float]],
                  slope_threshold: float = SLOPE_THRESHOLD) -> bool:
    """
    Test whether cross-map skill increases with library size.

    Parameters
    ----------
    results : iterable of (lib_size, rho)
        Mean skill per library size
    slope_threshold : float, default 1e-3
        Slope the linear fit must exceed

    Returns
    -------
    bool
        True if the fitted slope is above the threshold. False for fewer
        than 3 finite points or a degenerate (single library size) fit.
    """
    slope = trend_slope(results)

    if not np.isfinite(slope):
        return False

    return bool(slope > slope_threshold)


def saturating_curve(L: np.ndarray, a: float, K: float, b: float) -> np.ndarray:
    """Saturating curve for CCM convergence fitting: a*L / (K + L) + b."""
    return a * L / (K + L) + b


def fit_ccm_curve(lib_sizes: np.ndarray,
                  rho_values: np.ndarray) -> Optional[Dict[str, float]]:
    """
    Fit a saturating curve to a CCM skill curve.

    Parameters
    ----------
    lib_sizes : np.ndarray
        Library sizes
    rho_values : np.ndarray
        Mean rho for each library size

    Returns
    -------
    dict or None
        - 'a': amplitude (asymptotic increase)
        - 'K': half-saturation library size
        - 'b': baseline
        - 'R2': R-squared of the fit
        - 'Lmax': largest library size
        - 'slope_tail': linear slope over the last third of the points
        - 'rho_conv': mean rho over the last third of the points

        None with fewer than 3 finite points or when the fit fails.
    """
    x, y = _finite_pairs(zip(lib_sizes, rho_values))
    if len(x) < 3:
        return None

    order = np.argsort(x, kind='stable')
    x = x[order]
    y = y[order]
    Lmax = float(np.max(x))

    p0 = [max(1e-6, np.max(y) - np.min(y)),
          float(np.median(x)),
          float(np.min(y))]

    try:
        popt, _ = curve_fit(saturating_curve, x, y, p0=p0, maxfev=10000)
    except (RuntimeError, ValueError, TypeError):
        return None

    a, K, b = map(float, popt)

    resid = y - saturating_curve(x, a, K, b)
    ss_res = np.sum(resid**2)
    ss_tot = np.sum((y - np.mean(y))**2)
    r2 = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0

    # Plateau region = last third of points
    tail_n = max(3, int(np.ceil(len(x) / 3)))
    tail = list(zip(x[-tail_n:], y[-tail_n:]))

    return {
        'a': a,
        'K': K,
        'b': b,
        'R2': float(r2),
        'Lmax': Lmax,
        'slope_tail': trend_slope(tail),
        'rho_conv': float(np.mean(y[-tail_n:])),
    }
