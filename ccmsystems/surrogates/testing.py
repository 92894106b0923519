"""
Statistical significance testing using surrogate time series.

This module provides functions for computing empirical p-values and
significance thresholds from surrogate distributions of cross-map skill.
"""

import numpy as np
from typing import Dict, Literal, Tuple


def empirical_p(observed: float,
                surrogates: np.ndarray,
                tail: Literal["greater", "less", "two-sided"] = "greater") -> float:
    """
    Calculate empirical p-value from surrogate distribution.

    Parameters
    ----------
    observed : float
        Observed test statistic
    surrogates : np.ndarray
        Array of surrogate test statistics (NaNs are ignored)
    tail : {'greater', 'less', 'two-sided'}, default 'greater'
        - 'greater': observed skill above the null (causal signal)
        - 'less': observed skill below the null
        - 'two-sided': distance from the null median

    Returns
    -------
    float
        Empirical p-value, ``(k + 1) / (n + 1)`` so it is never 0.
        NaN when no finite surrogate is available.
    """
    surrogates = np.asarray(surrogates, dtype=float)
    surrogates = surrogates[np.isfinite(surrogates)]
    n = len(surrogates)

    if tail == "greater":
        k = np.sum(surrogates >= observed)
    elif tail == "less":
        k = np.sum(surrogates <= observed)
    elif tail == "two-sided":
        if n == 0:
            return np.nan
        med = np.median(surrogates)
        k = np.sum(np.abs(surrogates - med) >= np.abs(observed - med))
    else:
        raise ValueError("tail must be 'greater', 'less', or 'two-sided'")

    if n == 0:
        return np.nan

    return float((k + 1) / (n + 1))


def compute_significance_thresholds(surrogates: np.ndarray,
                                    percentiles: Tuple[float, ...] = (95, 99)) -> Dict[str, float]:
    """Percentile thresholds of a surrogate distribution, keyed 'p95', 'p99', ..."""
    surrogates = np.asarray(surrogates, dtype=float)
    surrogates = surrogates[np.isfinite(surrogates)]

    if surrogates.size == 0:
        return {f'p{int(p)}': np.nan for p in percentiles}

    return {f'p{int(p)}': float(np.percentile(surrogates, p)) for p in percentiles}


def test_significance(observed: float,
                      surrogates: np.ndarray,
                      alpha: float = 0.05,
                      tail: str = "greater") -> Dict:
    """
    Test significance of observed statistic against surrogates.

    Parameters
    ----------
    observed : float
        Observed test statistic
    surrogates : np.ndarray
        Surrogate distribution
    alpha : float, default 0.05
        Significance level
    tail : str, default 'greater'
        Type of test

    Returns
    -------
    dict
        Results with p-value, significance, and summary statistics
    """
    surrogates = np.asarray(surrogates, dtype=float)
    finite = surrogates[np.isfinite(surrogates)]

    p_value = empirical_p(observed, finite, tail=tail)
    thresholds = compute_significance_thresholds(finite)
    has_null = finite.size > 0

    return {
        'observed': observed,
        'p_value': p_value,
        'significant': bool(np.isfinite(p_value) and p_value < alpha),
        'alpha': alpha,
        'n_surrogates': int(finite.size),
        'surr_mean': float(np.mean(finite)) if has_null else np.nan,
        'surr_std': float(np.std(finite)) if has_null else np.nan,
        'surr_95p': thresholds['p95'],
        'surr_99p': thresholds['p99'],
    }
