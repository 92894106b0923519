"""
Core Convergent Cross Mapping (CCM) functions.

This module holds the pure building blocks of a CCM analysis:
- Time-delay embedding of a single series (shadow manifold)
- Simplex-style nearest neighbour cross-map prediction
- Robust Pearson correlation of observations vs. predictions
- One bootstrap cross-map trial at a given library size

Every function here is total: degenerate input resolves to the neutral
skill value 0.0 instead of raising, so a bootstrap loop built on top of
them always produces a finite number per trial.
"""

import numpy as np
import pandas as pd
from typing import Iterable, Optional, Sequence, Tuple, Union
from scipy.spatial.distance import cdist

# Added to the nearest distance before dividing, avoids a zero denominator
WEIGHT_EPSILON = 1e-8

# Neighbours closer than this are duplicates of the query and get full weight
DUPLICATE_DISTANCE = 1e-12


def embed(series: Union[Sequence[float], np.ndarray],
          E: int,
          tau: int) -> np.ndarray:
    """
    Reconstruct the E-dimensional shadow manifold of a series.

    Row ``i`` of the result is ``(s[i], s[i+tau], ..., s[i+(E-1)*tau])``.

    Parameters
    ----------
    series : array-like, shape (N,)
        Input time series
    E : int
        Embedding dimension
    tau : int
        Time delay between coordinates (positive)

    Returns
    -------
    np.ndarray, shape (N - (E-1)*tau, E)
        Embedded points. Zero rows when the series is too short to fill
        a single delay vector.
    """
    s = np.asarray(series, dtype=float)
    n_points = len(s) - (E - 1) * tau

    if n_points <= 0:
        return np.empty((0, E), dtype=float)

    index = np.arange(n_points)[:, None] + tau * np.arange(E)[None, :]
    return s[index]


def _neighbour_weights(distances: np.ndarray) -> np.ndarray:
    """Exponential weights scaled by the nearest distance of each row."""
    d_min = distances[:, :1]

    with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
        weights = np.exp(-distances / (d_min + WEIGHT_EPSILON))

    return np.where(distances < DUPLICATE_DISTANCE, 1.0, weights)


def predict_many(query_points: Union[Sequence[Sequence[float]], np.ndarray],
                 library_points: Union[Sequence[Sequence[float]], np.ndarray],
                 library_targets: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    """
    Cross-map estimates for several query points at once.

    Uses the ``E+1`` nearest library points of each query (Euclidean
    distance, ties kept in library order) and weights them with
    ``exp(-d / (d_min + 1e-8))``.

    Parameters
    ----------
    query_points : array-like, shape (n_queries, E)
        Points to predict from
    library_points : array-like, shape (n_library, E)
        Candidate neighbours
    library_targets : array-like, shape (n_library,)
        Target values aligned with ``library_points``

    Returns
    -------
    np.ndarray, shape (n_queries,)
        Weighted estimates; 0.0 wherever the estimate is undefined
        (empty library, empty query, zero weight, non-finite result).
        Query and library points of different dimension are compared on
        their leading shared coordinates.
    """
    queries = np.asarray(query_points, dtype=float)
    if queries.ndim == 1:
        queries = queries.reshape(1, -1)
    n_queries = queries.shape[0]

    library = np.asarray(library_points, dtype=float)
    targets = np.asarray(library_targets, dtype=float).ravel()

    if (n_queries == 0 or queries.shape[1] == 0 or library.ndim != 2
            or library.shape[0] == 0 or targets.size == 0):
        return np.zeros(n_queries, dtype=float)

    n_library = library.shape[0]
    k = min(queries.shape[1] + 1, n_library)

    # Mismatched dimensions compare only the leading shared coordinates
    n_dims = min(queries.shape[1], library.shape[1])
    if n_dims == 0:
        return np.zeros(n_queries, dtype=float)
    queries = queries[:, :n_dims]
    library = library[:, :n_dims]

    # Missing or non-finite targets contribute nothing to the weighted sum
    aligned = np.zeros(n_library, dtype=float)
    m = min(n_library, targets.size)
    aligned[:m] = targets[:m]
    aligned[~np.isfinite(aligned)] = 0.0

    distances = cdist(queries, library)
    order = np.argsort(distances, axis=1, kind='stable')[:, :k]
    nearest = np.take_along_axis(distances, order, axis=1)

    weights = _neighbour_weights(nearest)
    total_weight = weights.sum(axis=1)

    with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
        estimates = (weights * aligned[order]).sum(axis=1) / total_weight

    estimates[(total_weight == 0) | ~np.isfinite(estimates)] = 0.0
    return estimates


def predict(query_point: Union[Sequence[float], np.ndarray],
            library_points: Union[Sequence[Sequence[float]], np.ndarray],
            library_targets: Union[Sequence[float], np.ndarray]) -> float:
    """
    Nearest neighbour estimate of the target at a single query point.

    See ``predict_many`` for the weighting rule. Returns 0.0 for any
    degenerate input.
    """
    query = np.asarray(query_point, dtype=float).reshape(1, -1)
    return float(predict_many(query, library_points, library_targets)[0])


def _pearson(actual: np.ndarray, predicted: np.ndarray) -> float:
    """Pearson correlation over the finite pairs, 0.0 when undefined."""
    valid = np.isfinite(actual) & np.isfinite(predicted)
    actual = actual[valid]
    predicted = predicted[valid]

    if actual.size < 2:
        return 0.0

    with np.errstate(all='ignore'):
        da = actual - actual.mean()
        dp = predicted - predicted.mean()
        numerator = np.sum(da * dp)
        denominator = np.sqrt(np.sum(da * da) * np.sum(dp * dp))

        if denominator == 0 or not np.isfinite(denominator):
            return 0.0

        rho = numerator / denominator

    return float(rho) if np.isfinite(rho) else 0.0


def correlate(pairs: Union[Iterable[Tuple[float, float]], np.ndarray]) -> float:
    """
    Pearson correlation between observed and predicted values.

    Parameters
    ----------
    pairs : iterable of (actual, predicted) or array of shape (n, 2)
        Observation/prediction pairs. Pairs with a non-numeric or
        non-finite member are dropped before scoring.

    Returns
    -------
    float
        Correlation coefficient, or 0.0 when fewer than two valid pairs
        remain or either side has zero variance.
    """
    frame = pd.DataFrame(list(pairs), columns=['actual', 'predicted'])
    if len(frame) < 2:
        return 0.0

    frame = frame.apply(pd.to_numeric, errors='coerce')

    return _pearson(frame['actual'].to_numpy(dtype=float),
                    frame['predicted'].to_numpy(dtype=float))


def cross_map_sample(embedding: np.ndarray,
                     target_series: Union[Sequence[float], np.ndarray],
                     lib_size: int,
                     E: int,
                     tau: int,
                     rng: Optional[np.random.Generator] = None) -> float:
    """
    One bootstrap cross-map trial at a given library size.

    A random subset of embedded points forms the library; every other
    point is predicted from it and the predictions are correlated with
    the (aligned) target values.

    Parameters
    ----------
    embedding : np.ndarray, shape (n_points, E)
        Shadow manifold of the series being cross-mapped from
    target_series : array-like, shape (N,)
        Raw series being cross-mapped to; its first ``(E-1)*tau`` values
        are dropped to line up with the embedding rows
    lib_size : int
        Requested library size
    E, tau : int
        Embedding parameters used to build ``embedding``
    rng : np.random.Generator or None
        Source of the library draw. A fresh unseeded generator is used
        when None.

    Returns
    -------
    float
        Cross-map skill (rho) for this trial, 0.0 when the trial is
        degenerate (library too large, too few prediction points,
        target shorter than the embedding).
    """
    embedding = np.asarray(embedding, dtype=float)
    total_points = len(embedding)

    if total_points == 0 or lib_size >= total_points:
        return 0.0

    if rng is None:
        rng = np.random.default_rng()

    actual_lib_size = max(0, min(lib_size, total_points - 1))
    lib_indices = rng.choice(total_points, size=actual_lib_size, replace=False)

    adjusted_target = np.asarray(target_series, dtype=float)[(E - 1) * tau:]

    in_library = np.zeros(total_points, dtype=bool)
    in_library[lib_indices] = True
    pred_indices = np.flatnonzero(~in_library)

    if len(adjusted_target) < total_points or len(pred_indices) < 2:
        return 0.0

    estimates = predict_many(embedding[pred_indices],
                             embedding[lib_indices],
                             adjusted_target[lib_indices])

    return _pearson(adjusted_target[pred_indices], estimates)
