"""
CCM workflow: bootstrap cross mapping in one or both causal directions.

Implements the orchestration around the pure core functions with:
- Per-trial random generators spawned from one base seed
- Optional parallel processing across library sizes (multiprocessing)
- Convergence verdict and curve diagnostics per direction
- Surrogate testing of the cross-map skill for convergent directions
"""

import numpy as np
import pandas as pd
import multiprocessing
from dataclasses import dataclass, field
from tqdm import tqdm
from typing import Dict, List, Optional, Sequence, Tuple

from .core import embed, cross_map_sample
from .convergence import is_convergent, fit_ccm_curve
from .parameters import CCMConfig, DIRECTIONS
from ..surrogates import get_surrogate_generator, test_significance


@dataclass(frozen=True)
class CrossMapResult:
    """Outcome of cross mapping in one direction."""

    direction: str
    results: Tuple[Tuple[int, float], ...]
    convergent: bool
    fit: Optional[Dict[str, float]] = field(default=None, compare=False)

    @property
    def lib_sizes(self) -> List[int]:
        return [lib_size for lib_size, _ in self.results]

    @property
    def rho(self) -> List[float]:
        return [rho for _, rho in self.results]

    def to_frame(self) -> pd.DataFrame:
        """Skill curve as a DataFrame with columns 'LibSize' and 'rho'."""
        return pd.DataFrame({'LibSize': self.lib_sizes, 'rho': self.rho})


def _mean_skill(args) -> float:
    """
    Mean cross-map skill over the bootstrap trials of one library size.

    Module level so that it can be pickled for multiprocessing.

    Parameters
    ----------
    args : tuple
        (embedding, target, lib_size, E, tau, seed_sequences)
    """
    embedding, target, lib_size, E, tau, seed_sequences = args

    rhos = [
        cross_map_sample(embedding, target, lib_size, E, tau,
                         rng=np.random.default_rng(ss))
        for ss in seed_sequences
    ]

    return float(np.mean(rhos)) if rhos else 0.0


def _source_and_target(config: CCMConfig, direction: str) -> Tuple[np.ndarray, np.ndarray]:
    # x_causes_y: X's influence must be recoverable from Y's manifold
    if direction == 'x_causes_y':
        return config.y_series, config.x_series
    if direction == 'y_causes_x':
        return config.x_series, config.y_series
    raise ValueError(f"Unknown direction: {direction}. Must be one of {DIRECTIONS}")


def _root_seed(config: CCMConfig, direction: str, stream: int = 0) -> np.random.SeedSequence:
    return np.random.SeedSequence(config.seed,
                                  spawn_key=(DIRECTIONS.index(direction), stream))


def _skill_curve(config: CCMConfig,
                 embedding: np.ndarray,
                 target: np.ndarray,
                 lib_sizes: Sequence[int],
                 root: np.random.SeedSequence,
                 desc: str) -> List[float]:
    """Mean skill for every library size, serially or on a process pool."""
    tasks = [
        (embedding, target, lib_size, config.embedding_dim, config.tau,
         lib_seed.spawn(config.num_samples))
        for lib_size, lib_seed in zip(lib_sizes, root.spawn(len(lib_sizes)))
    ]

    if config.n_jobs > 1 and len(tasks) > 1:
        with multiprocessing.Pool(processes=min(config.n_jobs, len(tasks))) as pool:
            return list(tqdm(pool.imap(_mean_skill, tasks),
                             total=len(tasks),
                             desc=desc,
                             disable=not config.verbose))

    return [_mean_skill(task)
            for task in tqdm(tasks, desc=desc, disable=not config.verbose)]


def cross_map(config: CCMConfig, direction: str = 'x_causes_y') -> CrossMapResult:
    """
    Run CCM in one direction.

    ``x_causes_y`` embeds Y and cross-maps X from it (X's influence shows
    up in Y's dynamics); ``y_causes_x`` swaps the roles.

    Parameters
    ----------
    config : CCMConfig
        Analysis configuration from ``make_config``
    direction : {'x_causes_y', 'y_causes_x'}, default 'x_causes_y'

    Returns
    -------
    CrossMapResult
        Mean skill per library size, convergence verdict and curve fit.

    Raises
    ------
    ValueError
        If ``direction`` is unknown.
    """
    source, target = _source_and_target(config, direction)
    embedding = embed(source, config.embedding_dim, config.tau)

    means = _skill_curve(config, embedding, target, config.lib_sizes,
                         _root_seed(config, direction),
                         desc=f"CCM {direction}")

    results = tuple((int(L), rho) for L, rho in zip(config.lib_sizes, means))
    convergent = is_convergent(results)

    if config.verbose:
        print(f"  {direction}: rho(L={results[-1][0]}) = {results[-1][1]:.3f}, "
              f"convergent = {convergent}")

    return CrossMapResult(
        direction=direction,
        results=results,
        convergent=convergent,
        fit=fit_ccm_curve(np.array(config.lib_sizes, dtype=float), np.array(means)),
    )


def bidirectional_ccm(config: CCMConfig) -> Dict[str, CrossMapResult]:
    """
    Run CCM in both directions.

    Returns
    -------
    dict
        ``{'x_causes_y': CrossMapResult, 'y_causes_x': CrossMapResult}``
    """
    return {direction: cross_map(config, direction) for direction in DIRECTIONS}


def ccm_with_significance(config: CCMConfig,
                          direction: str = 'x_causes_y',
                          n_surrogates: int = 99,
                          method: str = 'random',
                          alpha: float = 0.05) -> Dict:
    """
    Cross map one direction and test its skill against surrogates.

    Surrogates of the cross-mapped target series are scored at the largest
    configured library size that still leaves points to predict. Only
    convergent directions are tested.

    Parameters
    ----------
    config : CCMConfig
        Analysis configuration
    direction : {'x_causes_y', 'y_causes_x'}, default 'x_causes_y'
    n_surrogates : int, default 99
        Number of surrogate realizations
    method : {'random', 'circular', 'iaaft'}, default 'random'
        Surrogate generator applied to the target series
    alpha : float, default 0.05
        Significance level

    Returns
    -------
    dict
        - 'result': the CrossMapResult
        - 'lib_size', 'rho': library size tested and its observed skill
        - 'p_value', 'significant', 'surr_mean', 'surr_95p', 'surr_99p'
        - 'ccm_norm': observed rho minus surrogate mean
    """
    generator = get_surrogate_generator(method)
    result = cross_map(config, direction)

    source, target = _source_and_target(config, direction)
    embedding = embed(source, config.embedding_dim, config.tau)
    usable = [(L, rho) for L, rho in result.results if L < len(embedding)]

    output = {
        'result': result,
        'direction': direction,
        'convergent': result.convergent,
        'lib_size': np.nan,
        'rho': np.nan,
        'p_value': np.nan,
        'significant': False,
        'surr_mean': np.nan,
        'surr_95p': np.nan,
        'surr_99p': np.nan,
        'ccm_norm': np.nan,
    }

    if not usable:
        return output

    lib_size, rho = max(usable, key=lambda pair: pair[0])
    output['lib_size'] = lib_size
    output['rho'] = rho

    if not result.convergent:
        return output

    root = _root_seed(config, direction, stream=1)
    surrogate_seed, trials_seed = root.spawn(2)
    surrogates = generator(target, n_surrogates, seed=surrogate_seed,
                           verbose=config.verbose)

    surrogate_rhos = np.array([
        _mean_skill((embedding, surrogate, lib_size, config.embedding_dim,
                     config.tau, trial_seed.spawn(config.num_samples)))
        for surrogate, trial_seed in zip(surrogates, trials_seed.spawn(n_surrogates))
    ])

    stats = test_significance(rho, surrogate_rhos, alpha=alpha, tail='greater')

    output['p_value'] = stats['p_value']
    output['significant'] = stats['significant']
    output['surr_mean'] = stats['surr_mean']
    output['surr_95p'] = stats['surr_95p']
    output['surr_99p'] = stats['surr_99p']
    output['ccm_norm'] = rho - stats['surr_mean']

    return output
