"""
Test data generators with known ground truth for CCM validation.

Both systems are pairs of logistic maps. In ``make_coupled_logistic_maps``
Y drives X through a diffusive term; in ``make_coupled_series`` X drives Y
and observation noise is added on top.
"""

import numpy as np
import pandas as pd
from typing import Dict, Mapping, Optional, Tuple, Union

from ..ccm.parameters import DIRECTIONS


def make_coupled_logistic_maps(n: int,
                               coupling: float = 0.02,
                               r_x: float = 3.7,
                               r_y: float = 3.6,
                               x0: float = 0.1,
                               y0: float = 0.2) -> Tuple[np.ndarray, np.ndarray]:
    """
    Generate a pair of logistic maps where Y forces X.

    x[t+1] = r_x x[t] (1 - x[t]) + coupling * (y[t] - x[t])
    y[t+1] = r_y y[t] (1 - y[t])

    Values are clipped to [0, 1]. Deterministic.

    Parameters
    ----------
    n : int
        Number of time points (initial condition included)
    coupling : float, default 0.02
        Strength of the Y -> X forcing (0 = independent maps)
    r_x, r_y : float
        Growth rates of the two maps
    x0, y0 : float
        Initial conditions

    Returns
    -------
    x, y : np.ndarray, shape (n,)
    """
    x = np.zeros(n)
    y = np.zeros(n)
    if n == 0:
        return x, y

    x[0], y[0] = x0, y0
    for t in range(1, n):
        x_raw = r_x * x[t-1] * (1 - x[t-1]) + coupling * (y[t-1] - x[t-1])
        y_raw = r_y * y[t-1] * (1 - y[t-1])
        x[t] = np.clip(x_raw, 0.0, 1.0)
        y[t] = np.clip(y_raw, 0.0, 1.0)

    return x, y


def make_coupled_series(n: int = 50,
                        r_x: float = 3.8,
                        r_y: float = 3.6,
                        coupling: float = 0.3,
                        noise_level: float = 0.05,
                        x0: float = 0.3,
                        y0: float = 0.4,
                        seed: Union[None, int, np.random.Generator] = None) -> Dict:
    """
    Generate a driving series X and a driven series Y.

    X is an autonomous logistic map; Y is a logistic map forced by X:

    y[t+1] = r_y y[t] (1 - y[t]) + coupling * (x[t] - y[t])

    States are clipped to [0.001, 0.999], then uniform observation noise in
    [-noise_level, noise_level] is added to both series.

    Parameters
    ----------
    n : int, default 50
        Number of time points (initial condition included)
    r_x, r_y : float
        Growth rates (3.8 and 3.6 are chaotic)
    coupling : float, default 0.3
        X -> Y coupling strength
    noise_level : float, default 0.05
        Amplitude of observation noise
    x0, y0 : float
        Initial conditions
    seed : int, Generator or None
        Source of the observation noise

    Returns
    -------
    dict
        - 'x_series', 'y_series': np.ndarray, shape (n,)
        - 'parameters': generator settings
        - 'description': human readable summary
    """
    rng = np.random.default_rng(seed)

    x = np.zeros(n)
    y = np.zeros(n)
    if n > 0:
        x[0], y[0] = x0, y0

    for t in range(1, n):
        x_next = r_x * x[t-1] * (1 - x[t-1])
        y_next = r_y * y[t-1] * (1 - y[t-1]) + coupling * (x[t-1] - y[t-1])
        x[t] = np.clip(x_next, 0.001, 0.999)
        y[t] = np.clip(y_next, 0.001, 0.999)

    x_noisy = x + noise_level * rng.uniform(-1.0, 1.0, size=n)
    y_noisy = y + noise_level * rng.uniform(-1.0, 1.0, size=n)

    return {
        'x_series': x_noisy,
        'y_series': y_noisy,
        'parameters': {
            'r_x': r_x,
            'r_y': r_y,
            'coupling': coupling,
            'noise_level': noise_level,
            'length': n,
        },
        'description': f"X drives Y with coupling strength {coupling}",
    }


def make_test_cases(n: int = 50, seed: Optional[int] = None) -> Dict[str, Dict]:
    """
    Standard set of driven/driving pairs with decreasing coupling.

    Returns
    -------
    dict
        'strong' (0.4), 'medium' (0.2), 'weak' (0.1) and 'none' (0.0,
        negative control), each the output of ``make_coupled_series``.
    """
    settings = {
        'strong': dict(coupling=0.4, noise_level=0.02),
        'medium': dict(coupling=0.2, noise_level=0.05),
        'weak': dict(coupling=0.1, noise_level=0.03),
        'none': dict(coupling=0.0, noise_level=0.05),
    }

    seeds = np.random.SeedSequence(seed).spawn(len(settings))

    return {
        name: make_coupled_series(n, seed=np.random.default_rng(ss), **kwargs)
        for (name, kwargs), ss in zip(settings.items(), seeds)
    }


def get_ground_truth(cases: Mapping[str, Dict]) -> pd.DataFrame:
    """
    Ground truth causal directions for ``make_test_cases`` output.

    Returns
    -------
    pd.DataFrame
        Index = case names, columns = directions. 1 marks a true causal
        direction: X -> Y whenever the coupling is positive, never Y -> X.
    """
    truth = pd.DataFrame(0, index=list(cases), columns=list(DIRECTIONS), dtype=int)

    for name, case in cases.items():
        if case['parameters']['coupling'] > 0:
            truth.loc[name, 'x_causes_y'] = 1

    return truth
