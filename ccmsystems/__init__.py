"""
CCMsystems: Convergent Cross Mapping for two coupled time series.

This package provides standardized tools for:
- Convergent Cross Mapping (CCM) analysis in both causal directions
- Convergence testing of cross-map skill against library size
- Surrogate-based significance testing
- Synthetic coupled series with known ground truth
"""

__version__ = "0.1.0"

# Import main modules for convenient access
from . import ccm
from . import surrogates
from . import testdata

# Import key functions for direct access
from .ccm import (
    CCMConfig,
    CrossMapResult,
    make_config,
    cross_map,
    bidirectional_ccm,
    ccm_with_significance,
    summarize_results,
)

from .testdata import (
    make_coupled_logistic_maps,
    make_coupled_series,
)

__all__ = [
    'ccm',
    'surrogates',
    'testdata',
    # CCM
    'CCMConfig',
    'CrossMapResult',
    'make_config',
    'cross_map',
    'bidirectional_ccm',
    'ccm_with_significance',
    'summarize_results',
    # Test data
    'make_coupled_logistic_maps',
    'make_coupled_series',
]
