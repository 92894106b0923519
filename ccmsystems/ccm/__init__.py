"""
Convergent Cross Mapping (CCM) for causal inference between two series.

This module provides:
- Time-delay embedding and nearest neighbour cross-map prediction
- Random library sampling for robust convergence testing
- Linear-trend convergence verdict with curve diagnostics
- Surrogate significance testing and parallel processing support
- Ground truth comparison
"""

from .core import (
    embed,
    predict,
    predict_many,
    correlate,
    cross_map_sample,
)

from .convergence import (
    is_convergent,
    trend_slope,
    fit_ccm_curve,
)

from .parameters import (
    DIRECTIONS,
    CCMConfig,
    generate_lib_sizes,
    make_config,
)

from .workflow import (
    CrossMapResult,
    cross_map,
    bidirectional_ccm,
    ccm_with_significance,
)

from .analysis import (
    results_to_frame,
    verdicts_to_frame,
    compare_to_ground_truth,
    compute_performance_metrics,
    summarize_results,
)

__all__ = [
    # Core functions
    'embed',
    'predict',
    'predict_many',
    'correlate',
    'cross_map_sample',
    # Convergence
    'is_convergent',
    'trend_slope',
    'fit_ccm_curve',
    # Configuration
    'DIRECTIONS',
    'CCMConfig',
    'generate_lib_sizes',
    'make_config',
    # Workflow
    'CrossMapResult',
    'cross_map',
    'bidirectional_ccm',
    'ccm_with_significance',
    # Analysis
    'results_to_frame',
    'verdicts_to_frame',
    'compare_to_ground_truth',
    'compute_performance_metrics',
    'summarize_results',
]
