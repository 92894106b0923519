"""
Test data generation for CCM validation and demonstration.

This module provides synthetic coupled series with known ground truth
causal direction for validating CCM.
"""

from .generators import (
    make_coupled_logistic_maps,
    make_coupled_series,
    make_test_cases,
    get_ground_truth,
)

__all__ = [
    'make_coupled_logistic_maps',
    'make_coupled_series',
    'make_test_cases',
    'get_ground_truth',
]
