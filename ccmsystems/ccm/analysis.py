"""
Analysis and validation functions for CCM results.

Provides tabular views of skill curves and verdicts, a printed summary,
and tools for comparing detected causal directions to ground truth.
"""

import numpy as np
import pandas as pd
from typing import Dict, Mapping, Optional, Union

from .workflow import CrossMapResult

ResultLike = Union[CrossMapResult, Mapping[str, CrossMapResult]]


def _as_mapping(results: ResultLike) -> Mapping[str, CrossMapResult]:
    if isinstance(results, CrossMapResult):
        return {results.direction: results}
    return results


def results_to_frame(results: ResultLike) -> pd.DataFrame:
    """
    Long-format table of skill curves.

    Parameters
    ----------
    results : CrossMapResult or dict of CrossMapResult
        Output of ``cross_map`` or ``bidirectional_ccm``

    Returns
    -------
    pd.DataFrame
        Columns: direction, LibSize, rho, convergent
    """
    frames = []
    for direction, result in _as_mapping(results).items():
        frame = result.to_frame()
        frame.insert(0, 'direction', direction)
        frame['convergent'] = result.convergent
        frames.append(frame)

    if not frames:
        return pd.DataFrame(columns=['direction', 'LibSize', 'rho', 'convergent'])

    return pd.concat(frames, ignore_index=True)


def verdicts_to_frame(results_by_case: Mapping[str, ResultLike]) -> pd.DataFrame:
    """
    One row per (case, direction) with the verdict and final skill.

    Parameters
    ----------
    results_by_case : dict
        Case name -> output of ``bidirectional_ccm``

    Returns
    -------
    pd.DataFrame
        Columns: case, direction, convergent, rho (skill at the largest
        library size), rho_max (best skill over all library sizes)
    """
    rows = []
    for case, results in results_by_case.items():
        for direction, result in _as_mapping(results).items():
            rho = result.rho
            rows.append({
                'case': case,
                'direction': direction,
                'convergent': result.convergent,
                'rho': rho[-1] if rho else np.nan,
                'rho_max': max(rho) if rho else np.nan,
            })

    return pd.DataFrame(rows, columns=['case', 'direction', 'convergent', 'rho', 'rho_max'])


def compare_to_ground_truth(verdicts: pd.DataFrame,
                            ground_truth: pd.DataFrame,
                            detection_col: str = 'convergent') -> pd.DataFrame:
    """
    Compare detected causal directions to ground truth.

    Parameters
    ----------
    verdicts : pd.DataFrame
        Output of ``verdicts_to_frame`` (needs 'case', 'direction' and
        ``detection_col``)
    ground_truth : pd.DataFrame
        Index = case names, columns = directions. 1 marks a true causal
        direction, 0 no causation. Missing entries count as 0.
    detection_col : str, default 'convergent'
        Boolean column used as the detection

    Returns
    -------
    pd.DataFrame
        Columns: case, direction, detected, true_edge, classification
        ('TP', 'FP', 'TN' or 'FN')

    Examples
    --------
    >>> comparison = compare_to_ground_truth(verdicts, truth)
    >>> print(comparison[comparison['classification'] == 'FP'])
    """
    rows = []
    for _, row in verdicts.iterrows():
        detected = bool(row[detection_col])

        try:
            true_edge = bool(ground_truth.loc[row['case'], row['direction']] == 1)
        except KeyError:
            true_edge = False

        if true_edge:
            classification = 'TP' if detected else 'FN'
        else:
            classification = 'FP' if detected else 'TN'

        rows.append({
            'case': row['case'],
            'direction': row['direction'],
            'detected': detected,
            'true_edge': true_edge,
            'classification': classification,
        })

    return pd.DataFrame(rows, columns=['case', 'direction', 'detected',
                                       'true_edge', 'classification'])


def compute_performance_metrics(comparison: pd.DataFrame) -> Dict[str, float]:
    """
    Detection performance from a ground-truth comparison.

    Returns
    -------
    dict
        TP, FP, TN, FN counts plus precision, recall, specificity,
        f1_score, accuracy and mcc (Matthews correlation coefficient).
        Ratios with an empty denominator are 0.
    """
    counts = comparison['classification'].value_counts()
    TP, FP, TN, FN = (int(counts.get(label, 0)) for label in ('TP', 'FP', 'TN', 'FN'))

    def ratio(num, den):
        return num / den if den > 0 else 0.0

    precision = ratio(TP, TP + FP)
    recall = ratio(TP, TP + FN)
    mcc_den = np.sqrt(float((TP + FP) * (TP + FN) * (TN + FP) * (TN + FN)))

    return {
        'TP': TP,
        'FP': FP,
        'TN': TN,
        'FN': FN,
        'precision': precision,
        'recall': recall,
        'specificity': ratio(TN, TN + FP),
        'f1_score': ratio(2 * precision * recall, precision + recall),
        'accuracy': ratio(TP + TN, TP + TN + FP + FN),
        'mcc': ratio(TP * TN - FP * FN, mcc_den),
    }


def summarize_results(results: ResultLike,
                      ground_truth: Optional[pd.DataFrame] = None,
                      case: str = 'series',
                      print_summary: bool = True) -> Dict:
    """
    Summarize a CCM run, optionally against ground truth.

    Parameters
    ----------
    results : CrossMapResult or dict of CrossMapResult
        Output of ``cross_map`` or ``bidirectional_ccm``
    ground_truth : pd.DataFrame or None
        Ground truth table (see ``compare_to_ground_truth``)
    case : str, default 'series'
        Row label of this run in ``ground_truth``
    print_summary : bool, default True
        Print formatted summary to console

    Returns
    -------
    dict
        n_directions, n_convergent, per-direction final rho and verdict,
        and 'performance_metrics' when ground truth is given.
    """
    verdicts = verdicts_to_frame({case: results})

    summary = {
        'n_directions': len(verdicts),
        'n_convergent': int(verdicts['convergent'].sum()),
        'directions': {
            row['direction']: {'rho': row['rho'], 'convergent': bool(row['convergent'])}
            for _, row in verdicts.iterrows()
        },
    }

    if ground_truth is not None:
        comparison = compare_to_ground_truth(verdicts, ground_truth)
        summary['performance_metrics'] = compute_performance_metrics(comparison)

    if print_summary:
        print("\n" + "=" * 70)
        print("CCM RESULTS SUMMARY")
        print("=" * 70)
        for direction, result in _as_mapping(results).items():
            print(f"{direction}:")
            for lib_size, rho in result.results:
                print(f"  Library size {lib_size}: correlation = {rho:.4f}")
            print(f"  Convergent: {result.convergent}")

        if ground_truth is not None:
            m = summary['performance_metrics']
            print("\n" + "-" * 70)
            print("PERFORMANCE vs GROUND TRUTH")
            print("-" * 70)
            print(f"TP={m['TP']}  FP={m['FP']}  TN={m['TN']}  FN={m['FN']}")
            print(f"Accuracy: {m['accuracy']:.3f}")

        print("=" * 70 + "\n")

    return summary
