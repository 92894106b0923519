"""
Basic CCM Analysis Example

This script demonstrates a bidirectional CCM analysis on coupled logistic
maps with a known causal direction, followed by a surrogate test and a
run over the standard set of test cases.
"""

import numpy as np
import matplotlib.pyplot as plt

from ccmsystems.ccm import (
    make_config,
    bidirectional_ccm,
    ccm_with_significance,
    results_to_frame,
    verdicts_to_frame,
    compare_to_ground_truth,
    compute_performance_metrics,
    summarize_results,
)
from ccmsystems.ccm.convergence import saturating_curve
from ccmsystems.testdata import (
    make_coupled_logistic_maps,
    make_test_cases,
    get_ground_truth,
)


def main():
    # ============================================================
    # 1. GENERATE DATA
    # ============================================================
    print("Generating coupled logistic maps (Y drives X)...")

    x_series, y_series = make_coupled_logistic_maps(300, coupling=0.05)

    # ============================================================
    # 2. BIDIRECTIONAL CCM
    # ============================================================
    config = make_config(x_series, y_series,
                         embedding_dim=3, tau=1, num_samples=30,
                         seed=42, verbose=True)

    results = bidirectional_ccm(config)

    print("\n=== CCM Analysis Results ===")
    print("X causes Y (Y's manifold recovers X, should be weak):")
    for lib_size, rho in results['x_causes_y'].results:
        print(f"  Library size {lib_size}: correlation = {rho:.4f}")
    print(f"  Convergent: {results['x_causes_y'].convergent}")

    print("\nY causes X (X's manifold recovers Y, should be strong and convergent):")
    for lib_size, rho in results['y_causes_x'].results:
        print(f"  Library size {lib_size}: correlation = {rho:.4f}")
    print(f"  Convergent: {results['y_causes_x'].convergent}")

    # Plot both skill curves with the saturating fit
    curves = results_to_frame(results)
    plt.figure(figsize=(8, 5))
    for direction, frame in curves.groupby('direction'):
        plt.plot(frame['LibSize'], frame['rho'], 'o', alpha=0.6, label=direction)

        fit = results[direction].fit
        if fit is not None:
            L_grid = np.linspace(frame['LibSize'].min(), frame['LibSize'].max(), 200)
            plt.plot(L_grid, saturating_curve(L_grid, fit['a'], fit['K'], fit['b']),
                     lw=2, label=f"{direction} fit (R² = {fit['R2']:.2f})")

    plt.xlabel('Library Size')
    plt.ylabel('CCM ρ')
    plt.title('CCM Convergence')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig('examples/ccm_convergence.png', dpi=150)
    print("Convergence plot saved to: examples/ccm_convergence.png")

    # ============================================================
    # 3. SIGNIFICANCE TESTING WITH SURROGATES
    # ============================================================
    print("\nTesting significance with IAAFT surrogates...")

    significance = ccm_with_significance(config, 'y_causes_x',
                                         n_surrogates=99, method='iaaft')

    print(f"  Observed rho (L={significance['lib_size']}) = {significance['rho']:.3f}")
    print(f"  Surrogate mean = {significance['surr_mean']:.3f}")
    print(f"  Surrogate 95th percentile = {significance['surr_95p']:.3f}")
    print(f"  p-value = {significance['p_value']:.3f}")
    print(f"  Significant (α=0.05) = {significance['significant']}")

    # ============================================================
    # 4. TEST CASES WITH KNOWN GROUND TRUTH
    # ============================================================
    print("\nRunning standard test cases (X drives Y)...")

    cases = make_test_cases(n=300, seed=1)
    truth = get_ground_truth(cases)

    runs = {}
    for name, case in cases.items():
        print(case['description'])
        case_config = make_config(case['x_series'], case['y_series'],
                                  num_samples=30, seed=42)
        runs[name] = bidirectional_ccm(case_config)

    comparison = compare_to_ground_truth(verdicts_to_frame(runs), truth)
    print(comparison)

    metrics = compute_performance_metrics(comparison)
    print(f"\nPrecision: {metrics['precision']:.3f}")
    print(f"Recall:    {metrics['recall']:.3f}")
    print(f"F1 Score:  {metrics['f1_score']:.3f}")
    print(f"MCC:       {metrics['mcc']:.3f}")

    summarize_results(runs['strong'], ground_truth=truth, case='strong')

    print("\n" + "="*60)
    print("Analysis complete!")
    print("="*60)


if __name__ == "__main__":
    main()
