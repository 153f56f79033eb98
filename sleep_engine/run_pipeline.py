"""
Sleep Engine — Main Pipeline
Mammal sleep vs brain mass, Bayesian linear regression on the logit scale:
Load → Filter & Transform → Fit → Predict → Summarise → Plot
"""
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from sleep_engine.config import GRID_POINTS, HIGHLIGHT_MAMMALS, OUTPUT_DIR, PLOT_FILES
from sleep_engine.data_prep.transforms import make_prediction_grid, prepare_observations
from sleep_engine.etl.loader import load_msleep
from sleep_engine.inference.predictor import posterior_linpred, posterior_predict
from sleep_engine.inference.priors import RegressionPrior
from sleep_engine.inference.regression import fit_naive_model, fit_sleep_model
from sleep_engine.inference.summary import (
    out_of_range_share,
    summarise_posterior,
    summarise_predictions,
)
from sleep_engine.output.plots import ribbon_spec, scatter_spec, trend_spec
from sleep_engine.output.renderer import MatplotlibRenderer


def run_pipeline(
    sampler: str = "pymc",
    seed: Optional[int] = 42,
    data_path: Optional[Path] = None,
    output_dir: Path = OUTPUT_DIR,
    prior: Optional[RegressionPrior] = None,
    include_naive: bool = True,
    **sampler_kwargs,
) -> Dict:
    """
    Execute the full analysis once, end to end.

    Args:
        sampler: Posterior backend, "pymc" (NUTS) or "laplace" (fast approximation).
        seed: Random seed for sampling and plotting subsets. None for non-deterministic.
        data_path: Alternative msleep-shaped CSV.
        output_dir: Where the three plots are written.
        prior: Override the Normal(0, 3) priors.
        include_naive: Also fit the untransformed hours model for comparison.
        sampler_kwargs: draws / tune / chains / cores / target_accept overrides.
    """
    rng = np.random.default_rng(seed)
    output_dir = Path(output_dir)

    print("=" * 60)
    print("SLEEP ENGINE — Mammal sleep vs brain mass")
    print(f"  Sampler: {sampler}")
    print(f"  Random seed: {seed}" if seed is not None else "  Random seed: None (non-deterministic)")
    print("=" * 60)

    # ── Phase 1: Load ───────────────────────────────────────────
    print("\n▶ Phase 1: Loading data...")
    raw = load_msleep(data_path)
    print(f"  → {len(raw)} species, {len(raw.columns)} columns")

    # ── Phase 2: Filter & Transform ─────────────────────────────
    print("\n▶ Phase 2: Filtering and transforming...")
    obs = prepare_observations(raw)
    print(f"  → {len(obs)} species with brain mass ({len(raw) - len(obs)} dropped)")
    grid = make_prediction_grid(obs["log_brainwt"], GRID_POINTS)
    print(f"  → Prediction grid: {len(grid)} points, log10 brainwt {grid[0]:.2f} to {grid[-1]:.2f}")

    # ── Phase 3: Fit ────────────────────────────────────────────
    print("\n▶ Phase 3: Fitting logit(sleep / 24) ~ log10(brainwt)...")
    draws = fit_sleep_model(obs, prior=prior, sampler=sampler, seed=seed, **sampler_kwargs)
    posterior_table = summarise_posterior(draws)
    print(f"  → {draws.n_draws} draws via {draws.method}, n_obs={draws.n_obs}")
    for param, row in posterior_table.iterrows():
        print(f"    {param:<10} {row['mean']:+.3f} ± {row['sd']:.3f}  "
              f"[{row['q2.5']:+.3f}, {row['q97.5']:+.3f}]")
    if draws.rhat_max is not None:
        status = "ok" if draws.converged else "NOT CONVERGED"
        print(f"  → R-hat max {draws.rhat_max:.3f}, ESS min {draws.ess_min:.0f} ({status})")

    # ── Phase 4: Predict ────────────────────────────────────────
    print("\n▶ Phase 4: Posterior predictions...")
    linpred = posterior_linpred(draws, grid)
    predictive = posterior_predict(draws, grid, rng=rng)
    summary = summarise_predictions(grid, predictive)
    print(f"  → Linear predictions: {linpred.shape[0]} draws × {linpred.shape[1]} grid points")
    print(f"  → Predictive range: {np.nanmin(predictive):.2f} to {np.nanmax(predictive):.2f} hours")

    naive_share = None
    if include_naive:
        naive = fit_naive_model(obs, sampler=sampler, seed=seed, **sampler_kwargs)
        naive_pred = posterior_predict(naive, grid, rng=rng)
        naive_share = out_of_range_share(naive_pred)
        print(f"  → Naive hours model: {naive_share:.1%} of predictive draws outside 0-24 h "
              f"(logit model: {out_of_range_share(predictive):.1%})")

    # ── Phase 5: Plot ───────────────────────────────────────────
    print("\n▶ Phase 5: Rendering plots...")
    renderer = MatplotlibRenderer()
    specs = {
        "scatter": scatter_spec(obs, HIGHLIGHT_MAMMALS),
        "trend": trend_spec(obs, grid, linpred, rng=rng),
        "ribbon": ribbon_spec(obs, summary),
    }
    plot_paths = {}
    for key, spec in specs.items():
        path = output_dir / PLOT_FILES[key]
        renderer.render(spec, save_path=path)
        plot_paths[key] = path
        print(f"  → {key}: {path}")

    print("\n" + "=" * 60)
    print("PIPELINE COMPLETE")
    print("=" * 60)

    return {
        "observations": obs,
        "grid": grid,
        "draws": draws,
        "posterior_summary": posterior_table,
        "linpred": linpred,
        "predictive": predictive,
        "predictive_summary": summary,
        "naive_out_of_range": naive_share,
        "plots": plot_paths,
    }


def main(argv=None):
    import argparse

    import matplotlib

    # Batch run writes files only
    matplotlib.use("Agg")

    parser = argparse.ArgumentParser(description="Mammal sleep Bayesian regression")
    parser.add_argument("--sampler", choices=["pymc", "laplace"], default="pymc",
                        help="Posterior backend (default: pymc)")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed (default: 42, use -1 for non-deterministic)")
    parser.add_argument("--draws", type=int, default=None, help="Posterior draws per chain")
    parser.add_argument("--chains", type=int, default=None, help="MCMC chains")
    parser.add_argument("--data", type=Path, default=None, help="Alternative msleep CSV")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="Plot directory")
    parser.add_argument("--skip-naive", action="store_true", help="Skip the untransformed comparison model")
    args = parser.parse_args(argv)

    sampler_kwargs = {}
    if args.draws is not None:
        sampler_kwargs["draws"] = args.draws
    if args.chains is not None and args.sampler == "pymc":
        sampler_kwargs["chains"] = args.chains

    seed = args.seed if args.seed >= 0 else None
    run_pipeline(sampler=args.sampler, seed=seed, data_path=args.data,
                 output_dir=args.output_dir, include_naive=not args.skip_naive,
                 **sampler_kwargs)


if __name__ == "__main__":
    main()
