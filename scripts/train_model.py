#!/usr/bin/env python3
"""
Train a random forest and an RBF-kernel SVM on the customer segmentation CSV and
report how well each predicts the Segmentation label.

Pipeline:
    load CSV -> type columns (drop incomplete rows) -> seeded split
    -> z-score continuous features on Train only -> fit both backends
    -> accuracy / confusion matrix on Test -> RF feature importance
    -> per-segment profiles on the unscaled data

Artifacts written to --outdir (optional):
    - random_forest.joblib, svm.joblib
    - training_metadata.json
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Sequence

from segment_classifier.config import (
    DEFAULT_N_TREES,
    DEFAULT_SEED,
    DEFAULT_TRAIN_FRACTION,
    PipelineConfig,
)
from segment_classifier.errors import PipelineError
from segment_classifier.evaluation import classification_report
from segment_classifier.model_export import save_artifacts
from segment_classifier.model_training import FeatureImportance
from segment_classifier.pipeline import PipelineResult, resample_accuracy, run_pipeline
from segment_classifier.profiling import format_profiles


def format_importance(rows: Sequence[FeatureImportance]) -> str:
    width = max([len("Variable")] + [len(r.variable) for r in rows]) + 2
    lines = ["Variable".ljust(width) + "Importance"]
    lines.extend(f"{r.variable.ljust(width)}{r.importance:.4f}" for r in rows)
    return "\n".join(lines)


def print_report(result: PipelineResult) -> None:
    print(f"Records after cleaning: {result.n_records}")
    print(f"Train/test split: {result.train_size}/{result.test_size} (seed={result.config.seed})")
    print("Scaling parameters (train only):")
    for name in result.scaling.feature_names:
        print(f"  {name:16s} mean={result.scaling.mean[name]:8.3f} sd={result.scaling.sd[name]:8.3f}")

    for score in result.scores.values():
        print(f"\n{score.name} accuracy: {score.rounded:.3f}")
        print("Confusion matrix (rows=actual, cols=predicted):")
        print(score.confusion.format())
        print("Classification report:")
        print(classification_report(score.confusion))

    if result.importance:
        print("Random forest feature importance:")
        print(format_importance(result.importance))
    else:
        print("[warn] feature importance was not retained for this run.")

    print("\nSegment profiles:")
    print(format_profiles(result.profiles))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Train segment classifiers on a customer CSV and report accuracy.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog=(
            "Example:\n"
            "  python3 scripts/train_model.py data/customers.csv --random-seed 123 "
            "--train-fraction 0.8 --outdir models/latest"
        ),
    )
    p.add_argument("data", type=Path, help="Customer CSV with a header row.")
    p.add_argument("--train-fraction", type=float, default=DEFAULT_TRAIN_FRACTION, help="Train share in (0,1).")
    p.add_argument("--random-seed", type=int, default=DEFAULT_SEED, help="Seed for the split and the backends.")
    p.add_argument("--n-trees", type=int, default=DEFAULT_N_TREES, help="Random forest tree count.")
    p.add_argument("--svm-kernel", default="rbf", help="SVM kernel name.")
    p.add_argument(
        "--no-importance",
        action="store_true",
        help="Do not retain random forest feature importance.",
    )
    p.add_argument(
        "--resample-seeds",
        type=int,
        nargs="+",
        default=None,
        help="Also report accuracy over independent splits, e.g. --resample-seeds 1 2 3",
    )
    p.add_argument("--outdir", type=Path, default=None, help="Save trained models and metadata here.")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> PipelineResult:
    args = parse_args(argv)
    try:
        config = PipelineConfig(
            data_path=args.data,
            train_fraction=args.train_fraction,
            seed=args.random_seed,
            n_trees=args.n_trees,
            keep_importance=not args.no_importance,
            svm_kernel=args.svm_kernel,
        )
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    try:
        result = run_pipeline(config)
    except PipelineError as exc:
        raise SystemExit(f"Run aborted at stage '{exc.stage}': {exc}") from exc
    print_report(result)

    if args.resample_seeds:
        try:
            per_seed = resample_accuracy(config, args.resample_seeds)
        except PipelineError as exc:
            raise SystemExit(f"Resampling aborted at stage '{exc.stage}': {exc}") from exc
        print("\nAccuracy over resampled splits:")
        for seed, scores in per_seed.items():
            print(f"  seed={seed}: " + ", ".join(f"{k}={v:.3f}" for k, v in scores.items()))

    if args.outdir is not None:
        try:
            written = save_artifacts(result, args.outdir)
        except OSError as exc:
            raise SystemExit(f"Saving artifacts failed: {exc}") from exc
        print(f"Saved artifacts to: {args.outdir}")
        for path in written:
            print(f"  {path}")
    return result


if __name__ == "__main__":
    main()
