"""Explicit configuration objects passed through the pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Tuple

from .data_processing import FEATURE_COLUMNS, LABEL_COLUMN

DEFAULT_SEED = 123
DEFAULT_TRAIN_FRACTION = 0.8
DEFAULT_N_TREES = 500


@dataclass(frozen=True)
class ModelSpec:
    """Which columns are model inputs and which one is the target."""
    features: Tuple[str, ...] = FEATURE_COLUMNS
    label: str = LABEL_COLUMN

    def __post_init__(self):
        if not self.features:
            raise ValueError("ModelSpec needs at least one feature column.")
        if self.label in self.features:
            raise ValueError(f"Label column {self.label!r} cannot also be a feature.")


@dataclass(frozen=True)
class PipelineConfig:
    data_path: Path
    train_fraction: float = DEFAULT_TRAIN_FRACTION
    seed: int = DEFAULT_SEED
    n_trees: int = DEFAULT_N_TREES
    keep_importance: bool = True
    svm_kernel: str = "rbf"
    svm_probability: bool = True
    model_spec: ModelSpec = field(default_factory=ModelSpec)

    def __post_init__(self):
        object.__setattr__(self, "data_path", Path(self.data_path))
        if not (0.0 < self.train_fraction < 1.0):
            raise ValueError("train_fraction must be between 0 and 1.")
        if self.n_trees < 1:
            raise ValueError("n_trees must be a positive integer.")

    def with_seed(self, seed: int) -> "PipelineConfig":
        """Copy of this config drawing its split from another seed."""
        return replace(self, seed=int(seed))

    def to_dict(self) -> dict:
        return {
            "data_path": str(self.data_path),
            "train_fraction": float(self.train_fraction),
            "seed": int(self.seed),
            "n_trees": int(self.n_trees),
            "keep_importance": bool(self.keep_importance),
            "svm_kernel": self.svm_kernel,
            "svm_probability": bool(self.svm_probability),
            "features": list(self.model_spec.features),
            "label": self.model_spec.label,
        }
