"""End-to-end run: load -> type -> split -> scale -> train -> evaluate -> profile."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .config import PipelineConfig
from .data_processing import (
    CONTINUOUS_COLUMNS,
    ScalingParameters,
    Split,
    load_dataset,
    scale_features,
    split_dataset,
    type_features,
)
from .errors import PipelineError
from .evaluation import ConfusionMatrix, evaluate
from .model_training import (
    FeatureImportance,
    RandomForestAdapter,
    TrainedModel,
    build_adapters,
)
from .profiling import SegmentProfile, profile_segments


@dataclass(frozen=True)
class ModelScore:
    name: str
    accuracy: float
    confusion: ConfusionMatrix

    @property
    def rounded(self) -> float:
        return round(self.accuracy, 3)


@dataclass(frozen=True)
class PipelineResult:
    config: PipelineConfig
    n_records: int
    split: Split
    scaling: ScalingParameters
    models: Dict[str, TrainedModel]
    scores: Dict[str, ModelScore]
    importance: Optional[List[FeatureImportance]]
    profiles: List[SegmentProfile]

    @property
    def train_size(self) -> int:
        return len(self.split.train_index)

    @property
    def test_size(self) -> int:
        return len(self.split.test_index)


@contextmanager
def stage(name: str):
    """Tag failures with the stage they happened in."""
    try:
        yield
    except PipelineError:
        raise
    except (ValueError, KeyError) as exc:
        raise PipelineError(str(exc), stage=name) from exc


def prepare(config: PipelineConfig) -> pd.DataFrame:
    with stage("load"):
        raw = load_dataset(config.data_path)
    with stage("type"):
        return type_features(raw)


def fit_and_score(config: PipelineConfig, typed: pd.DataFrame):
    """Split, scale and train every backend for one seed."""
    spec = config.model_spec
    with stage("split"):
        split = split_dataset(typed, config.train_fraction, seed=config.seed)
    with stage("scale"):
        continuous = [c for c in CONTINUOUS_COLUMNS if c in spec.features]
        train, test, params = scale_features(split.train, split.test, continuous)

    models: Dict[str, TrainedModel] = {}
    scores: Dict[str, ModelScore] = {}
    importance: Optional[List[FeatureImportance]] = None
    for name, adapter in build_adapters(config).items():
        with stage("train"):
            model = adapter.train(train[list(spec.features)], train[spec.label])
        with stage("evaluate"):
            predicted = adapter.predict(model, test[list(spec.features)])
            matrix = evaluate(predicted, test[spec.label])
        models[name] = model
        scores[name] = ModelScore(name=name, accuracy=matrix.accuracy, confusion=matrix)
        if isinstance(adapter, RandomForestAdapter) and model.importance is not None:
            importance = adapter.feature_importance(model)
    return split, params, models, scores, importance


def run_pipeline(config: PipelineConfig) -> PipelineResult:
    typed = prepare(config)
    split, params, models, scores, importance = fit_and_score(config, typed)
    with stage("profile"):
        profiles = profile_segments(typed, config.model_spec.label)
    return PipelineResult(
        config=config,
        n_records=len(typed),
        split=split,
        scaling=params,
        models=models,
        scores=scores,
        importance=importance,
        profiles=profiles,
    )


def resample_accuracy(config: PipelineConfig, seeds: Iterable[int]) -> Dict[int, Dict[str, float]]:
    """Accuracy per backend for each distinct seed; every seed redraws its own split."""
    typed = prepare(config)
    results: Dict[int, Dict[str, float]] = {}
    for seed in dict.fromkeys(int(s) for s in seeds):
        _, _, _, scores, _ = fit_and_score(config.with_seed(seed), typed)
        results[int(seed)] = {name: score.accuracy for name, score in scores.items()}
    return results
