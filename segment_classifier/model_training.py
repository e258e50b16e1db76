"""Classifier backends behind a shared train / predict contract.

Two interchangeable backends are provided:
    RandomForestAdapter  -> sklearn RandomForestClassifier (bagged decision trees)
    SvmAdapter           -> sklearn SVC (radial kernel, probability estimates)

Both consume typed frames. A FeatureEncoder turns the typed columns named by a
ModelSpec into a dense matrix:
    continuous -> float as-is
    ordinal    -> integer category code (Low=0 < Average=1 < High=2)
    nominal    -> one-hot over the column's category vocabulary
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier
from sklearn.svm import SVC

from .config import ModelSpec, PipelineConfig
from .errors import ConvergenceError, ShapeMismatchError


@dataclass(frozen=True)
class EncodedColumn:
    name: str      # column name in the encoded matrix
    source: str    # typed column it came from
    kind: str      # continuous | ordinal | nominal
    level: Optional[str] = None


class FeatureEncoder:
    """Resolves the feature list once and encodes frames consistently."""

    def __init__(self, features: Sequence[str]):
        self.features = tuple(features)
        self.columns: List[EncodedColumn] = []
        self._ordinal_levels: Dict[str, List[str]] = {}

    def fit(self, frame: pd.DataFrame) -> "FeatureEncoder":
        columns: List[EncodedColumn] = []
        for name in self.features:
            if name not in frame.columns:
                raise KeyError(f"feature column {name!r} not present")
            dtype = frame[name].dtype
            if isinstance(dtype, pd.CategoricalDtype):
                levels = [str(c) for c in dtype.categories]
                if dtype.ordered:
                    self._ordinal_levels[name] = levels
                    columns.append(EncodedColumn(name=name, source=name, kind="ordinal"))
                else:
                    columns.extend(
                        EncodedColumn(name=f"{name}={lvl}", source=name, kind="nominal", level=lvl)
                        for lvl in levels
                    )
            else:
                columns.append(EncodedColumn(name=name, source=name, kind="continuous"))
        self.columns = columns
        return self

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def transform(self, frame: pd.DataFrame) -> np.ndarray:
        if not self.columns:
            raise RuntimeError("FeatureEncoder.transform called before fit")
        X = np.zeros((len(frame), len(self.columns)), dtype=np.float64)
        for j, col in enumerate(self.columns):
            values = frame[col.source]
            if col.kind == "continuous":
                X[:, j] = values.to_numpy(dtype=np.float64)
            elif col.kind == "ordinal":
                rank = {lvl: i for i, lvl in enumerate(self._ordinal_levels[col.source])}
                X[:, j] = [rank.get(str(v), np.nan) for v in values]
            else:
                # Levels unseen at fit time encode as all-zero rows.
                X[:, j] = (values.astype(str) == col.level).to_numpy(dtype=np.float64)
        return X


@dataclass(frozen=True)
class TrainedModel:
    """Fitted backend; treat as immutable and pass only to predict/predict_proba."""
    backend: str
    estimator: object
    encoder: FeatureEncoder
    classes: Tuple[str, ...]
    importance: Optional[Dict[str, float]] = None


@dataclass(frozen=True)
class FeatureImportance:
    variable: str
    importance: float


def rank_importance(scores: Dict[str, float]) -> List[FeatureImportance]:
    """Sort descending by score; equal scores fall back to variable name."""
    ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [FeatureImportance(variable=name, importance=float(val)) for name, val in ordered]


class ClassifierAdapter:
    """Common contract for the black-box model backends."""

    name = "classifier"
    supports_proba = False

    def __init__(self, spec: Optional[ModelSpec] = None):
        self.spec = spec or ModelSpec()

    def build_estimator(self):
        raise NotImplementedError

    def _after_fit(self, estimator, encoder: FeatureEncoder) -> Optional[Dict[str, float]]:
        return None

    def train(self, features: pd.DataFrame, labels: Sequence) -> TrainedModel:
        y = np.asarray([str(v) for v in labels], dtype=str)
        if len(y) != len(features):
            raise ShapeMismatchError(
                f"{self.name}: {len(features)} feature rows but {len(y)} labels", stage="train"
            )
        if len(set(y.tolist())) < 2:
            raise ConvergenceError(f"{self.name}: need at least two distinct labels to train")

        encoder = FeatureEncoder(self.spec.features).fit(features)
        X = encoder.transform(features)
        estimator = self.build_estimator()
        try:
            estimator.fit(X, y)
        except (ValueError, ArithmeticError) as exc:
            raise ConvergenceError(f"{self.name}: backend failed to fit: {exc}") from exc

        return TrainedModel(
            backend=self.name,
            estimator=estimator,
            encoder=encoder,
            classes=tuple(str(c) for c in estimator.classes_),
            importance=self._after_fit(estimator, encoder),
        )

    def predict(self, model: TrainedModel, features: pd.DataFrame) -> np.ndarray:
        X = model.encoder.transform(features)
        return np.asarray(model.estimator.predict(X), dtype=str)

    def predict_proba(self, model: TrainedModel, features: pd.DataFrame) -> pd.DataFrame:
        if not self.supports_proba:
            raise NotImplementedError(f"{self.name} was built without probability estimates")
        X = model.encoder.transform(features)
        return pd.DataFrame(model.estimator.predict_proba(X), columns=list(model.classes))


class RandomForestAdapter(ClassifierAdapter):
    name = "random_forest"
    supports_proba = True

    def __init__(
        self,
        spec: Optional[ModelSpec] = None,
        *,
        n_trees: int = 500,
        keep_importance: bool = True,
        seed: int = 123,
    ):
        super().__init__(spec)
        self.n_trees = int(n_trees)
        self.keep_importance = bool(keep_importance)
        self.seed = int(seed)

    def build_estimator(self) -> RandomForestClassifier:
        return RandomForestClassifier(n_estimators=self.n_trees, random_state=self.seed)

    def _after_fit(self, estimator, encoder: FeatureEncoder) -> Optional[Dict[str, float]]:
        if not self.keep_importance:
            return None
        # One-hot columns are summed back into the variable they encode.
        totals: Dict[str, float] = {}
        for col, score in zip(encoder.columns, estimator.feature_importances_):
            totals[col.source] = totals.get(col.source, 0.0) + float(score)
        return totals

    def feature_importance(self, model: TrainedModel) -> List[FeatureImportance]:
        if model.importance is None:
            raise ValueError("model was trained without keep_importance")
        return rank_importance(model.importance)


class SvmAdapter(ClassifierAdapter):
    name = "svm"

    def __init__(
        self,
        spec: Optional[ModelSpec] = None,
        *,
        kernel: str = "rbf",
        probability: bool = True,
        seed: int = 123,
    ):
        super().__init__(spec)
        self.kernel = kernel
        self.probability = bool(probability)
        self.supports_proba = self.probability
        self.seed = int(seed)

    def build_estimator(self) -> SVC:
        return SVC(kernel=self.kernel, probability=self.probability, random_state=self.seed)


ADAPTERS: Dict[str, Callable[[PipelineConfig], ClassifierAdapter]] = {
    "random_forest": lambda cfg: RandomForestAdapter(
        cfg.model_spec, n_trees=cfg.n_trees, keep_importance=cfg.keep_importance, seed=cfg.seed
    ),
    "svm": lambda cfg: SvmAdapter(
        cfg.model_spec, kernel=cfg.svm_kernel, probability=cfg.svm_probability, seed=cfg.seed
    ),
}


def build_adapters(config: PipelineConfig) -> Dict[str, ClassifierAdapter]:
    return {name: factory(config) for name, factory in ADAPTERS.items()}
