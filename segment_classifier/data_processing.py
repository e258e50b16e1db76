"""Loading, typing, splitting and scaling of customer segmentation records."""
from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import DatasetReadError, DegenerateFeatureError, SchemaError

# Columns that identify a customer and must never reach a model.
IDENTIFIER_COLUMNS = ("ID",)

NOMINAL_COLUMNS = ("Gender", "Ever_Married", "Graduated", "Profession", "Var_1")
ORDINAL_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "Spending_Score": ("Low", "Average", "High"),
}
CONTINUOUS_COLUMNS = ("Age", "Work_Experience", "Family_Size")
LABEL_COLUMN = "Segmentation"

# Schema order as it appears in the source file.
SCHEMA_COLUMNS = (
    "Gender",
    "Ever_Married",
    "Age",
    "Graduated",
    "Profession",
    "Work_Experience",
    "Spending_Score",
    "Family_Size",
    "Var_1",
    LABEL_COLUMN,
)
FEATURE_COLUMNS = tuple(c for c in SCHEMA_COLUMNS if c != LABEL_COLUMN)


def _check_schema(columns: Sequence[str], *, stage: str) -> None:
    present = {str(c).strip() for c in columns}
    missing = [c for c in SCHEMA_COLUMNS if c not in present]
    if missing:
        raise SchemaError(missing, stage=stage)


def load_dataset(path: Path, *, sep: str = ",") -> pd.DataFrame:
    """
    Read a delimited file with a header row into a DataFrame.

    Identifier columns are dropped and columns outside the schema are ignored.
    Empty cells become missing values; nothing is typed or filtered here.
    """
    path = Path(path)
    if not path.is_file():
        raise DatasetReadError(f"{path} not found or not a regular file")
    try:
        df = pd.read_csv(path, sep=sep, dtype=str, skipinitialspace=True)
    except pd.errors.EmptyDataError as exc:
        raise DatasetReadError(f"{path} is empty") from exc
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, csv.Error) as exc:
        raise DatasetReadError(f"could not parse {path}: {exc}") from exc

    df.columns = [str(c).strip() for c in df.columns]
    _check_schema(df.columns, stage="load")

    drop = [c for c in df.columns if c in IDENTIFIER_COLUMNS]
    if drop:
        df = df.drop(columns=drop)
    return df.loc[:, list(SCHEMA_COLUMNS)].reset_index(drop=True)


def type_features(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Assign semantic types to every schema column and drop incomplete records.

    Nominal columns and the label become unordered categoricals, Spending_Score
    an ordered categorical over (Low, Average, High), continuous columns floats.
    A value that cannot be coerced (non-numeric age, unknown spending level)
    counts as missing. Rows with any missing field are removed, not imputed.
    """
    _check_schema(frame.columns, stage="type")
    df = frame.loc[:, list(SCHEMA_COLUMNS)].copy()

    for col in NOMINAL_COLUMNS + (LABEL_COLUMN,):
        values = df[col].str.strip()
        values = values.where(values != "")
        df[col] = values.astype("category")

    for col, order in ORDINAL_COLUMNS.items():
        values = df[col].str.strip()
        df[col] = pd.Categorical(values, categories=list(order), ordered=True)

    for col in CONTINUOUS_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")
        # inf and overflowed literals are malformed, not extreme.
        df[col] = df[col].where(np.isfinite(df[col]))

    before = len(df)
    df = df.dropna(how="any").reset_index(drop=True)
    for col in NOMINAL_COLUMNS + (LABEL_COLUMN,):
        df[col] = df[col].cat.remove_unused_categories()

    dropped = before - len(df)
    if dropped:
        print(f"Dropped {dropped} incomplete record(s); {len(df)} remain.")
    return df


@dataclass(frozen=True)
class Split:
    train: pd.DataFrame
    test: pd.DataFrame
    train_index: np.ndarray
    test_index: np.ndarray
    seed: int
    fraction: float


def split_dataset(frame: pd.DataFrame, fraction: float = 0.8, *, seed: int) -> Split:
    """
    Partition rows into Train/Test by a seeded draw without replacement.

    floor(fraction * n) positions are drawn uniformly; they form Train (kept in
    input order) and the remaining positions form Test. Each call redraws from a
    fresh generator, so the same seed over the same input is reproducible.
    """
    if not (0.0 < fraction < 1.0):
        raise ValueError("fraction must be between 0 and 1.")
    n = len(frame)
    n_train = int(np.floor(fraction * n))
    if n_train == 0 or n_train == n:
        raise ValueError(f"split of {n} record(s) at fraction {fraction} leaves an empty subset")

    rng = np.random.default_rng(seed)
    train_index = np.sort(rng.choice(n, size=n_train, replace=False))
    mask = np.ones(n, dtype=bool)
    mask[train_index] = False
    test_index = np.flatnonzero(mask)

    return Split(
        train=frame.iloc[train_index].reset_index(drop=True),
        test=frame.iloc[test_index].reset_index(drop=True),
        train_index=train_index,
        test_index=test_index,
        seed=int(seed),
        fraction=float(fraction),
    )


@dataclass(frozen=True)
class ScalingParameters:
    """Per-feature (mean, sd) fitted on the training subset only."""
    mean: Dict[str, float]
    sd: Dict[str, float]

    @property
    def feature_names(self) -> List[str]:
        return list(self.mean)

    def to_dict(self) -> dict:
        return {name: {"mean": self.mean[name], "sd": self.sd[name]} for name in self.mean}


class Scaler:
    """Z-score scaling with sample standard deviation (ddof=1)."""

    def __init__(self, features: Sequence[str] = CONTINUOUS_COLUMNS):
        self.features = tuple(features)

    def fit(self, train: pd.DataFrame) -> ScalingParameters:
        missing = [f for f in self.features if f not in train.columns]
        if missing:
            raise SchemaError(missing, stage="scale")

        mean: Dict[str, float] = {}
        sd: Dict[str, float] = {}
        for name in self.features:
            values = train[name].to_numpy(dtype=np.float64)
            m = float(values.mean()) if values.size else float("nan")
            s = float(values.std(ddof=1)) if values.size > 1 else float("nan")
            # Zero or undefined spread cannot be scaled without producing NaN/Inf.
            if not np.isfinite(s) or s == 0.0 or not np.isfinite(m):
                raise DegenerateFeatureError(name, s)
            mean[name] = m
            sd[name] = s
        return ScalingParameters(mean=mean, sd=sd)

    def transform(self, frame: pd.DataFrame, params: ScalingParameters) -> pd.DataFrame:
        out = frame.copy()
        for name in params.feature_names:
            out[name] = (out[name].astype("float64") - params.mean[name]) / params.sd[name]
        return out


def scale_features(
    train: pd.DataFrame,
    test: pd.DataFrame,
    features: Sequence[str] = CONTINUOUS_COLUMNS,
) -> Tuple[pd.DataFrame, pd.DataFrame, ScalingParameters]:
    """Fit on train, apply the same parameters to train and test."""
    scaler = Scaler(features)
    params = scaler.fit(train)
    return scaler.transform(train, params), scaler.transform(test, params), params
