"""Persist trained backends and run metadata next to each other.

Artifacts written to an output directory:
    - <backend>.joblib          (TrainedModel per backend)
    - training_metadata.json    (config, feature order, class order, metrics, scaling)
"""
from __future__ import annotations

import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Tuple

import joblib
import numpy as np
import pandas as pd
import sklearn

from .errors import DatasetReadError
from .model_training import TrainedModel
from .pipeline import PipelineResult

METADATA_FILE = "training_metadata.json"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def build_metadata(result: PipelineResult) -> dict:
    first = next(iter(result.models.values()), None)
    return {
        "created_utc": _utc_now_iso(),
        "python": sys.version,
        "platform": platform.platform(),
        "numpy_version": np.__version__,
        "pandas_version": pd.__version__,
        "sklearn_version": sklearn.__version__,
        "config": result.config.to_dict(),
        "encoded_features": first.encoder.column_names if first else [],
        "classes": list(first.classes) if first else [],
        "records": int(result.n_records),
        "train_samples": int(result.train_size),
        "test_samples": int(result.test_size),
        "scaling": result.scaling.to_dict(),
        "accuracy": {name: float(s.accuracy) for name, s in result.scores.items()},
        "confusion_labels": {name: list(s.confusion.labels) for name, s in result.scores.items()},
        "confusion_matrix": {name: s.confusion.to_list() for name, s in result.scores.items()},
        "feature_importance": [
            {"variable": fi.variable, "importance": fi.importance} for fi in (result.importance or [])
        ],
    }


def save_artifacts(result: PipelineResult, outdir: Path) -> List[Path]:
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for name, model in result.models.items():
        path = outdir / f"{name}.joblib"
        joblib.dump(model, path)
        written.append(path)
    meta_path = outdir / METADATA_FILE
    meta_path.write_text(json.dumps(build_metadata(result), indent=2))
    written.append(meta_path)
    return written


def load_artifacts(modeldir: Path) -> Tuple[Dict[str, TrainedModel], dict]:
    modeldir = Path(modeldir)
    meta_path = modeldir / METADATA_FILE
    if not meta_path.exists():
        raise DatasetReadError(
            f"Missing {meta_path}. Run scripts/train_model.py --outdir first.", stage="artifacts"
        )
    metadata = json.loads(meta_path.read_text())
    models: Dict[str, TrainedModel] = {}
    for name in metadata.get("accuracy", {}):
        path = modeldir / f"{name}.joblib"
        if not path.exists():
            raise DatasetReadError(f"Missing {path}.", stage="artifacts")
        models[name] = joblib.load(path)
    return models, metadata
