"""Customer segment classification: preprocessing, two backends, evaluation, profiles."""
from .config import ModelSpec, PipelineConfig
from .data_processing import (
    Scaler,
    ScalingParameters,
    Split,
    load_dataset,
    scale_features,
    split_dataset,
    type_features,
)
from .errors import (
    ConvergenceError,
    DatasetReadError,
    DegenerateFeatureError,
    PipelineError,
    SchemaError,
    ShapeMismatchError,
)
from .evaluation import ConfusionMatrix, accuracy, evaluate
from .model_training import ClassifierAdapter, RandomForestAdapter, SvmAdapter, TrainedModel
from .pipeline import PipelineResult, resample_accuracy, run_pipeline
from .profiling import SegmentProfile, profile_segments

__version__ = "0.1.0"
