"""Exception taxonomy for the segment classification pipeline."""
from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for every failure raised by a pipeline stage."""

    default_stage = "pipeline"

    def __init__(self, message: str, *, stage: Optional[str] = None):
        self.stage = stage or self.default_stage
        super().__init__(message)


class DatasetReadError(PipelineError, OSError):
    """Source file missing, unreadable or not parseable as delimited text."""

    default_stage = "load"


class SchemaError(DatasetReadError):
    """Header lacks one or more expected columns."""

    def __init__(self, missing, *, stage: Optional[str] = None):
        self.missing = tuple(missing)
        super().__init__(f"missing expected column(s): {', '.join(self.missing)}", stage=stage)


class DegenerateFeatureError(PipelineError):
    """Continuous feature has zero (or undefined) variance on the training subset."""

    default_stage = "scale"

    def __init__(self, feature: str, sd: float):
        self.feature = feature
        self.sd = sd
        super().__init__(f"feature {feature!r} has degenerate training standard deviation ({sd!r})")


class ConvergenceError(PipelineError):
    """Model backend could not be fitted."""

    default_stage = "train"


class ShapeMismatchError(PipelineError):
    """Predicted and actual label sequences are not aligned."""

    default_stage = "evaluate"
