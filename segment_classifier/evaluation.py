"""Confusion matrix and accuracy for predicted vs. actual segment labels."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
from sklearn.metrics import classification_report as sk_classification_report
from sklearn.metrics import confusion_matrix

from .errors import ShapeMismatchError


@dataclass(frozen=True)
class ConfusionMatrix:
    """Square count matrix over `labels`; rows=actual, cols=predicted."""
    labels: Tuple[str, ...]
    counts: np.ndarray
    predicted: Tuple[str, ...]
    actual: Tuple[str, ...]

    def count(self, predicted: str, actual: str) -> int:
        i = self.labels.index(str(actual))
        j = self.labels.index(str(predicted))
        return int(self.counts[i, j])

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    @property
    def correct(self) -> int:
        return int(np.trace(self.counts))

    @property
    def accuracy(self) -> float:
        return self.correct / self.total

    def to_list(self) -> List[List[int]]:
        return self.counts.astype(int).tolist()

    def format(self) -> str:
        width = max([len("actual\\pred")] + [len(lbl) for lbl in self.labels]) + 2
        head = "actual\\pred".ljust(width) + "".join(lbl.rjust(width) for lbl in self.labels)
        lines = [head]
        for lbl, row in zip(self.labels, self.counts):
            lines.append(lbl.ljust(width) + "".join(str(int(v)).rjust(width) for v in row))
        return "\n".join(lines)


def evaluate(predicted: Sequence, actual: Sequence) -> ConfusionMatrix:
    """Cross-tabulate order-aligned predicted/actual labels."""
    pred = [str(v) for v in predicted]
    true = [str(v) for v in actual]
    if len(pred) != len(true):
        raise ShapeMismatchError(f"{len(pred)} predictions for {len(true)} actual labels")
    if not true:
        raise ShapeMismatchError("no predictions to evaluate")

    labels = sorted(set(pred) | set(true))
    cm = confusion_matrix(true, pred, labels=labels)
    cm.setflags(write=False)
    return ConfusionMatrix(labels=tuple(labels), counts=cm, predicted=tuple(pred), actual=tuple(true))


def accuracy(matrix: ConfusionMatrix) -> float:
    return matrix.accuracy


def classification_report(matrix: ConfusionMatrix) -> str:
    """Per-class precision / recall / F1 text for console reports."""
    labels = list(matrix.labels)
    return sk_classification_report(
        list(matrix.actual),
        list(matrix.predicted),
        labels=labels,
        target_names=labels,
        zero_division=0,
    )
