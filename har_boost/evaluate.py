from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, confusion_matrix

from .data_loader import ACTIVITY_MAPPER, LABEL_OFFSET
from .errors import LabelRangeError, ShapePredictionMismatch
from .model import TrainedClassifier, predict


LOG_LOSS_EPS = 1e-15


@dataclass(frozen=True)
class EvaluationReport:
    booster_type: str
    accuracy: float
    log_loss: float
    confusion: pd.DataFrame        # rows = true class, columns = predicted class (1-based ids)
    predicted_labels: np.ndarray   # 1-based
    probabilities: np.ndarray      # (n_samples, num_class)


def reshape_probabilities(buffer, n_samples: int, num_class: int) -> np.ndarray:
    """Reshape a flat row-major probability buffer into an (N, C) table."""
    buffer = np.asarray(buffer, dtype=np.float64).reshape(-1)
    if num_class <= 0 or buffer.size % num_class != 0:
        raise ShapePredictionMismatch(
            f"Buffer of length {buffer.size} is not divisible by {num_class} classes"
        )
    if buffer.size // num_class != n_samples:
        raise ShapePredictionMismatch(
            f"Buffer holds {buffer.size // num_class} rows, expected {n_samples}"
        )
    return buffer.reshape(n_samples, num_class)


def predict_labels(proba: np.ndarray) -> np.ndarray:
    """Arg-max class per row; ties go to the lowest class index."""
    return np.argmax(np.asarray(proba), axis=1)


def one_hot(labels, num_class: int) -> np.ndarray:
    labels = np.asarray(labels, dtype=np.int64)
    if labels.size and (labels.min() < 0 or labels.max() >= num_class):
        raise LabelRangeError(f"Labels must lie in [0, {num_class})")
    indicator = np.zeros((labels.size, num_class), dtype=np.float64)
    indicator[np.arange(labels.size), labels] = 1.0
    return indicator


def multiclass_log_loss(proba: np.ndarray, labels, eps: float = LOG_LOSS_EPS) -> float:
    """
    Mean negative log-probability of the true class.

    Probabilities are floored at eps so a confident wrong prediction gives a
    large finite loss instead of infinity.
    """
    proba = np.asarray(proba, dtype=np.float64)
    if proba.ndim != 2:
        raise ShapePredictionMismatch(f"Expected an (N, C) table, got shape {proba.shape}")
    labels = np.asarray(labels)
    if len(labels) != proba.shape[0]:
        raise ShapePredictionMismatch(
            f"{proba.shape[0]} probability rows but {len(labels)} labels"
        )

    target = one_hot(labels, proba.shape[1])
    clipped = np.clip(proba, eps, 1.0)
    return float(-np.sum(target * np.log(clipped)) / proba.shape[0])


def accuracy(y_true, y_pred) -> float:
    return float(accuracy_score(y_true, y_pred))


def build_confusion_matrix(y_true, y_pred, num_class: int) -> pd.DataFrame:
    """C x C counts for zero-based labels, indexed by 1-based class ids."""
    class_ids = list(range(LABEL_OFFSET, num_class + LABEL_OFFSET))
    cm = confusion_matrix(
        np.asarray(y_true) + LABEL_OFFSET,
        np.asarray(y_pred) + LABEL_OFFSET,
        labels=class_ids,
    )
    return pd.DataFrame(
        cm,
        index=pd.Index(class_ids, name='true'),
        columns=pd.Index(class_ids, name='predicted'),
    )


def accuracy_from_confusion(cm) -> float:
    values = np.asarray(cm)
    total = values.sum()
    if total == 0:
        raise ValueError("Confusion matrix is empty")
    return float(np.trace(values) / total)


def evaluate_model(model: TrainedClassifier, X_test, y_test) -> EvaluationReport:
    """
    Score a trained classifier on the held-out split.

    Args:
        model: Trained classifier
        X_test: Test features
        y_test: Zero-based true labels

    Returns:
        EvaluationReport with labels expressed in 1-based activity codes
    """
    y_test = np.asarray(y_test)
    n_samples = len(X_test)
    if len(y_test) != n_samples:
        raise ShapePredictionMismatch(
            f"{n_samples} test rows but {len(y_test)} labels"
        )

    buffer = predict(model, X_test)
    proba = reshape_probabilities(buffer, n_samples, model.num_class)
    y_pred = predict_labels(proba)

    return EvaluationReport(
        booster_type=model.booster_type,
        accuracy=accuracy(y_test, y_pred),
        log_loss=multiclass_log_loss(proba, y_test),
        confusion=build_confusion_matrix(y_test, y_pred, model.num_class),
        predicted_labels=y_pred + LABEL_OFFSET,
        probabilities=proba,
    )


def print_evaluation_summary(
    report: EvaluationReport,
    class_names: Optional[Dict[int, str]] = None,
) -> None:
    """Print accuracy, log-loss and the confusion matrix."""
    class_names = ACTIVITY_MAPPER if class_names is None else class_names

    print("=" * 60)
    print(f"EVALUATION SUMMARY ({report.booster_type} booster)")
    print("=" * 60)
    print(f"Accuracy: {report.accuracy:.4f}")
    print(f"Multi-class log-loss: {report.log_loss:.4f}")

    cm = report.confusion.rename(index=class_names, columns=class_names)
    print("\nConfusion matrix (rows = true, columns = predicted):")
    print(cm.to_string())

    print("\nPer-class recall:")
    for class_id, row in report.confusion.iterrows():
        total = row.sum()
        recall = row[class_id] / total if total else 0.0
        print(f"  - {class_names.get(class_id, class_id)}: {recall:.4f} ({total} samples)")

    print("=" * 60)
