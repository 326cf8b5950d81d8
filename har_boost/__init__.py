"""
HAR gradient boosting analysis
Loader -> PCA -> XGBoost (tree / linear) -> evaluation on the UCI HAR features
"""

from .errors import (
    HARPipelineError,
    InputSchemaError,
    DataMismatch,
    LabelRangeError,
    ShapePredictionMismatch,
)
from .data_loader import DataLoader, HARDataset, ACTIVITY_MAPPER, to_zero_based, to_one_based
from .decomposition import PCAResult, compute_principal_components
from .model import TrainedClassifier, feature_importance
from .evaluate import EvaluationReport, evaluate_model

__version__ = "0.1.0"
