from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Tuple, List

import numpy as np
import pandas as pd

from .errors import InputSchemaError, LabelRangeError


# UCI HAR activity codes (source encoding is 1-based)
ACTIVITY_MAPPER = {
    1: "WALKING",
    2: "WALKING_UPSTAIRS",
    3: "WALKING_DOWNSTAIRS",
    4: "SITTING",
    5: "STANDING",
    6: "LAYING",
}

REVERSE_ACTIVITY_MAPPER = {v: k for k, v in ACTIVITY_MAPPER.items()}

LABEL_OFFSET = 1


def _whole_labels(labels) -> np.ndarray:
    """Labels as a float array; NaN, inf and fractional codes raise LabelRangeError."""
    try:
        values = np.asarray(labels, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise LabelRangeError("Labels must be integer class codes") from exc
    if not np.all(np.isfinite(values)):
        raise LabelRangeError("Labels contain missing or infinite values")
    if not np.all(np.mod(values, 1) == 0):
        bad = np.unique(values[np.mod(values, 1) != 0])
        raise LabelRangeError(f"Labels must be whole numbers, found {bad.tolist()[:5]}")
    return values


def to_zero_based(labels, num_class: int = len(ACTIVITY_MAPPER)) -> np.ndarray:
    """Shift 1-based activity codes {1..C} to {0..C-1}."""
    labels = _whole_labels(labels)
    if labels.size and (labels.min() < LABEL_OFFSET or labels.max() > num_class):
        bad = np.unique(labels[(labels < LABEL_OFFSET) | (labels > num_class)])
        raise LabelRangeError(
            f"Labels must lie in [{LABEL_OFFSET}, {num_class}], found {bad.tolist()}"
        )
    return (labels - LABEL_OFFSET).astype(np.int64)


def to_one_based(labels, num_class: int = len(ACTIVITY_MAPPER)) -> np.ndarray:
    """Inverse of to_zero_based."""
    labels = _whole_labels(labels)
    if labels.size and (labels.min() < 0 or labels.max() >= num_class):
        raise LabelRangeError(f"Zero-based labels must lie in [0, {num_class})")
    return (labels + LABEL_OFFSET).astype(np.int64)


def non_numeric_columns(features: pd.DataFrame) -> List[str]:
    """Columns xgboost and PCA cannot consume as real numbers (object, string, bool)."""
    return [
        str(col) for col, dtype in features.dtypes.items()
        if not pd.api.types.is_numeric_dtype(dtype) or pd.api.types.is_bool_dtype(dtype)
    ]


@dataclass(frozen=True)
class HARDataset:
    """Prepared train/test partitions. Labels are kept in source (1-based) encoding."""
    X_train: pd.DataFrame
    y_train: np.ndarray
    X_test: pd.DataFrame
    y_test: np.ndarray
    feature_names: Dict[str, str]

    @property
    def feature_cols(self) -> List[str]:
        return list(self.X_train.columns)


def check_schema(
    X_train: pd.DataFrame,
    y_train: np.ndarray,
    X_test: pd.DataFrame,
    y_test: np.ndarray,
) -> None:
    """Raise InputSchemaError unless both splits share columns and align with their labels."""
    train_cols = list(X_train.columns)
    test_cols = list(X_test.columns)
    if train_cols != test_cols:
        train_only = sorted(set(train_cols) - set(test_cols))
        test_only = sorted(set(test_cols) - set(train_cols))
        if not train_only and not test_only:
            raise InputSchemaError("Train and test feature columns are in a different order")
        raise InputSchemaError(
            f"Train/test feature columns differ: train-only={train_only[:5]}, "
            f"test-only={test_only[:5]}"
        )

    for split, X, y in (('train', X_train, y_train), ('test', X_test, y_test)):
        if len(X) != len(y):
            raise InputSchemaError(
                f"{split}: {len(X)} feature rows but {len(y)} labels"
            )
        non_numeric = non_numeric_columns(X)
        if non_numeric:
            raise InputSchemaError(
                f"{split}: non-numeric feature columns {non_numeric[:5]}"
            )


def split_by_indicator(
    features: pd.DataFrame,
    labels: np.ndarray,
    indicator: str = 'is_train',
) -> Tuple[pd.DataFrame, np.ndarray, pd.DataFrame, np.ndarray]:
    """Partition a combined table on its boolean indicator column and drop the indicator."""
    if indicator not in features.columns:
        raise InputSchemaError(f"Indicator column '{indicator}' not found")
    labels = np.asarray(labels)
    if len(features) != len(labels):
        raise InputSchemaError(
            f"{len(features)} feature rows but {len(labels)} labels"
        )

    mask = features[indicator].astype(bool).to_numpy()
    X = features.drop(columns=[indicator])

    X_train = X.loc[mask].reset_index(drop=True)
    X_test = X.loc[~mask].reset_index(drop=True)
    return X_train, labels[mask], X_test, labels[~mask]


class DataLoader:
    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.data_config = config['data']
        self.base_path = Path(self.data_config.get('base_dir', '.'))

    def _path(self, key: str) -> Path:
        path = Path(self.data_config[key])
        return path if path.is_absolute() else self.base_path / path

    def _read_labels(self, key: str) -> np.ndarray:
        df = pd.read_csv(self._path(key))
        column = self.data_config.get('label_column')
        if column not in df.columns:
            # Single unnamed label column
            column = df.columns[0]
        return df[column].to_numpy()

    def load_feature_names(self) -> Dict[str, str]:
        """Read the column identifier -> sensor signal name lookup."""
        df = pd.read_csv(self._path('feature_names_path'))
        id_col = self.data_config['feature_id_column']
        name_col = self.data_config['feature_name_column']
        for col in (id_col, name_col):
            if col not in df.columns:
                raise InputSchemaError(f"Feature-name table has no '{col}' column")
        if df[id_col].duplicated().any():
            dup = df.loc[df[id_col].duplicated(), id_col].tolist()
            raise InputSchemaError(f"Duplicate feature identifiers in lookup: {dup[:5]}")
        return dict(zip(df[id_col].astype(str), df[name_col].astype(str)))

    def load_data(self) -> HARDataset:
        """Load training and test partitions with the feature-name lookup."""
        if self.data_config['layout'] == 'combined':
            print("Loading combined feature table...")
            features = pd.read_csv(self._path('features_path'))
            labels = self._read_labels('labels_path')
            X_train, y_train, X_test, y_test = split_by_indicator(
                features, labels, self.data_config['indicator_column']
            )
        else:
            print("Loading training data...")
            X_train = pd.read_csv(self._path('train_features_path'))
            y_train = self._read_labels('train_labels_path')

            print("Loading test data...")
            X_test = pd.read_csv(self._path('test_features_path'))
            y_test = self._read_labels('test_labels_path')

        check_schema(X_train, y_train, X_test, y_test)

        feature_names = self.load_feature_names()
        missing = [col for col in X_train.columns if col not in feature_names]
        if missing:
            raise InputSchemaError(
                f"{len(missing)} feature columns have no name in the lookup, e.g. {missing[:5]}"
            )

        print(f"✓ Train shape: {X_train.shape}")
        print(f"✓ Test shape: {X_test.shape}")
        print(f"✓ Classes in train: {sorted(np.unique(y_train).tolist())}")

        return HARDataset(
            X_train=X_train,
            y_train=np.asarray(y_train),
            X_test=X_test,
            y_test=np.asarray(y_test),
            feature_names=feature_names,
        )
