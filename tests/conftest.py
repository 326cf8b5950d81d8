"""Pytest fixtures for HAR pipeline tests."""
import numpy as np
import pandas as pd
import pytest
import yaml

from har_boost.config import DEFAULT_CONFIG, _merge


N_CLASSES = 6
N_FEATURES = 8
SIGNAL_NAMES = [
    "tBodyAcc-mean()-X", "tBodyAcc-mean()-Y", "tBodyAcc-mean()-Z", "tBodyAcc-std()-X",
    "tGravityAcc-mean()-X", "tBodyGyro-mean()-X", "fBodyAcc-energy()-X", "angle(X,gravityMean)",
]


def _make_split(rng, per_class):
    """Gaussian blobs, one well-separated center per activity; labels are 1-based."""
    centers = np.zeros((N_CLASSES, N_FEATURES))
    for k in range(N_CLASSES):
        centers[k, k] = 6.0
    X, y = [], []
    for k in range(N_CLASSES):
        X.append(centers[k] + rng.normal(scale=1.0, size=(per_class, N_FEATURES)))
        y.extend([k + 1] * per_class)
    columns = [f"f{i}" for i in range(N_FEATURES)]
    return pd.DataFrame(np.vstack(X), columns=columns), np.array(y)


@pytest.fixture
def har_frames():
    """(X_train, y_train, X_test, y_test) with 1-based labels."""
    rng = np.random.default_rng(0)
    X_train, y_train = _make_split(rng, per_class=25)
    X_test, y_test = _make_split(rng, per_class=10)
    return X_train, y_train, X_test, y_test


@pytest.fixture
def feature_names():
    return {f"f{i}": name for i, name in enumerate(SIGNAL_NAMES)}


@pytest.fixture
def small_config(tmp_path):
    """Config with few boosting rounds and plots redirected to tmp_path."""
    return _merge(DEFAULT_CONFIG, {
        'data': {'base_dir': str(tmp_path)},
        'training': {'nthread': 1, 'log_interval': 0},
        'tree': {'n_rounds': 20, 'subsample': 1.0, 'colsample_bytree': 1.0},
        'linear': {'n_rounds': 50},
        'pca': {'n_components': 4},
        'output': {'figure_dir': str(tmp_path / "figures"), 'top_n_features': 5},
    })


@pytest.fixture
def har_data_dir(tmp_path, har_frames, feature_names):
    """Write the prepared split tables and name lookup as CSV under tmp_path/data."""
    X_train, y_train, X_test, y_test = har_frames
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    X_train.to_csv(data_dir / "train_features.csv", index=False)
    X_test.to_csv(data_dir / "test_features.csv", index=False)
    pd.DataFrame({'activity': y_train}).to_csv(data_dir / "train_labels.csv", index=False)
    pd.DataFrame({'activity': y_test}).to_csv(data_dir / "test_labels.csv", index=False)
    pd.DataFrame({
        'feature_id': list(feature_names.keys()),
        'feature_name': list(feature_names.values()),
    }).to_csv(data_dir / "feature_names.csv", index=False)
    return data_dir


@pytest.fixture
def config_file(tmp_path, small_config, har_data_dir):
    path = tmp_path / "config.yaml"
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(small_config, f)
    return path
