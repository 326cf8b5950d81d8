import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


# Hyperparameters tuned offline by cross-validation; rounds are fixed, no early stopping
DEFAULT_CONFIG: Dict[str, Any] = {
    'data': {
        'layout': 'split',  # 'split' or 'combined'
        'base_dir': '.',
        'train_features_path': 'data/train_features.csv',
        'test_features_path': 'data/test_features.csv',
        'train_labels_path': 'data/train_labels.csv',
        'test_labels_path': 'data/test_labels.csv',
        'features_path': 'data/features.csv',
        'labels_path': 'data/labels.csv',
        'feature_names_path': 'data/feature_names.csv',
        'indicator_column': 'is_train',
        'label_column': 'activity',
        'feature_id_column': 'feature_id',
        'feature_name_column': 'feature_name',
    },
    'training': {
        'seed': 42,
        'num_class': 6,
        'boosters': ['tree', 'linear'],
        'nthread': -1,
        'log_interval': 50,
        'monitor_test': True,
    },
    'tree': {
        'n_rounds': 300,
        'eta': 0.1,
        'max_depth': 6,
        'min_child_weight': 1,
        'colsample_bytree': 0.5,
        'subsample': 0.8,
        'gamma': 0.0,
    },
    'linear': {
        'n_rounds': 200,
        'eta': 0.5,
        'alpha': 0.0001,
        'lambda': 0.001,
    },
    'pca': {
        'n_components': 10,
        'pairs': [[0, 1], [0, 2], [1, 2]],
    },
    'output': {
        'save_plots': True,
        'figure_dir': 'outputs/figures',
        'top_n_features': 10,
    },
}

REQUIRED_SECTIONS = ('data', 'training', 'tree', 'linear')


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: Dict[str, Any]) -> None:
    """Check sections and values the pipeline cannot run without."""
    missing = [section for section in REQUIRED_SECTIONS if section not in config]
    if missing:
        raise ValueError(f"Config is missing required sections: {missing}")

    if config['data'].get('layout') not in ('split', 'combined'):
        raise ValueError(f"Unknown data layout: {config['data'].get('layout')!r}")

    if int(config['training']['num_class']) < 2:
        raise ValueError("training.num_class must be at least 2")

    for booster in config['training']['boosters']:
        if booster not in ('tree', 'linear'):
            raise ValueError(f"Unknown booster variant: {booster!r}")
        if int(config[booster]['n_rounds']) < 1:
            raise ValueError(f"{booster}.n_rounds must be a positive integer")


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file, filling gaps from DEFAULT_CONFIG."""
    if config_path is None:
        config = copy.deepcopy(DEFAULT_CONFIG)
    else:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        config = _merge(DEFAULT_CONFIG, user_config)

        # Relative data paths resolve against the config file location
        if 'base_dir' not in user_config.get('data', {}):
            config['data']['base_dir'] = str(Path(config_path).resolve().parent)

    validate_config(config)
    return config
