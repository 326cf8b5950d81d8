from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

import numpy as np
import pandas as pd
import xgboost as xgb

from .data_loader import non_numeric_columns
from .errors import InputSchemaError, LabelRangeError


BOOSTER_TYPES = {
    'tree': 'gbtree',
    'linear': 'gblinear',
}

# Hyperparameters understood by each booster; anything else in the config is dropped
TREE_PARAMS = ('eta', 'max_depth', 'min_child_weight', 'colsample_bytree', 'subsample', 'gamma')
LINEAR_PARAMS = ('eta', 'alpha', 'lambda', 'updater', 'feature_selector')


@dataclass(frozen=True)
class TrainedClassifier:
    booster: xgb.Booster
    booster_type: str
    params: Dict[str, Any]
    n_rounds: int
    num_class: int
    feature_cols: Tuple[str, ...]
    evals_result: Dict[str, Dict[str, List[float]]] = field(default_factory=dict)


def _to_matrix(features) -> Tuple[np.ndarray, List[str]]:
    """Convert features to a float matrix, rejecting non-numeric columns."""
    if isinstance(features, pd.DataFrame):
        non_numeric = non_numeric_columns(features)
        if non_numeric:
            raise InputSchemaError(f"Non-numeric feature columns: {non_numeric[:5]}")
        return features.to_numpy(dtype=np.float64), [str(c) for c in features.columns]

    values = np.asarray(features)
    if values.ndim != 2:
        raise InputSchemaError(f"Expected a 2-D feature matrix, got shape {values.shape}")
    if not np.issubdtype(values.dtype, np.number):
        try:
            values = values.astype(np.float64)
        except (TypeError, ValueError) as exc:
            raise InputSchemaError("Feature matrix contains non-numeric entries") from exc
    return values.astype(np.float64), [f"f{i}" for i in range(values.shape[1])]


def _check_labels(labels, num_class: int) -> np.ndarray:
    labels = np.asarray(labels)
    if labels.size and (labels.min() < 0 or labels.max() >= num_class):
        bad = np.unique(labels[(labels < 0) | (labels >= num_class)])
        raise LabelRangeError(
            f"Training labels must lie in [0, {num_class}), found {bad.tolist()}"
        )
    if labels.size and not np.all(np.equal(np.mod(labels, 1), 0)):
        raise LabelRangeError("Training labels must be integer class codes")
    return labels.astype(np.int64)


def build_params(
    booster: str,
    hyperparams: Dict[str, Any],
    num_class: int,
    seed: int = 42,
    nthread: int = -1,
) -> Dict[str, Any]:
    """Assemble xgboost parameters for a multi-class softmax booster."""
    if booster not in BOOSTER_TYPES:
        raise ValueError(f"Unknown booster variant: {booster!r}")

    allowed = TREE_PARAMS if booster == 'tree' else LINEAR_PARAMS
    params = {k: v for k, v in hyperparams.items() if k in allowed}
    params.update({
        'booster': BOOSTER_TYPES[booster],
        'objective': 'multi:softprob',
        'eval_metric': 'mlogloss',
        'num_class': int(num_class),
        'seed': int(seed),
        'nthread': int(nthread),
    })
    return params


def train(
    features,
    labels,
    num_class: int,
    hyperparams: Dict[str, Any],
    n_rounds: int,
    booster: str = 'tree',
    eval_set: Optional[Tuple[Any, Any]] = None,
    seed: int = 42,
    nthread: int = -1,
    verbose_eval=False,
) -> TrainedClassifier:
    """
    Fit a multi-class probability model for a fixed number of boosting rounds.

    Args:
        features: Training matrix (DataFrame or 2-D array)
        labels: Zero-based class codes in [0, num_class)
        num_class: Number of classes
        hyperparams: Booster hyperparameters (tree or linear set)
        n_rounds: Number of boosting rounds
        booster: 'tree' (gbtree) or 'linear' (gblinear)
        eval_set: Optional (features, labels) monitored every round; never
            used for early stopping or model selection
        verbose_eval: Passed through to xgboost.train

    Returns:
        TrainedClassifier
    """
    values, feature_cols = _to_matrix(features)
    y = _check_labels(labels, num_class)
    if len(values) != len(y):
        raise InputSchemaError(f"{len(values)} feature rows but {len(y)} labels")

    params = build_params(booster, hyperparams, num_class, seed=seed, nthread=nthread)

    dtrain = xgb.DMatrix(values, label=y, feature_names=feature_cols)
    evals = [(dtrain, 'train')]
    if eval_set is not None:
        val_values, val_cols = _to_matrix(eval_set[0])
        if val_cols != feature_cols:
            raise InputSchemaError("Validation columns differ from training columns")
        y_val = _check_labels(eval_set[1], num_class)
        dval = xgb.DMatrix(val_values, label=y_val, feature_names=feature_cols)
        evals.append((dval, 'valid'))

    evals_result: Dict[str, Dict[str, List[float]]] = {}
    model = xgb.train(
        params,
        dtrain,
        num_boost_round=int(n_rounds),
        evals=evals,
        evals_result=evals_result,
        verbose_eval=verbose_eval,
    )

    return TrainedClassifier(
        booster=model,
        booster_type=booster,
        params=params,
        n_rounds=int(n_rounds),
        num_class=int(num_class),
        feature_cols=tuple(feature_cols),
        evals_result=evals_result,
    )


def predict(model: TrainedClassifier, features) -> np.ndarray:
    """Return the flat, row-major N x C probability buffer."""
    values, feature_cols = _to_matrix(features)
    if isinstance(features, pd.DataFrame) and tuple(feature_cols) != model.feature_cols:
        raise InputSchemaError("Prediction columns differ from training columns")
    if values.shape[1] != len(model.feature_cols):
        raise InputSchemaError(
            f"Model expects {len(model.feature_cols)} features, got {values.shape[1]}"
        )

    dmatrix = xgb.DMatrix(values, feature_names=list(model.feature_cols))
    return np.asarray(model.booster.predict(dmatrix), dtype=np.float64).reshape(-1)


def feature_importance(
    model: TrainedClassifier,
    feature_names: Optional[Dict[str, str]] = None,
    top_n: Optional[int] = 10,
) -> pd.DataFrame:
    """
    Rank features by total split gain, substituting human-readable names.

    Only tree boosters record split gain; features never used in a split
    are absent from the ranking.
    """
    if model.booster_type != 'tree':
        raise ValueError("Split-gain importance is only defined for the tree booster")

    scores = model.booster.get_score(importance_type='total_gain')
    importance_df = pd.DataFrame({
        'feature': list(scores.keys()),
        'importance': list(scores.values()),
    })

    if feature_names is not None:
        missing = [f for f in importance_df['feature'] if f not in feature_names]
        if missing:
            raise InputSchemaError(f"No name for feature identifiers: {missing[:5]}")
        importance_df['name'] = importance_df['feature'].map(feature_names)
    else:
        importance_df['name'] = importance_df['feature']

    importance_df = importance_df.sort_values('importance', ascending=False).reset_index(drop=True)
    if top_n is not None:
        importance_df = importance_df.head(top_n)
    return importance_df
