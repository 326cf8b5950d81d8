from typing import Dict, Any, Optional, Tuple

import numpy as np
import pandas as pd

from . import model as boosters
from .model import TrainedClassifier


class Trainer:
    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.training_config = config['training']
        self.num_class = int(self.training_config['num_class'])
        self.models: Dict[str, TrainedClassifier] = {}

    def hyperparams(self, booster: str) -> Tuple[Dict[str, Any], int]:
        """Booster hyperparameters and round count from the config."""
        params = dict(self.config[booster])
        n_rounds = int(params.pop('n_rounds'))
        return params, n_rounds

    def train(
        self,
        X_train: pd.DataFrame,
        y_train: np.ndarray,
        booster: str,
        eval_set: Optional[Tuple[pd.DataFrame, np.ndarray]] = None,
    ) -> TrainedClassifier:
        """
        Train one booster variant on the full training split.

        Args:
            X_train: Training features
            y_train: Zero-based training labels
            booster: 'tree' or 'linear'
            eval_set: Optional (features, zero-based labels) monitored per round

        Returns:
            Trained classifier
        """
        params, n_rounds = self.hyperparams(booster)
        seed = self.training_config.get('seed', 42)
        nthread = self.training_config.get('nthread', -1)
        xgb_params = boosters.build_params(booster, params, self.num_class, seed=seed, nthread=nthread)

        print(f"\n{'='*60}")
        print(f"Training XGBoost {booster} booster for {n_rounds} rounds")
        print(f"{'='*60}")
        print(f"Number of features: {X_train.shape[1]}")
        print(f"Number of samples: {len(X_train)}")
        print(f"XGBoost parameters: {xgb_params}")
        ignored = sorted(set(params) - set(xgb_params))
        if ignored:
            print(f"⚠ Ignored config keys for {booster} booster: {ignored}")

        log_interval = self.training_config.get('log_interval', False)
        trained = boosters.train(
            X_train,
            y_train,
            num_class=self.num_class,
            hyperparams=params,
            n_rounds=n_rounds,
            booster=booster,
            eval_set=eval_set,
            seed=seed,
            nthread=nthread,
            verbose_eval=log_interval if log_interval else False,
        )
        self.models[booster] = trained

        for name, metrics in trained.evals_result.items():
            final = metrics['mlogloss'][-1]
            print(f"✓ Final {name} mlogloss: {final:.4f}")

        return trained
