from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

import numpy as np
import pandas as pd

from .data_loader import DataLoader, HARDataset, ACTIVITY_MAPPER, to_zero_based
from .decomposition import PCAResult, compute_principal_components
from .evaluate import EvaluationReport, evaluate_model, print_evaluation_summary
from .model import TrainedClassifier, feature_importance
from .train import Trainer
from .visualization import (
    plot_component_pairs,
    plot_components_3d,
    plot_confusion_matrix,
    plot_feature_importance,
    plot_training_curves,
)


@dataclass(frozen=True)
class PipelineResult:
    dataset: HARDataset
    pca: PCAResult
    models: Dict[str, TrainedClassifier]
    reports: Dict[str, EvaluationReport]
    importance: Optional[pd.DataFrame] = None
    figures: List[Path] = field(default_factory=list)


def _save_pca_figures(pca: PCAResult, labels, config: Dict[str, Any], figure_dir: Path) -> List[Path]:
    paths = [plot_component_pairs(
        pca.scores, labels, config['pca']['pairs'], figure_dir / "pca_pairs.png",
        explained_variance_ratio=pca.explained_variance_ratio,
    )]
    if pca.n_components >= 3:
        paths.append(plot_components_3d(pca.scores, labels, figure_dir / "pca_3d.png"))
    return paths


def resolve_figure_dir(config: Dict[str, Any]) -> Path:
    """output.figure_dir, relative paths taken from data.base_dir like the input tables."""
    figure_dir = Path(config['output']['figure_dir'])
    if figure_dir.is_absolute():
        return figure_dir
    return Path(config['data'].get('base_dir', '.')) / figure_dir


def run_pipeline(
    config: Dict[str, Any],
    boosters: Optional[List[str]] = None,
    save_plots: Optional[bool] = None,
) -> PipelineResult:
    """Loader -> PCA -> Trainer -> Evaluator, once per booster variant."""
    boosters = boosters or list(config['training']['boosters'])
    if save_plots is None:
        save_plots = config['output'].get('save_plots', True)
    figure_dir = resolve_figure_dir(config)
    num_class = int(config['training']['num_class'])
    figures: List[Path] = []

    print("\n" + "="*60)
    print("STEP 1: Loading Data")
    print("="*60)
    dataset = DataLoader(config).load_data()
    y_train = to_zero_based(dataset.y_train, num_class)
    y_test = to_zero_based(dataset.y_test, num_class)

    print("\n" + "="*60)
    print("STEP 2: Principal Components")
    print("="*60)
    pca = compute_principal_components(dataset.X_train, config['pca'].get('n_components'))
    cumulative = np.cumsum(pca.explained_variance_ratio)
    print(f"✓ {pca.n_components} components, cumulative explained variance: "
          f"{[f'{v:.3f}' for v in cumulative[:5]]}")
    if save_plots:
        figures.extend(_save_pca_figures(pca, dataset.y_train, config, figure_dir))

    print("\n" + "="*60)
    print("STEP 3: Model Training")
    print("="*60)
    trainer = Trainer(config)
    eval_set = (dataset.X_test, y_test) if config['training'].get('monitor_test', False) else None
    for booster in boosters:
        trainer.train(dataset.X_train, y_train, booster, eval_set=eval_set)

    print("\n" + "="*60)
    print("STEP 4: Evaluation")
    print("="*60)
    reports: Dict[str, EvaluationReport] = {}
    for booster, trained in trainer.models.items():
        report = evaluate_model(trained, dataset.X_test, y_test)
        reports[booster] = report
        print_evaluation_summary(report, ACTIVITY_MAPPER)

        if save_plots:
            figures.append(plot_confusion_matrix(
                report.confusion, figure_dir / f"confusion_{booster}.png",
                title=f"Confusion matrix ({booster} booster)",
            ))
            if trained.evals_result:
                figures.append(plot_training_curves(
                    trained.evals_result, figure_dir / f"mlogloss_{booster}.png",
                ))

    importance = None
    if 'tree' in trainer.models:
        top_n = config['output'].get('top_n_features', 10)
        importance = feature_importance(trainer.models['tree'], dataset.feature_names, top_n)
        print(f"\nTop {top_n} features by split gain:")
        print(importance[['name', 'importance']].to_string(index=False))
        if save_plots:
            figures.append(plot_feature_importance(importance, figure_dir / "feature_importance.png"))

    if figures:
        print(f"\n✓ Saved {len(figures)} figures to {figure_dir}")

    return PipelineResult(
        dataset=dataset,
        pca=pca,
        models=dict(trainer.models),
        reports=reports,
        importance=importance,
        figures=figures,
    )
