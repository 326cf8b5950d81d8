from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

from .data_loader import ACTIVITY_MAPPER


def _activity_names(labels, class_names: Optional[Dict[int, str]]) -> List[str]:
    class_names = ACTIVITY_MAPPER if class_names is None else class_names
    return [class_names.get(int(label), str(label)) for label in labels]


def _save(fig, save_path: Path) -> Path:
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return save_path


def plot_component_pairs(
    scores: np.ndarray,
    labels,
    pairs: Sequence[Sequence[int]],
    save_path: Path,
    class_names: Optional[Dict[int, str]] = None,
    explained_variance_ratio: Optional[np.ndarray] = None,
) -> Path:
    """Scatter selected principal-component pairs, colored by activity (1-based labels)."""
    pairs = [tuple(p) for p in pairs if max(p) < scores.shape[1]]
    if not pairs:
        raise ValueError(f"No component pair fits within {scores.shape[1]} components")

    fig, axes = plt.subplots(1, len(pairs), figsize=(6 * len(pairs), 5), squeeze=False)
    hue = _activity_names(labels, class_names)

    for ax, (i, j) in zip(axes[0], pairs):
        sns.scatterplot(
            x=scores[:, i], y=scores[:, j], hue=hue,
            s=8, alpha=0.6, linewidth=0, palette="tab10", ax=ax,
        )
        xlabel, ylabel = f"PC{i + 1}", f"PC{j + 1}"
        if explained_variance_ratio is not None:
            xlabel += f" ({explained_variance_ratio[i]:.1%})"
            ylabel += f" ({explained_variance_ratio[j]:.1%})"
        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
        ax.set_title(f"PC{i + 1} vs PC{j + 1}")

    return _save(fig, save_path)


def plot_components_3d(
    scores: np.ndarray,
    labels,
    save_path: Path,
    class_names: Optional[Dict[int, str]] = None,
) -> Path:
    if scores.shape[1] < 3:
        raise ValueError("3-D scatter needs at least three components")

    class_names = ACTIVITY_MAPPER if class_names is None else class_names
    labels = np.asarray(labels)

    fig = plt.figure(figsize=(9, 7))
    ax = fig.add_subplot(projection="3d")
    palette = sns.color_palette("tab10", n_colors=len(class_names))
    for color, (class_id, name) in zip(palette, sorted(class_names.items())):
        mask = labels == class_id
        if not mask.any():
            continue
        ax.scatter(scores[mask, 0], scores[mask, 1], scores[mask, 2],
                   s=6, alpha=0.6, color=color, label=name)
    ax.set_xlabel("PC1")
    ax.set_ylabel("PC2")
    ax.set_zlabel("PC3")
    ax.legend(loc="upper left", fontsize=8)
    ax.set_title("First three principal components")

    return _save(fig, save_path)


def plot_feature_importance(importance_df: pd.DataFrame, save_path: Path, title: str = None) -> Path:
    """Horizontal bars of the ranked features, most important on top."""
    fig, ax = plt.subplots(figsize=(10, 0.5 * len(importance_df) + 1.5))
    sns.barplot(data=importance_df, x="importance", y="name", color="#2E8B57", ax=ax)
    ax.set_xlabel("Total split gain")
    ax.set_ylabel("")
    ax.set_title(title or f"Top {len(importance_df)} features by gain")
    return _save(fig, save_path)


def plot_confusion_matrix(
    cm: pd.DataFrame,
    save_path: Path,
    class_names: Optional[Dict[int, str]] = None,
    title: str = "Confusion matrix",
) -> Path:
    class_names = ACTIVITY_MAPPER if class_names is None else class_names
    cm = cm.rename(index=class_names, columns=class_names)

    fig, ax = plt.subplots(figsize=(8, 6.5))
    sns.heatmap(cm, annot=True, fmt="d", cmap="viridis", linewidths=0.5, cbar=False, ax=ax)
    ax.set_xlabel("Predicted")
    ax.set_ylabel("True")
    ax.set_title(title)
    ax.set_xticklabels(ax.get_xticklabels(), rotation=45, ha="right")
    return _save(fig, save_path)


def plot_training_curves(
    evals_result: Dict[str, Dict[str, List[float]]],
    save_path: Path,
    metric: str = "mlogloss",
    title: str = None,
) -> Path:
    """Per-round metric for each monitored set."""
    fig, ax = plt.subplots(figsize=(8, 5))
    for name, metrics in evals_result.items():
        if metric in metrics:
            ax.plot(np.arange(1, len(metrics[metric]) + 1), metrics[metric], label=name)
    ax.set_xlabel("Round")
    ax.set_ylabel(metric)
    ax.set_title(title or f"{metric} per boosting round")
    ax.legend()
    return _save(fig, save_path)
