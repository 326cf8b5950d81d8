from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA


@dataclass(frozen=True)
class PCAResult:
    scores: np.ndarray                     # (n_samples, n_components)
    components: np.ndarray                 # (n_components, n_features)
    explained_variance_ratio: np.ndarray   # descending

    @property
    def n_components(self) -> int:
        return self.scores.shape[1]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            self.scores,
            columns=[f"PC{i + 1}" for i in range(self.n_components)],
        )


def compute_principal_components(X, n_components: Optional[int] = None) -> PCAResult:
    """
    Project samples onto the principal components of the centered feature matrix.

    Uses the full LAPACK SVD so the result is identical across runs; the
    randomized solver sklearn picks for wide inputs is avoided. Zero-variance
    columns are accepted and simply produce near-zero trailing components.

    Args:
        X: Training features (rows = samples)
        n_components: Number of leading components to keep, all if None

    Returns:
        PCAResult with per-sample coordinates ordered by explained variance
    """
    values = X.to_numpy(dtype=float) if isinstance(X, pd.DataFrame) else np.asarray(X, dtype=float)
    if values.ndim != 2:
        raise ValueError(f"Expected a 2-D feature matrix, got shape {values.shape}")

    max_components = min(values.shape)
    if n_components is not None:
        n_components = min(int(n_components), max_components)

    pca = PCA(n_components=n_components, svd_solver='full')
    scores = pca.fit_transform(values)

    return PCAResult(
        scores=scores,
        components=pca.components_,
        explained_variance_ratio=pca.explained_variance_ratio_,
    )
