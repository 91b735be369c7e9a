"""
Multicollinearity Analysis Module
===========================================

Removes highly correlated features while ensuring minimum features are retained.

"""

import numpy as np
import pandas as pd
from typing import List, Optional, Union
import logging

logger = logging.getLogger(__name__)


class MulticollinearityAnalyzer:
    """
    Analyzes and removes highly correlated features from datasets.

    Prioritizes removing features with higher average correlation to others.
    """

    METHODS = ('pearson', 'spearman', 'kendall')

    def __init__(
        self,
        correlation_threshold: float = 0.9,
        min_features: int = 1,
        method: str = 'pearson'
    ):
        """
        Initialize the analyzer.

        Args:
            correlation_threshold: Absolute correlation above which a pair is redundant
            min_features: Never drop below this many features
            method: Correlation method ('pearson', 'spearman' or 'kendall')
        """
        if not 0 <= correlation_threshold <= 1:
            raise ValueError(f"correlation_threshold must be in [0, 1], got {correlation_threshold}")
        if method not in self.METHODS:
            raise ValueError(f"method must be one of {self.METHODS}")

        self.correlation_threshold = correlation_threshold
        self.min_features = min_features
        self.method = method
        self.correlation_matrix = None
        self.selected_indices = None
        self.removed_indices = None

    def analyze_and_select_features(
        self,
        X: Union[np.ndarray, pd.DataFrame],
        feature_names: Optional[List[str]] = None,
        verbose: bool = True
    ):
        """
        Select features by removing highly correlated ones.

        Returns:
            (X_filtered, indices, removed)
        """
        if isinstance(X, pd.DataFrame):
            feature_names = feature_names or list(X.columns)
            frame = X.reset_index(drop=True)
        else:
            frame = pd.DataFrame(np.asarray(X, dtype=float))

        n_features = frame.shape[1]
        if feature_names is not None and len(feature_names) != n_features:
            raise ValueError(f"Got {len(feature_names)} names for {n_features} features")

        corr = frame.corr(method=self.method).to_numpy()
        # Constant columns yield NaN correlations; treat them as uncorrelated
        corr = np.nan_to_num(corr, nan=0.0)

        indices = self._select_features(np.abs(corr), self.correlation_threshold, self.min_features)
        removed = np.setdiff1d(np.arange(n_features), indices)

        self.correlation_matrix = corr
        self.selected_indices = indices
        self.removed_indices = removed

        if verbose:
            logger.info(f"Selected {len(indices)}/{n_features} features (threshold={self.correlation_threshold})")
            self._print_analysis_summary(n_features, feature_names)

        if isinstance(X, pd.DataFrame):
            return X.iloc[:, indices], indices, removed
        return np.asarray(X)[:, indices], indices, removed

    def removed_names(self, feature_names: List[str]) -> List[str]:
        """Names of the features dropped by the last analysis."""
        if self.removed_indices is None:
            raise ValueError("Analyzer has not been run")
        return [feature_names[i] for i in self.removed_indices]

    def _select_features(self, corr_matrix: np.ndarray, threshold: float, min_features: int) -> np.ndarray:
        """Select features based on correlation threshold and minimum count."""
        n_features = len(corr_matrix)

        # Find highly correlated pairs
        high_corr_pairs = []
        for i in range(n_features):
            for j in range(i + 1, n_features):
                if corr_matrix[i, j] > threshold:
                    high_corr_pairs.append((corr_matrix[i, j], i, j))

        high_corr_pairs.sort(reverse=True)

        # Select features to drop
        to_drop = set()
        for _, i, j in high_corr_pairs:
            if i in to_drop or j in to_drop:
                continue

            if n_features - len(to_drop) - 1 >= min_features:
                # Drop feature with higher average correlation
                avg_i = np.mean([corr_matrix[i, k] for k in range(n_features) if k != i and k not in to_drop])
                avg_j = np.mean([corr_matrix[j, k] for k in range(n_features) if k != j and k not in to_drop])

                to_drop.add(i if avg_i > avg_j else j)

        return np.array(sorted([i for i in range(n_features) if i not in to_drop]), dtype=int)

    def _print_analysis_summary(self, n_features: int, feature_names: Optional[List[str]] = None):
        """Log summary of multicollinearity analysis."""
        logger.info("Multicollinearity Analysis Summary:")
        logger.info(f"  Original features: {n_features}")
        logger.info(f"  Correlation threshold: {self.correlation_threshold:.2f} ({self.method})")
        logger.info(f"  Features removed: {len(self.removed_indices)}")
        logger.info(f"  Features retained: {len(self.selected_indices)}")

        if feature_names and len(self.removed_indices):
            logger.info(f"  Removed: {', '.join(self.removed_names(feature_names))}")

        if self.correlation_matrix is not None and n_features > 1:
            correlations = self.correlation_matrix[np.triu_indices(n_features, k=1)]
            logger.info(f"  Mean |correlation|: {np.mean(np.abs(correlations)):.3f}")
            logger.info(f"  Max |correlation|: {np.max(np.abs(correlations)):.3f}")
