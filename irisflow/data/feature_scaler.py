"""
Feature Scaler Module
====================

Centering and scaling of numeric predictors, fit once and reapplied.

"""

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler
from typing import Union
import logging

logger = logging.getLogger(__name__)


class FeatureScaler:
    """Thin wrapper over StandardScaler selecting which moments to remove."""

    MODES = {
        'center': {'with_mean': True, 'with_std': False},
        'scale': {'with_mean': False, 'with_std': True},
        'standard': {'with_mean': True, 'with_std': True},
    }

    def __init__(self, mode: str = 'standard'):
        """
        Initialize scaler.

        Args:
            mode: 'center' (subtract means), 'scale' (divide by standard
                deviations) or 'standard' (both)
        """
        if mode not in self.MODES:
            raise ValueError(f"Unknown scaler mode '{mode}'. Use one of {list(self.MODES)}")

        self.mode = mode
        self.scaler = StandardScaler(**self.MODES[mode])

    def fit_transform(self, X_train: Union[np.ndarray, pd.DataFrame]) -> np.ndarray:
        """
        Fit on training data and return it transformed.

        Scaling divides by the sample standard deviation (ddof=1) of each
        training column; zero-variance columns are left unscaled.

        Args:
            X_train: Training data to fit on

        Returns:
            Transformed training array
        """
        values = self._values(X_train)
        self.scaler.fit(values)

        if self.scaler.with_std and len(values) > 1:
            sds = values.std(axis=0, ddof=1)
            self.scaler.scale_ = np.where(sds > 0, sds, 1.0)

        logger.info(f"Fitted {self.mode} scaler on {values.shape[1]} features")
        return self.scaler.transform(values)

    def transform(self, X: Union[np.ndarray, pd.DataFrame]) -> np.ndarray:
        """Transform new data using fitted scaler."""
        return self.scaler.transform(self._values(X))

    @property
    def means(self):
        """Learned column means, None when centering is off."""
        return getattr(self.scaler, 'mean_', None) if self.scaler.with_mean else None

    @property
    def scales(self):
        """Learned column standard deviations, None when scaling is off."""
        return getattr(self.scaler, 'scale_', None)

    @staticmethod
    def _values(X) -> np.ndarray:
        # sklearn warns about feature names when fit and transform inputs differ in kind
        return X.to_numpy(dtype=float) if isinstance(X, pd.DataFrame) else np.asarray(X, dtype=float)
