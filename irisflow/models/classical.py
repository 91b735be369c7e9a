"""Random forest classifiers on interchangeable engines."""

import numpy as np
from typing import Dict, Any, Optional
from sklearn.ensemble import RandomForestClassifier
from xgboost import XGBRFClassifier
from loguru import logger

from .base import BaseModel, ModelFactory, safe_int


class SklearnModel(BaseModel):
    """
    Base wrapper for estimators following the scikit-learn API.

    Subclasses declare how engine-independent arguments map onto the
    estimator's own argument names in ARG_MAP.
    """

    ARG_MAP: Dict[str, str] = {}

    def __init__(self, model_class, config: Optional[Dict[str, Any]] = None, **defaults):
        super().__init__(config)
        self.model_class = model_class
        self.defaults = defaults

    def _engine_params(self, n_features: int) -> Dict[str, Any]:
        """Translate config into estimator keyword arguments."""
        params = self.defaults.copy()
        accepted = self.model_class().get_params()

        for k, v in self.config.items():
            if v is None:
                continue
            if k in self.ARG_MAP:
                target = self.ARG_MAP[k]
                params[target] = self._translate(k, v, n_features)
            elif k in accepted:
                # Engine-specific extras pass straight through
                params[k] = v
            elif k not in ('family', 'engine', 'enabled'):
                logger.warning(f"{self.model_name}: ignoring unknown argument '{k}'")
        return params

    def _translate(self, name: str, value: Any, n_features: int) -> Any:
        """Hook for arguments whose meaning differs between engines."""
        if name == 'mtry':
            return self._check_mtry(value, n_features)
        return safe_int(value, None) if name in ('trees', 'min_n') else value

    @staticmethod
    def _check_mtry(value: Any, n_features: int) -> int:
        mtry = safe_int(value, None)
        if mtry is None or not 1 <= mtry <= n_features:
            raise ValueError(f"mtry must be between 1 and {n_features}, got {value}")
        return mtry

    def _fit(self, X: np.ndarray, y: np.ndarray) -> None:
        params = self._engine_params(X.shape[1])
        self.model = self.model_class(**params)
        self.model.fit(X, y)

    def _predict_proba(self, X: np.ndarray) -> np.ndarray:
        return self.model.predict_proba(X)


class RandomForestModel(SklearnModel):
    """Random forest via scikit-learn's RandomForestClassifier."""

    family = 'rand_forest'
    engine = 'sklearn'
    ARG_MAP = {'trees': 'n_estimators', 'mtry': 'max_features', 'min_n': 'min_samples_leaf'}

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(RandomForestClassifier, config, n_estimators=500, n_jobs=-1, random_state=42)


class XGBRandomForestModel(SklearnModel):
    """Random forest via XGBoost's XGBRFClassifier (a single round of parallel trees)."""

    family = 'rand_forest'
    engine = 'xgboost'
    ARG_MAP = {'trees': 'n_estimators', 'mtry': 'colsample_bynode', 'min_n': 'min_child_weight'}

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(XGBRFClassifier, config, n_estimators=500, n_jobs=-1, random_state=42)

    def _translate(self, name: str, value: Any, n_features: int) -> Any:
        # XGBoost samples predictors per node as a fraction, not a count
        if name == 'mtry':
            return self._check_mtry(value, n_features) / n_features
        return super()._translate(name, value, n_features)


# Register all models
ModelFactory.register_model('rand_forest', RandomForestModel, engine='sklearn')
ModelFactory.register_model('rand_forest', XGBRandomForestModel, engine='xgboost')
