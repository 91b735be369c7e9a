"""Base model interface and factory classes.

This module provides the foundation for all classifiers in the framework.
A model is described by a family (e.g. ``rand_forest``), an engine that
implements it (e.g. ``sklearn`` or ``xgboost``) and engine-independent
arguments. The factory maps (family, engine) pairs to concrete classes so that
switching implementation is a one-word change.

Key Components:
    - BaseModel: Abstract base class for all models
    - ModelFactory: Factory for model creation and registration
"""

from abc import ABC, abstractmethod
import copy
import numpy as np
import pandas as pd
from typing import Any, Dict, Optional, Union, List
from loguru import logger
from pathlib import Path
import joblib
from sklearn.preprocessing import LabelEncoder


ArrayLike = Union[np.ndarray, pd.DataFrame, pd.Series]


def safe_int(value: Any, default: Optional[int]) -> Optional[int]:
    """
    Safely convert value to integer.

    Handles strings with scientific notation, floats and None values.
    Returns default if conversion fails.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Converted integer value or default
    """
    if value is None:
        return default
    try:
        return int(float(str(value)))
    except (TypeError, ValueError):
        return default


class BaseModel(ABC):
    """
    Abstract base class for all classifiers.

    Provides a consistent interface for model training, prediction, and persistence.
    Labels of any hashable type are encoded to 0..k-1 before reaching the
    engine and decoded again on prediction.

    Attributes:
        config: Engine-independent arguments and engine extras
        engine: Name of the implementation backing this model
        model: The underlying estimator
        fitted: Whether the model has been trained
        model_name: Name of the model class
        classes_: Original label values, in probability column order
    """

    family: str = ''
    engine: str = ''

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize base model.

        Args:
            config: Model configuration dictionary containing hyperparameters
        """
        self.config = config or {}
        self.model = None
        self.fitted = False
        self.model_name = self.__class__.__name__
        self.feature_names: Optional[List[str]] = None
        self._encoder = LabelEncoder()

    @property
    def classes_(self) -> np.ndarray:
        if not self.fitted:
            raise ValueError("Model not trained")
        return self._encoder.classes_

    def train(self, X: ArrayLike, y: ArrayLike) -> None:
        """
        Train the model on the provided data.

        Args:
            X: Training features of shape (n_samples, n_features)
            y: Training labels of shape (n_samples,)
        """
        if isinstance(X, pd.DataFrame):
            self.feature_names = list(X.columns)
        X = self._to_array(X)
        y_encoded = self._encoder.fit_transform(np.asarray(y))
        if len(self._encoder.classes_) < 2:
            raise ValueError("Need at least two classes to train a classifier")

        self._fit(X, y_encoded)
        self.fitted = True
        logger.info(f"{self.model_name} [{self.engine}] trained on {X.shape[0]} samples, "
                    f"{X.shape[1]} features, {len(self._encoder.classes_)} classes")

    def fit_xy(self, data: pd.DataFrame, outcome: str) -> 'BaseModel':
        """Train on a frame, using every column except the outcome as a predictor."""
        if outcome not in data.columns:
            raise ValueError(f"Outcome column '{outcome}' not found")
        self.train(data.drop(columns=[outcome]), data[outcome])
        return self

    def predict(self, X: ArrayLike) -> np.ndarray:
        """
        Predict class labels.

        Args:
            X: Features of shape (n_samples, n_features)

        Returns:
            Predicted labels of shape (n_samples,), in the original label values
        """
        self._check_fitted()
        proba = self.predict_proba(X)
        return self._encoder.inverse_transform(np.argmax(proba, axis=1))

    def predict_proba(self, X: ArrayLike) -> np.ndarray:
        """
        Predict class probabilities.

        Args:
            X: Features of shape (n_samples, n_features)

        Returns:
            Class probabilities of shape (n_samples, n_classes), columns ordered like classes_
        """
        self._check_fitted()
        proba = np.asarray(self._predict_proba(self._prepare(X)), dtype=float)
        return proba / proba.sum(axis=1, keepdims=True)

    @abstractmethod
    def _fit(self, X: np.ndarray, y: np.ndarray) -> None:
        """Engine-specific training on encoded labels."""

    @abstractmethod
    def _predict_proba(self, X: np.ndarray) -> np.ndarray:
        """Engine-specific probability prediction."""

    def set_engine(self, engine: str) -> 'BaseModel':
        """
        Return an unfitted model of the same family and arguments on another engine.

        Args:
            engine: Registered engine name
        """
        return ModelFactory.create_model(self.family, config=copy.deepcopy(self.config), engine=engine)

    def _prepare(self, X: ArrayLike) -> np.ndarray:
        """Align columns with training order when given a frame."""
        if isinstance(X, pd.DataFrame) and self.feature_names is not None:
            missing = [c for c in self.feature_names if c not in X.columns]
            if missing:
                raise ValueError(f"Columns missing for prediction: {missing}")
            X = X[self.feature_names]
        return self._to_array(X)

    def _check_fitted(self) -> None:
        if not self.fitted:
            raise ValueError("Model not trained")

    @staticmethod
    def _to_array(X: ArrayLike) -> np.ndarray:
        X = X.to_numpy(dtype=float) if isinstance(X, (pd.DataFrame, pd.Series)) else np.asarray(X, dtype=float)
        return X.reshape(-1, 1) if X.ndim == 1 else X

    def save(self, filepath: Union[str, Path]) -> Path:
        """
        Save model to disk.

        Args:
            filepath: Path where the model should be saved

        Raises:
            ValueError: If attempting to save an unfitted model
        """
        if not self.fitted:
            raise ValueError("Cannot save unfitted model")

        filepath = Path(filepath).with_suffix('.joblib')
        filepath.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump({
            'model_name': self.model_name,
            'family': self.family,
            'engine': self.engine,
            'config': self.config,
            'fitted': self.fitted,
            'feature_names': self.feature_names,
            'encoder': self._encoder,
            'model': self.model,
        }, filepath)
        logger.info(f"Saved {self.model_name}: {filepath}")
        return filepath

    def load(self, filepath: Union[str, Path]) -> None:
        """
        Load model from disk.

        Args:
            filepath: Path to the saved model file
        """
        filepath = Path(filepath).with_suffix('.joblib')
        if not filepath.exists():
            raise FileNotFoundError(f"Model file not found: {filepath}")
        metadata = joblib.load(filepath)

        if not metadata.get('fitted', False):
            raise ValueError("Cannot load unfitted model")
        if metadata.get('engine') != self.engine:
            raise ValueError(f"Saved model uses engine '{metadata.get('engine')}', not '{self.engine}'")

        self.config = metadata.get('config', {})
        self.model_name = metadata.get('model_name', self.__class__.__name__)
        self.feature_names = metadata.get('feature_names')
        self._encoder = metadata['encoder']
        self.model = metadata['model']
        self.fitted = True

        logger.info(f"Loaded {self.model_name}: {filepath}")

    def __repr__(self) -> str:
        args = ', '.join(f'{k}={v}' for k, v in self.config.items())
        return f"{self.family} ({self.engine}): {args}"


# ============================================================================
# FACTORY CLASSES
# ============================================================================

class ModelFactory:
    """
    Factory class for creating and managing model instances.

    Models are registered under a family name and an engine name. The first
    engine registered for a family becomes its default.
    """

    _models: Dict[str, Dict[str, type]] = {}
    _default_engines: Dict[str, str] = {}

    @classmethod
    def register_model(cls, name: str, model_class: type, engine: str) -> None:
        """
        Register a model class with the factory.

        Args:
            name: Model family name
            model_class: Class that inherits from BaseModel
            engine: Engine name the class implements
        """
        cls._models.setdefault(name, {})[engine] = model_class
        cls._default_engines.setdefault(name, engine)

    @classmethod
    def create_model(cls, name: str, config: Optional[Dict[str, Any]] = None,
                     engine: Optional[str] = None, **kwargs) -> BaseModel:
        """
        Create a model instance by family and engine.

        Args:
            name: Registered family name
            config: Configuration dictionary for the model
            engine: Engine name; the family default when None
            **kwargs: Additional keyword arguments merged into config

        Returns:
            Instantiated, unfitted model

        Raises:
            ValueError: If the family or engine is not registered, or the mode is unsupported
        """
        if name not in cls._models:
            raise ValueError(f"Unknown model: {name}. Available: {cls.list_models()}")

        engine = engine or cls._default_engines[name]
        if engine not in cls._models[name]:
            raise ValueError(f"Unknown engine '{engine}' for {name}. Available: {cls.list_engines(name)}")

        full_config = {**(config or {}), **kwargs}
        mode = full_config.pop('mode', 'classification')
        if mode != 'classification':
            raise ValueError(f"Unsupported mode: {mode}")

        return cls._models[name][engine](config=full_config)

    @classmethod
    def list_models(cls) -> list:
        """Get list of all registered model families."""
        return list(cls._models.keys())

    @classmethod
    def list_engines(cls, name: str) -> list:
        """Get list of engines registered for a family."""
        return list(cls._models.get(name, {}).keys())
