"""Models module for ML framework.

Every model family is available on one or more engines:
- rand_forest: 'sklearn' (RandomForestClassifier), 'xgboost' (XGBRFClassifier)
"""

# Base classes and factories
from .base import (
    BaseModel,
    ModelFactory,
    safe_int
)

# Random forest engines
from .classical import (
    SklearnModel,
    RandomForestModel,
    XGBRandomForestModel
)


def rand_forest(engine: str = None, **kwargs) -> BaseModel:
    """Shorthand for ModelFactory.create_model('rand_forest', ...)."""
    return ModelFactory.create_model('rand_forest', engine=engine, **kwargs)


__all__ = [
    'BaseModel',
    'ModelFactory',
    'safe_int',
    'SklearnModel',
    'RandomForestModel',
    'XGBRandomForestModel',
    'rand_forest',
]
