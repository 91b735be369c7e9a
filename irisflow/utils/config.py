"""Configuration management for the workflow."""

import yaml
import copy
from typing import Dict, Optional, Any, Union
from pathlib import Path


DEFAULTS: Dict[str, Any] = {
    'data': {
        'source': 'iris',
        'label_column': 'species',
        'prop': 0.6,
        'random_state': 42,
        'strata': None,
    },
    'preprocessing': {
        'outcome': 'species',
        'correlation': {'enabled': True, 'threshold': 0.9, 'method': 'pearson', 'min_features': 1},
        'centering': {'enabled': True},
        'scaling': {'enabled': True},
    },
    'models': {
        'rf_sklearn': {'enabled': True, 'family': 'rand_forest', 'engine': 'sklearn', 'trees': 100},
        'rf_xgboost': {'enabled': True, 'family': 'rand_forest', 'engine': 'xgboost', 'trees': 100},
    },
    'evaluation': {
        'metrics': ['accuracy', 'kap', 'mn_log_loss', 'roc_auc'],
        'curves': ['gain', 'roc'],
    },
    'visualization': {
        'create_plots': True,
        'show': False,
    },
    'output': {
        'output_dir': None,
        'save_artifacts': False,
    },
}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class Config:
    """
    YAML configuration loader layered over built-in defaults.

    Values in the file win; anything the file leaves out keeps its default, so
    an empty or missing file reproduces the standard walkthrough. The
    'models' section is taken from the file as a whole when present.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None,
                 overrides: Optional[Dict[str, Any]] = None):
        """Load configuration from YAML file (optional) and apply overrides."""
        self.config_path = Path(config_path) if config_path else None
        loaded: Dict[str, Any] = {}

        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
            with open(self.config_path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration must be a mapping, got {type(loaded).__name__}")

        base = copy.deepcopy(DEFAULTS)
        if 'models' in loaded:
            base['models'] = {}
        self.config = deep_merge(deep_merge(base, loaded), overrides or {})

    @property
    def name(self) -> str:
        return self.config_path.stem if self.config_path else 'default'

    def get_model_configs(self, enabled_only: bool = True) -> Dict[str, Dict[str, Any]]:
        """
        Named model configurations.

        Returns:
            Deep copies keyed by model name, disabled entries dropped by default
        """
        models = self.config.get('models', {}) or {}
        return {
            name: copy.deepcopy(cfg) for name, cfg in models.items()
            if not enabled_only or cfg.get('enabled', True)
        }

    def get_model_config(self, model_name: str) -> Dict[str, Any]:
        """
        Get one model configuration.

        Raises:
            ValueError: If model not found
        """
        models = self.config.get('models', {}) or {}
        if model_name not in models:
            raise ValueError(f"Model '{model_name}' not found")
        return copy.deepcopy(models[model_name])

    # Simple getters for other sections
    def get_data_config(self) -> Dict[str, Any]:
        """Get data configuration."""
        return self.config.get('data', {})

    def get_preprocessing_config(self) -> Dict[str, Any]:
        """Get preprocessing configuration."""
        return self.config.get('preprocessing', {})

    def get_evaluation_config(self) -> Dict[str, Any]:
        """Get evaluation configuration."""
        return self.config.get('evaluation', {})

    def get_visualization_config(self) -> Dict[str, Any]:
        """Get visualization configuration."""
        return self.config.get('visualization', {})

    def get_output_config(self) -> Dict[str, Any]:
        """Get output configuration."""
        return self.config.get('output', {})

    def __getitem__(self, key: str) -> Any:
        """Allow dict-like access to config."""
        return self.config[key]

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with default."""
        return self.config.get(key, default)
