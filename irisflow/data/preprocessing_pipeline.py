"""
Preprocessing Pipeline Implementation
=========================================================

A declarative preprocessing recipe for tabular classification workflows.
Stages are declared in configuration, fitted once on training data and
replayed unchanged on any other data.

Pipeline Stages:
1. Correlation filter (fit on training data only)
2. Centering (fit on training data only)
3. Scaling (fit on training data only)

"""

import copy
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, Tuple, Optional, List, Any, Union
from dataclasses import dataclass, field
import joblib
import logging

from .multicollinearity_analyzer import MulticollinearityAnalyzer
from .feature_scaler import FeatureScaler

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    'outcome': 'species',
    'correlation': {'enabled': True, 'threshold': 0.9, 'method': 'pearson', 'min_features': 1},
    'centering': {'enabled': True},
    'scaling': {'enabled': True},
}

STAGE_ORDER = ('correlation', 'centering', 'scaling')


@dataclass
class PreprocessingState:
    """Fitted parameters of a recipe, reusable on any compatible table."""
    outcome: Optional[str] = None
    predictors_in: List[str] = field(default_factory=list)
    stages: List[Dict[str, Any]] = field(default_factory=list)
    transformers: Dict[str, Any] = field(default_factory=dict)
    dropped_columns: List[str] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)
    trained: bool = False

    @property
    def predictors_out(self) -> List[str]:
        return [c for c in self.predictors_in if c not in self.dropped_columns]


class PreprocessingPipeline:
    """
    A preprocessing recipe with a prep/bake lifecycle.

    Modes:
    - 'train': Fit stages on the training frame, transform all splits
    - 'inference': Transform new data using a saved state
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize with configuration dictionary.

        Args:
            config: Configuration dictionary containing settings for each stage;
                    missing keys fall back to DEFAULT_CONFIG
        """
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        for key, value in (config or {}).items():
            if isinstance(value, dict) and isinstance(self.config.get(key), dict):
                self.config[key].update(value)
            else:
                self.config[key] = value

        self.outcome = self.config.get('outcome')
        self.state = PreprocessingState(outcome=self.outcome, config=self.config)
        self._juiced = None

    def execute_pipeline(
        self,
        train: Optional[pd.DataFrame] = None,
        test: Optional[pd.DataFrame] = None,
        inference: Optional[pd.DataFrame] = None,
        mode: str = 'train',
        saved_state: Optional[PreprocessingState] = None
    ) -> Union[Tuple[Dict[str, pd.DataFrame], PreprocessingState], pd.DataFrame]:
        """
        Execute preprocessing with specified mode.

        Args:
            train, test: Data splits (for mode='train')
            inference: New data (for mode='inference')
            mode: 'train' or 'inference'
            saved_state: Required for mode='inference'

        Returns:
            For 'train': (dict of processed splits, preprocessing state)
            For 'inference': processed frame
        """
        if mode == 'train':
            if train is None:
                raise ValueError("train required for training mode")
            self.prep(train)
            output = {'train': self.juice()}
            if test is not None:
                output['test'] = self.bake(test)
            return output, self.state

        elif mode == 'inference':
            if inference is None or saved_state is None:
                raise ValueError("inference and saved_state required for inference mode")
            return self.bake(inference, state=saved_state)

        else:
            raise ValueError(f"Invalid mode: {mode}. Must be 'train' or 'inference'")

    def prep(self, training: pd.DataFrame) -> PreprocessingState:
        """
        Fit every enabled stage on the training frame.

        Args:
            training: Training rows only; the outcome column is carried through

        Returns:
            Fitted preprocessing state
        """
        predictors = self._select_predictors(training)
        if not predictors:
            raise ValueError("No numeric predictor columns to preprocess")

        self.state = PreprocessingState(outcome=self.outcome, predictors_in=predictors, config=self.config)
        X = training[predictors].astype(float)

        n_features_start = X.shape[1]

        if self.config.get('correlation', {}).get('enabled', False):
            X = self._fit_correlation(X)

        if self.config.get('centering', {}).get('enabled', False):
            X = self._fit_scaler(X, 'centering', 'center')

        if self.config.get('scaling', {}).get('enabled', False):
            X = self._fit_scaler(X, 'scaling', 'scale')

        self.state.trained = True
        self._juiced = self._assemble(training, X, self.outcome)

        logger.info(f"Preprocessing complete: {n_features_start} → {X.shape[1]} features")
        return self.state

    def juice(self) -> pd.DataFrame:
        """Processed training data from the last prep."""
        if self._juiced is None:
            raise ValueError("Pipeline not prepped; call prep() first")
        return self._juiced.copy()

    def bake(self, new_data: pd.DataFrame, state: Optional[PreprocessingState] = None) -> pd.DataFrame:
        """
        Apply fitted stages to new data without relearning anything.

        Args:
            new_data: Frame containing at least the fitted predictor columns
            state: Fitted state; defaults to this pipeline's own

        Returns:
            Processed frame (predictors, then the outcome when present)
        """
        state = state or self.state
        if not state.trained:
            raise ValueError("Pipeline not prepped; call prep() first")
        self.validate_inference_state(state, new_data)

        X = new_data[state.predictors_in].astype(float)

        for stage in state.stages:
            if stage['name'] == 'correlation':
                X = X.drop(columns=stage['removed'])
            elif stage['name'] in ('centering', 'scaling'):
                scaler = state.transformers[stage['name']]
                X = pd.DataFrame(scaler.transform(X), columns=X.columns, index=X.index)

        return self._assemble(new_data, X, state.outcome)

    def _fit_correlation(self, X: pd.DataFrame) -> pd.DataFrame:
        """
        Drop highly correlated predictors based on the training frame.

        For every pair above the threshold the member with the higher average
        absolute correlation to the rest is removed.
        """
        config = self.config['correlation']

        analyzer = MulticollinearityAnalyzer(
            correlation_threshold=config.get('threshold', 0.9),
            min_features=config.get('min_features', 1),
            method=config.get('method', 'pearson')
        )
        X_filtered, indices, removed = analyzer.analyze_and_select_features(X, verbose=True)

        removed_names = [X.columns[i] for i in removed]
        self.state.dropped_columns.extend(removed_names)
        self.state.stages.append({
            'name': 'correlation',
            'n_features_in': X.shape[1],
            'n_features_out': len(indices),
            'threshold': analyzer.correlation_threshold,
            'method': analyzer.method,
            'removed': removed_names,
        })
        return X_filtered

    def _fit_scaler(self, X: pd.DataFrame, stage_name: str, mode: str) -> pd.DataFrame:
        """Fit a centering or scaling transformer and record its parameters."""
        scaler = FeatureScaler(mode)
        values = scaler.fit_transform(X)

        stage_info = {
            'name': stage_name,
            'n_features_in': X.shape[1],
            'n_features_out': X.shape[1],
            'columns': list(X.columns),
        }
        if scaler.means is not None:
            stage_info['means'] = dict(zip(X.columns, scaler.means.tolist()))
        if scaler.scales is not None:
            stage_info['sds'] = dict(zip(X.columns, scaler.scales.tolist()))

        self.state.transformers[stage_name] = scaler
        self.state.stages.append(stage_info)
        return pd.DataFrame(values, columns=X.columns, index=X.index)

    def _select_predictors(self, df: pd.DataFrame) -> List[str]:
        """All numeric columns except the outcome."""
        if self.outcome is not None and self.outcome not in df.columns:
            raise ValueError(f"Outcome column '{self.outcome}' not found in training data")
        numeric = df.select_dtypes(include=[np.number]).columns
        return [c for c in numeric if c != self.outcome]

    @staticmethod
    def _assemble(source: pd.DataFrame, X: pd.DataFrame, outcome: Optional[str] = None) -> pd.DataFrame:
        """Put processed predictors back together with the untouched outcome."""
        out = X.copy()
        if outcome is not None and outcome in source.columns:
            out[outcome] = source[outcome].to_numpy()
        return out

    def validate_inference_state(self, state: PreprocessingState, data: pd.DataFrame) -> None:
        """
        Validate that saved state is compatible with new data.

        Raises:
            ValueError: If predictor columns are missing or a stage lacks its transformer
        """
        missing = [c for c in state.predictors_in if c not in data.columns]
        if missing:
            raise ValueError(f"Columns missing from new data: {missing}")

        for stage in state.stages:
            if stage['name'] in ('centering', 'scaling') and stage['name'] not in state.transformers:
                raise ValueError(f"Missing transformer for {stage['name']} stage")

    def summary(self) -> pd.DataFrame:
        """Describe the declared and fitted steps, one row per stage."""
        rows = []
        fitted = {s['name']: s for s in self.state.stages}
        for name in STAGE_ORDER:
            if not self.config.get(name, {}).get('enabled', False):
                continue
            stage = fitted.get(name)
            rows.append({
                'step': name,
                'trained': stage is not None,
                'n_features_in': stage['n_features_in'] if stage else None,
                'n_features_out': stage['n_features_out'] if stage else None,
                'removed': ', '.join(stage.get('removed', [])) if stage else '',
            })
        return pd.DataFrame(rows, columns=['step', 'trained', 'n_features_in', 'n_features_out', 'removed'])

    def get_feature_names(self) -> List[str]:
        """Predictor names after all stages."""
        return self.state.predictors_out

    def save_state(self, filepath: Union[str, Path]) -> None:
        """
        Save preprocessing state to disk.

        Args:
            filepath: Path to save the state file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self.state, filepath)
        logger.info(f"Saved preprocessing state to {filepath}")

    @staticmethod
    def load_state(filepath: Union[str, Path]) -> PreprocessingState:
        """
        Load preprocessing state from disk.

        Args:
            filepath: Path to the state file

        Returns:
            Loaded preprocessing state
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"State file not found: {filepath}")
        state = joblib.load(filepath)
        logger.info(f"Loaded preprocessing state from {filepath}")
        return state
