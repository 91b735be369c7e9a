"""Data loading utilities for multi-class classification."""

import pandas as pd
from pathlib import Path
from typing import Dict, Any
from sklearn.datasets import load_iris
from loguru import logger


IRIS_COLUMNS = ['sepal_length', 'sepal_width', 'petal_length', 'petal_width']


class DataLoader:
    """Handles loading the built-in iris table and labelled CSV files."""

    BUILTIN = ('iris',)

    def load_from_config(self, config: Dict[str, Any], project_root: Path = Path('.')) -> pd.DataFrame:
        """
        Load data from configuration.

        Config formats:

        1. Built-in dataset:
           {source: 'iris'}

        2. Single CSV file with label column:
           {source: 'csv', file: 'data.csv', label_column: 'class', skip_rows: 0}

        Args:
            config: 'data' section of the workflow configuration
            project_root: Root directory for relative paths

        Returns:
            DataFrame with predictor columns followed by the label column
        """
        source = config.get('source', 'iris')

        if source in self.BUILTIN:
            return self.load_iris()

        if source == 'csv':
            file_path = config.get('file')
            if not file_path:
                raise ValueError("CSV source requires a 'file' key")
            label_column = config.get('label_column')
            if label_column is None:
                raise ValueError("CSV source requires a 'label_column' key")
            return self.load_csv(Path(project_root) / file_path, label_column,
                                 skip_rows=config.get('skip_rows', 0))

        raise ValueError(f"Unknown data source: {source}. Use one of {list(self.BUILTIN) + ['csv']}")

    def load_iris(self) -> pd.DataFrame:
        """
        Load Fisher's iris measurements.

        Returns:
            150 rows: four float measurements (cm) and a 'species' string column
        """
        bunch = load_iris(as_frame=True)
        df = bunch.data.copy()
        df.columns = IRIS_COLUMNS
        df['species'] = pd.Categorical.from_codes(bunch.target, bunch.target_names).astype(str)

        logger.info(f"Loaded iris: {df.shape[0]} samples, {len(IRIS_COLUMNS)} features, "
                    f"{df['species'].nunique()} classes")
        return df

    def load_csv(self, file_path: Path, label_column: str, skip_rows: int = 0) -> pd.DataFrame:
        """Read a CSV file and move the label column to the end."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        df = pd.read_csv(file_path, skiprows=skip_rows)
        if label_column not in df.columns:
            raise ValueError(f"Label column '{label_column}' not in {list(df.columns)}")

        df = df[[c for c in df.columns if c != label_column] + [label_column]]
        logger.info(f"Loaded: {df.shape[0]} samples, {df.shape[1] - 1} features from {file_path}")
        return df
