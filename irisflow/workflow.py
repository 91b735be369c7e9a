#!/usr/bin/env python3
"""
Classification Workflow
=======================

End-to-end walkthrough: load, explore correlations, split, preprocess,
fit one model family on several engines, predict and evaluate.
All settings come from YAML, with defaults that reproduce the iris tutorial.

"""
import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from irisflow.data import DataLoader, DataSplit, PreprocessingPipeline, initial_split
from irisflow.evaluation import augment, check_probabilities
from irisflow.metrics import MetricsWrapper, gain_curve, probability_columns, roc_curve
from irisflow.models import BaseModel, ModelFactory
from irisflow.utils import Config, glimpse
from irisflow.visualization import Plotter

logger = logging.getLogger(__name__)

CURVES = {'gain': gain_curve, 'roc': roc_curve}


class WorkflowRunner:
    """Runs every stage of the workflow in order, once."""

    def __init__(self, config_path: Optional[str] = None,
                 overrides: Optional[Dict[str, Any]] = None,
                 show: Optional[bool] = None):
        """Initialize runner with an optional configuration file."""
        self.config = Config(config_path, overrides)
        self.experiment_name = f"{self.config.name}_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}"

        data_config = self.config.get_data_config()
        self.outcome = self.config.get_preprocessing_config().get('outcome') or data_config.get('label_column')
        self.random_seed = data_config.get('random_state')

        viz_config = self.config.get_visualization_config()
        self.create_plots = viz_config.get('create_plots', True)
        self.plotter = Plotter(show=viz_config.get('show', False) if show is None else show)

        output_dir = self.config.get_output_config().get('output_dir')
        self.output_dir = Path(output_dir) / self.experiment_name if output_dir else None

        # Filled in by run()
        self.data: Optional[pd.DataFrame] = None
        self.split: Optional[DataSplit] = None
        self.pipeline: Optional[PreprocessingPipeline] = None
        self.processed: Dict[str, pd.DataFrame] = {}
        self.trained_models: Dict[str, BaseModel] = {}
        self.results: Dict[str, Dict[str, Any]] = {}

        logger.info(f"Initialized workflow - Experiment: {self.experiment_name}")

    def run(self) -> Dict[str, Dict[str, Any]]:
        """Execute the complete workflow."""
        logger.info("=" * 80)
        logger.info("CLASSIFICATION WORKFLOW")
        logger.info("=" * 80)
        logger.info(f"Configuration: {self.config.name}")
        logger.info(f"Random seed: {self.random_seed}")

        try:
            self._load_data()
            self._explore_correlations()
            self._split_data()
            self._preprocess()
            self._train_models()
            self._evaluate_models()
            self._save_results()
            self._print_summary()
        except Exception as e:
            logger.error(f"Workflow failed: {str(e)}", exc_info=True)
            raise

        return self.results

    def _section(self, title: str) -> None:
        logger.info("\n" + "=" * 60)
        logger.info(title)
        logger.info("=" * 60)

    def _plot_path(self, filename: str) -> Optional[Path]:
        return self.output_dir / 'plots' / filename if self.output_dir else None

    def _load_data(self) -> None:
        self._section("DATA LOADING")
        self.data = DataLoader().load_from_config(self.config.get_data_config())
        if self.outcome not in self.data.columns:
            raise ValueError(f"Outcome column '{self.outcome}' not found in data")
        logger.info("\n" + glimpse(self.data))

    def _explore_correlations(self) -> None:
        self._section("CORRELATIONS")
        if self.create_plots:
            corr, _ = self.plotter.plot_correlation_heatmap(
                self.data, title='Correlation of numeric columns',
                save_path=self._plot_path('correlation_heatmap.html'))
        else:
            corr = Plotter.correlation_matrix(self.data)
        logger.info("\n" + corr.round(3).to_string())

    def _split_data(self) -> None:
        self._section("TRAIN/TEST SPLIT")
        data_config = self.config.get_data_config()
        self.split = initial_split(
            self.data,
            prop=data_config.get('prop', 0.6),
            strata=data_config.get('strata'),
            random_state=self.random_seed
        )
        logger.info(repr(self.split))
        logger.info("\n" + glimpse(self.split.training()))

    def _preprocess(self) -> None:
        """Fit the recipe on training rows only, then bake both subsets."""
        self._section("PREPROCESSING")
        self.pipeline = PreprocessingPipeline(self.config.get_preprocessing_config())
        self.processed, state = self.pipeline.execute_pipeline(
            train=self.split.training(),
            test=self.split.testing(),
            mode='train'
        )

        logger.info("\n" + self.pipeline.summary().to_string(index=False))
        for stage in state.stages:
            logger.info(f"  {stage['name']}: {stage['n_features_in']} → {stage['n_features_out']}")
        logger.info("Processed training data:\n" + glimpse(self.processed['train']))
        logger.info("Processed testing data:\n" + glimpse(self.processed['test']))

    def _train_models(self) -> None:
        """Train every enabled model on the processed training data."""
        self._section("MODEL TRAINING")
        enabled = self.config.get_model_configs()
        if not enabled:
            raise ValueError("No enabled models in configuration")

        for idx, (model_name, model_config) in enumerate(enabled.items(), 1):
            logger.info(f"[{idx}/{len(enabled)}] Training {model_name}...")
            family = model_config.pop('family', 'rand_forest')
            engine = model_config.pop('engine', None)
            model_config.pop('enabled', None)
            if 'random_state' not in model_config and self.random_seed is not None:
                model_config['random_state'] = self.random_seed

            start_time = time.time()
            model = ModelFactory.create_model(family, config=model_config, engine=engine)
            model.fit_xy(self.processed['train'], self.outcome)

            self.trained_models[model_name] = model
            self.results[model_name] = {'engine': model.engine, 'training_time': time.time() - start_time}
            logger.info(f"  {model!r}")

    def _evaluate_models(self) -> None:
        """Predict on processed test rows and compute metrics and curves."""
        self._section("EVALUATION")
        eval_config = self.config.get_evaluation_config()
        metric_names = eval_config.get('metrics')
        curves = eval_config.get('curves', [])
        test = self.processed['test']

        for model_name, model in self.trained_models.items():
            predictions = augment(model, test, type='both', outcome=self.outcome)
            probs = probability_columns(predictions)
            if not check_probabilities(predictions[probs]):
                raise ValueError(f"{model_name}: class probabilities do not sum to one")

            table = MetricsWrapper.metrics(predictions, truth=self.outcome, estimate='pred_class',
                                           probs=probs, metric_names=metric_names)
            labels = list(model.classes_)
            cm = confusion_matrix(predictions[self.outcome], predictions['pred_class'], labels=labels)

            result = self.results[model_name]
            result.update({
                'predictions': predictions,
                'metrics': table,
                'confusion_matrix': cm,
            })
            for metric, value in zip(table['metric'], table['estimate']):
                result[f'test_{metric}'] = value

            logger.info(f"{model_name} ({model.engine}):\n" + table.to_string(index=False))

            for curve_name in curves:
                if curve_name not in CURVES:
                    raise ValueError(f"Unknown curve '{curve_name}'. Available: {list(CURVES)}")
                curve = CURVES[curve_name](predictions, self.outcome, probs)
                result[f'{curve_name}_curve'] = curve
                if self.create_plots:
                    plot = self.plotter.plot_gain_curve if curve_name == 'gain' else self.plotter.plot_roc_curve
                    plot(curve, title=f'{curve_name.upper()} curve - {model_name}',
                         save_path=self._plot_path(f'{curve_name}_curve_{model_name}.png'))

            if self.create_plots:
                self.plotter.plot_confusion_matrix(cm, labels=labels, title=f'Confusion Matrix - {model_name}',
                                                   save_path=self._plot_path(f'confusion_matrix_{model_name}.png'))

    def _save_results(self) -> None:
        """Write fitted artifacts and metrics when configured."""
        if self.output_dir is None or not self.config.get_output_config().get('save_artifacts', False):
            return

        self._section("SAVING ARTIFACTS")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pipeline.save_state(self.output_dir / 'preprocessing_state.joblib')
        for model_name, model in self.trained_models.items():
            model.save(self.output_dir / 'models' / model_name)

        tables = [r['metrics'].assign(model=name) for name, r in self.results.items() if 'metrics' in r]
        if tables:
            pd.concat(tables, ignore_index=True).to_csv(self.output_dir / 'metrics.csv', index=False)
        logger.info(f"Artifacts saved to {self.output_dir}")

    def _print_summary(self) -> None:
        """Log one line per model with its headline scores."""
        self._section("SUMMARY")
        for model_name, result in self.results.items():
            accuracy = result.get('test_accuracy', np.nan)
            kap = result.get('test_kap', np.nan)
            logger.info(f"  {model_name:<20} engine={result['engine']:<8} "
                        f"accuracy={accuracy:.4f} kap={kap:.4f} "
                        f"time={result['training_time']:.2f}s")


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Tabular classification workflow")
    parser.add_argument('config', nargs='?', default=None,
                        help='Path to configuration file (YAML); built-in defaults when omitted')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--show', action='store_true', help='Display charts interactively')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True
    )
    # Suppress matplotlib font manager debug messages
    logging.getLogger('matplotlib').setLevel(logging.WARNING)

    if args.config and not Path(args.config).exists():
        logger.error(f"Configuration file not found: {args.config}")
        return 1

    try:
        WorkflowRunner(args.config, show=args.show or None).run()
        return 0
    except Exception as e:
        logger.error(f"Workflow failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
