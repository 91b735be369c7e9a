"""
Visualization Utilities
=======================

Core plotting functionality for the workflow: an interactive correlation
heatmap and static ROC, gain and confusion-matrix charts.

"""

import logging
import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from typing import List, Optional, Tuple, Union
from pathlib import Path

logger = logging.getLogger(__name__)


class Plotter:
    """Handles core plotting functionality."""

    def __init__(self, show: bool = False):
        """
        Initialize plotter with default settings.

        Args:
            show: Display each figure on screen after saving it
        """
        self.show = show

        try:
            plt.style.use('seaborn-v0_8-darkgrid')
        except OSError:
            plt.style.use('default')

        # Set default figure parameters
        plt.rcParams['figure.figsize'] = (10, 6)
        plt.rcParams['font.size'] = 10
        plt.rcParams['axes.labelsize'] = 12
        plt.rcParams['axes.titlesize'] = 14
        plt.rcParams['legend.fontsize'] = 10

        # Color palettes
        self.colors = {
            'primary': '#1f77b4',
            'secondary': '#ff7f0e',
            'success': '#2ca02c',
            'danger': '#d62728',
            'dark': '#333333'
        }

    def save_and_close(self, save_path: Optional[Union[str, Path]] = None) -> None:
        """Save figure, show it when requested, and close it."""
        if save_path:
            Path(save_path).parent.mkdir(parents=True, exist_ok=True)
            plt.savefig(save_path, dpi=300, bbox_inches='tight', facecolor='white')
            logger.info(f"Plot saved to {save_path}")
        if self.show:
            plt.show()
        plt.close()

    @staticmethod
    def correlation_matrix(df: pd.DataFrame, method: str = 'pearson') -> pd.DataFrame:
        """Pairwise correlation of the numeric columns."""
        numeric = df.select_dtypes(include=[np.number])
        if numeric.shape[1] < 2:
            raise ValueError("Need at least two numeric columns for a correlation matrix")
        return numeric.corr(method=method)

    def plot_correlation_heatmap(self,
                                 df: pd.DataFrame,
                                 title: str = 'Correlation Matrix',
                                 save_path: Optional[Union[str, Path]] = None) -> Tuple[pd.DataFrame, go.Figure]:
        """
        Interactive heatmap of the Pearson correlation matrix.

        Args:
            df: Table; non-numeric columns are ignored
            title: Figure title
            save_path: HTML file to write the interactive chart to

        Returns:
            (correlation matrix, plotly figure)
        """
        corr = self.correlation_matrix(df)
        labels = list(corr.columns)

        fig = go.Figure(go.Heatmap(
            z=corr.to_numpy(),
            x=labels,
            y=labels,
            zmin=-1,
            zmax=1,
            colorscale='RdBu',
            reversescale=True,
            text=np.round(corr.to_numpy(), 2),
            texttemplate='%{text}',
            hovertemplate='%{x} / %{y}: %{z:.3f}<extra></extra>',
            colorbar={'title': 'r'}
        ))
        fig.update_layout(title=title, yaxis={'autorange': 'reversed'}, width=650, height=600)

        if save_path:
            save_path = Path(save_path)
            save_path.parent.mkdir(parents=True, exist_ok=True)
            fig.write_html(str(save_path))
            logger.info(f"Correlation heatmap saved to {save_path}")
        if self.show:
            fig.show()
        return corr, fig

    def plot_roc_curve(self,
                       curve: pd.DataFrame,
                       title: str = 'ROC Curve',
                       save_path: Optional[Union[str, Path]] = None) -> None:
        """Plot one-vs-all ROC curves, one panel per class."""
        levels = list(dict.fromkeys(curve['level']))
        fig, axes = self._panels(len(levels))

        for ax, level in zip(axes, levels):
            part = curve[curve['level'] == level]
            ax.plot(1 - part['specificity'], part['sensitivity'], color=self.colors['primary'], linewidth=2)
            ax.plot([0, 1], [0, 1], linestyle='--', color=self.colors['dark'], alpha=0.6)
            ax.set_title(level)
            ax.set_xlabel('1 - specificity')
            ax.set_ylabel('sensitivity')
            ax.set_xlim(0, 1)
            ax.set_ylim(0, 1.02)
            ax.set_aspect('equal')

        fig.suptitle(title, fontsize=16, fontweight='bold')
        plt.tight_layout()
        self.save_and_close(save_path)

    def plot_gain_curve(self,
                        curve: pd.DataFrame,
                        title: str = 'Gain Curve',
                        save_path: Optional[Union[str, Path]] = None) -> None:
        """
        Plot cumulative gain curves, one panel per class.

        The shaded region is bounded by the random baseline and the perfect model.
        """
        levels = list(dict.fromkeys(curve['level']))
        fig, axes = self._panels(len(levels))

        for ax, level in zip(axes, levels):
            part = curve[curve['level'] == level]
            event_share = part['n_events'].iloc[-1] / part['n'].iloc[-1] * 100
            perfect_x = [0, event_share, 100]
            perfect_y = [0, 100, 100]

            ax.fill_between(perfect_x, [0, event_share, 100], perfect_y, color='gray', alpha=0.2)
            ax.plot(part['percent_tested'], part['percent_found'], color=self.colors['primary'], linewidth=2)
            ax.set_title(level)
            ax.set_xlabel('% tested')
            ax.set_ylabel('% found')
            ax.set_xlim(0, 100)
            ax.set_ylim(0, 102)

        fig.suptitle(title, fontsize=16, fontweight='bold')
        plt.tight_layout()
        self.save_and_close(save_path)

    def plot_confusion_matrix(self,
                              cm: np.ndarray,
                              labels: Optional[List[str]] = None,
                              title: str = 'Confusion Matrix',
                              save_path: Optional[Union[str, Path]] = None) -> None:
        """Plot confusion matrix heatmap."""
        if labels is None:
            labels = [f'Class {i}' for i in range(cm.shape[0])]

        plt.figure(figsize=(8, 6))

        # Calculate percentages, guarding rows without samples
        row_sums = cm.sum(axis=1)[:, np.newaxis]
        cm_normalized = np.divide(cm.astype('float'), row_sums, out=np.zeros(cm.shape), where=row_sums > 0)

        annotations = np.empty_like(cm).astype(str)
        for i in range(cm.shape[0]):
            for j in range(cm.shape[1]):
                annotations[i, j] = f'{cm[i, j]}\n({cm_normalized[i, j]:.1%})'

        sns.heatmap(cm, annot=annotations, fmt='', cmap='Blues',
                    xticklabels=labels, yticklabels=labels,
                    cbar_kws={'label': 'Count'}, square=True)

        plt.title(title, fontsize=16, fontweight='bold', pad=20)
        plt.ylabel('True Label', fontsize=12)
        plt.xlabel('Predicted Label', fontsize=12)
        plt.tight_layout()

        self.save_and_close(save_path)

    @staticmethod
    def _panels(n: int):
        fig, axes = plt.subplots(1, n, figsize=(4.5 * n, 4.8), squeeze=False)
        return fig, axes[0]
