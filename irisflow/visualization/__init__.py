"""Visualization modules for ML framework."""

from .plotter import Plotter

__all__ = ['Plotter']
