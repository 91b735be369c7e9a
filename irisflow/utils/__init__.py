"""Utility modules for ML framework."""

from .config import Config, DEFAULTS, deep_merge
from .glimpse import glimpse

__all__ = ['Config', 'DEFAULTS', 'deep_merge', 'glimpse']
