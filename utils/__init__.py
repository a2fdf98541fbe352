"""Shared utilities for Motor Screen."""

from .config_loader import get_nested_config, load_config
from .result_store import ResultStore

__all__ = [
    'get_nested_config',
    'load_config',
    'ResultStore',
]
