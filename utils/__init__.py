"""Shared utilities for the interaction friction analysis system."""

from .config_loader import load_config, get_nested_config, merge_config, DEFAULT_CONFIG

__all__ = [
    'load_config',
    'get_nested_config',
    'merge_config',
    'DEFAULT_CONFIG',
]
