"""Configuration management utilities."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "configs" / "thresholds.yaml"

# Built-in defaults. A YAML file only needs to list the keys it overrides.
DEFAULT_CONFIG: Dict[str, Any] = {
    'capture': {
        'min_dwell_ms': 200,
    },
    'metrics': {
        'reversal_threshold_deg': 90,
        'min_direction_samples': 3,
        'speed_variance_scale': 2.0,
        'idle_gap_ms': 2000,
        'idle_min_movements': 5,
    },
    'scoring': {
        'default_age_group': '9-11',
        'friction_thresholds': {'low': 0.3, 'medium': 0.7},
        'explanation_threshold': 0.5,
        'local_assessment_threshold': 0.3,
        'deviation_floors': {
            'jitter': 0.1,
            'corrections': 1.0,
            'speed_variance': 0.1,
            'idle_motion': 1.0,
        },
    },
    'session': {
        'live_interval_ms': 500,
    },
    'storage': {
        'db_path': 'data/results/friction_scope.db',
    },
    'api': {
        'host': '127.0.0.1',
        'port': 8000,
        'cors_origins': ['http://localhost:3000', 'http://localhost:5173'],
    },
}


def load_config(config_path=None) -> Dict[str, Any]:
    """
    Load configuration from YAML file, merged over the built-in defaults.

    Args:
        config_path: Path to YAML configuration file (str or Path).
                     None loads configs/thresholds.yaml if present.

    Returns:
        Dictionary containing configuration

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        ValueError: If the file does not contain a mapping
        yaml.YAMLError: If config file is malformed
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.info("No configuration file found, using built-in defaults")
            return copy.deepcopy(DEFAULT_CONFIG)
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    logger.debug(f"Loaded config keys: {list(loaded.keys())}")

    return merge_config(DEFAULT_CONFIG, loaded)


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``overrides`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_nested_config(config: Optional[Dict[str, Any]], key_path: str, default: Any = None) -> Any:
    """
    Get nested configuration value using dot notation.

    Example:
        get_nested_config(config, 'metrics.idle_gap_ms', default=2000)

    Args:
        config: Configuration dictionary (None is treated as empty)
        key_path: Dot-separated path to value
        default: Default value if path not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config or {}

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value
