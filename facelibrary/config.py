"""
Configuration loading.
"""

import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join('config', 'config.yaml')

DEFAULT_CONFIG: Dict[str, Any] = {
    'face_detection': {
        'method': 'haar',
        'min_face_size': 30,
        'scale_factor': 1.1,
        'min_neighbors': 5,
        'padding': 0.0,
        'timeout': None
    },
    'vectorizer': {
        'face_size': [100, 100]
    },
    'storage': {
        'data_dir': 'Data',
        'snapshot_file': 'data_library.json',
        'scratch_dir': 'tmp'
    },
    'logging': {
        'level': 'INFO',
        'file': 'face_library.log'
    }
}


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load configuration from a YAML file on top of the defaults.

    A missing or unreadable file yields the default configuration.
    """
    if not config_path or not os.path.exists(config_path):
        logger.info(f"No configuration at {config_path}, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Expected a mapping in {config_path}")
    except (OSError, yaml.YAMLError, ConfigurationError) as e:
        logger.error(f"Failed to load config: {e}")
        return copy.deepcopy(DEFAULT_CONFIG)

    logger.info(f"Configuration loaded from {config_path}")
    return _merge(DEFAULT_CONFIG, loaded)
