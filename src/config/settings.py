"""
Service configuration loaded from config/report.yaml.

Usage:
    from src.config.settings import load_config

    config = load_config()
    timeout = config["fetch"]["read_timeout_seconds"]
"""

import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "fetch": {
        "connect_timeout_seconds": 10,
        "read_timeout_seconds": 30,
        "user_agent": "Mozilla/5.0 (ReportGenerator/1.0)",
    },
    "analysis": {
        "provider": "heuristic",
        "model": "gpt-4o-mini",
        "max_input_chars": 3000,
    },
    "charts": {
        "enabled": True,
        "dpi": 100,
    },
    "rendering": {
        "pdf_engine": "reportlab",
    },
    "storage": {
        "base_url": "http://localhost:8080",
        "output_dir": "outputs/reports",
    },
    "notifications": {
        "log_path": "",
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration, layering config/report.yaml over the defaults.

    Args:
        path: Explicit config file; when omitted, config/report.yaml is looked
              up in the working directory and then at the repo root.

    Returns:
        Config dict (defaults only if no file is found)
    """
    if path is not None:
        config_paths = [path]
    else:
        config_paths = [
            "config/report.yaml",
            os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "config/report.yaml"),
        ]

    for candidate in config_paths:
        if os.path.exists(candidate):
            try:
                with open(candidate, 'r') as f:
                    loaded = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {candidate}: {e}")
                continue
            if not isinstance(loaded, dict):
                logger.warning(f"Ignoring {candidate}: top level must be a mapping, got {type(loaded).__name__}")
                continue
            return _merge(DEFAULT_CONFIG, loaded)

    return copy.deepcopy(DEFAULT_CONFIG)
