# utils.py
"""
Utility functions for the particle ring.

Logging setup and configuration loading live here: they are used by the
entry point and the tests but do not belong to the simulation itself.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary whose optional "logging" key holds "level",
#       "format" and "log_file".
#   - Side Effects: Configures the root logger with a console handler and a
#     rotating file handler. Creates the log directory if needed. Caps the
#     numba logger at WARNING so JIT compilation does not flood DEBUG runs.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: DEFAULT_CONFIG with the file's sections merged over it.
#   - Raises: FileNotFoundError, json.JSONDecodeError, ValueError when the
#     top level is not an object.

DEFAULT_CONFIG: Dict[str, Any] = {
    "simulation": {},
    "run_control": {
        "max_steps": 0,
        "log_throttle_steps": 600,
        "profile": False,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(levelname)s - %(message)s",
        "log_file": "logs/particula.log",
    },
}


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Routes the root logger to the console and to a size-capped log file.
    """
    log_config = {**DEFAULT_CONFIG['logging'], **config.get('logging', {})}
    level = log_config['level'].upper()
    log_file = log_config['log_file']

    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)

    handlers = [
        logging.StreamHandler(),
        # 1MB per file, five rotated backups.
        logging.handlers.RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=5),
    ]
    formatter = logging.Formatter(log_config['format'])

    root = logging.getLogger()
    root.setLevel(level)
    # Re-running setup must not duplicate output.
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Numba logs every compilation pass at DEBUG.
    logging.getLogger('numba').setLevel(logging.WARNING)

    logging.info(f"Logging initialized at {level}, writing to {log_file}.")


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Returns a copy of `base` with `override` merged in, recursing into dicts."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file over the built-in defaults."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

    if not isinstance(config, dict):
        logging.error(f"Configuration in {path} must be a JSON object.")
        raise ValueError(f"Configuration in {path} must be a JSON object.")
    logging.info("Configuration loaded successfully.")
    return merge_config(DEFAULT_CONFIG, config)
