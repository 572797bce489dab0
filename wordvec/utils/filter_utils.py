"""
Configuration, filesystem and logging helpers.

This module centralizes common functionality used across the project:

- loading YAML configuration files (config/filter.yaml)
- ensuring directories exist before writing files
- constructing loggers that respect the logging section of the config

The filters, the scikit-learn transformer and the command-line script all
rely on these utilities.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml


DEFAULT_FILTER_CONFIG_PATH = "config/filter.yaml"

REQUIRED_CONFIG_SECTIONS = ("dataset", "filter")


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_yaml(path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file and return it as a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or does not hold a mapping.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None or not isinstance(cfg, dict):
        raise ValueError(f"Config file is empty or invalid: {path}")

    return cfg


def load_filter_config(
    config_path: str = DEFAULT_FILTER_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Load and return the full filter configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the filter YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Configuration with the "dataset" and "filter" sections, and
        optionally "paths" and "logging".

    Raises
    ------
    KeyError
        If a required section is missing.
    """
    cfg = load_yaml(config_path)

    for section in REQUIRED_CONFIG_SECTIONS:
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in filter config: {config_path}')

    return cfg


def get_words_to_keep(cfg: Dict[str, Any], default: int = 1000) -> Any:
    """
    Return ``filter.words_to_keep`` as written in the config; it is
    validated by the filter that uses it.
    """
    filter_cfg = cfg.get("filter", {}) or {}
    return filter_cfg.get("words_to_keep", default)


# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------


def ensure_dir_exists(path: str) -> None:
    """
    Ensure that a directory exists (create it if necessary).

    Parameters
    ----------
    path : str
        Directory path.
    """
    if path and not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------


def _parse_log_level(level_str: str) -> int:
    """
    Convert a string log level into a logging module constant.

    Parameters
    ----------
    level_str : str
        One of: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL" (case-insensitive).

    Returns
    -------
    int
        Corresponding logging level.
    """
    level_str = (level_str or "INFO").upper()
    return {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }.get(level_str, logging.INFO)


def get_logger(
    name: str,
    config: Optional[Dict[str, Any]] = None,
    log_file_suffix: Optional[str] = None,
) -> logging.Logger:
    """
    Construct and return a logger that respects the logging section of
    the filter config.

    Library modules log through ``logging.getLogger(__name__)``; this
    helper is meant for entry points, which attach the handlers.

    Parameters
    ----------
    name : str
        Logger name.
    config : Optional[Dict[str, Any]]
        Filter configuration. If None, logs go to the console at INFO.
    log_file_suffix : Optional[str]
        Optional suffix appended to the log file name (e.g., "train").

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    # If the logger already has handlers, assume it's already configured.
    if logger.handlers:
        return logger

    config = config or {}
    logging_cfg = config.get("logging", {}) or {}
    paths_cfg = config.get("paths", {}) or {}

    level = _parse_log_level(logging_cfg.get("level", "INFO"))
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Optional file handler
    if bool(logging_cfg.get("to_file", False)):
        logs_dir = paths_cfg.get("logs_dir", "outputs/logs")
        ensure_dir_exists(logs_dir)

        file_prefix = logging_cfg.get("file_prefix", "word_vector")
        if log_file_suffix:
            filename = f"{file_prefix}_{log_file_suffix}.log"
        else:
            filename = f"{file_prefix}.log"

        file_handler = logging.FileHandler(os.path.join(logs_dir, filename), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
