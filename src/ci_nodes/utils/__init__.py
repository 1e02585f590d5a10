"""Utility functions and helpers."""

from ci_nodes.utils.config_loader import load_chain_config, load_yaml_config
from ci_nodes.utils.logging import get_logger, setup_logging
from ci_nodes.utils.template import build_environment, has_variable, render

__all__ = [
    "setup_logging",
    "get_logger",
    "load_yaml_config",
    "load_chain_config",
    "has_variable",
    "render",
    "build_environment",
]
