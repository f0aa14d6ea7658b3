"""Core infrastructure layer - no domain dependencies.

This module provides foundation-level services:
- Configuration management (TOML + .env)
- Logging and user output (Loguru)
- Console management (Rich)
"""

# Configuration
from .config import (
    Config,
    LibraryConfig,
    LoggingConfig,
    SearchConfig,
    ServerConfig,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
)

# Output
from .output import get_log_file, log, setup_from_config, setup_loguru

# Console
from .console import create_console, safe_print

__all__ = [
    "Config",
    "LibraryConfig",
    "LoggingConfig",
    "SearchConfig",
    "ServerConfig",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "get_log_file",
    "log",
    "setup_from_config",
    "setup_loguru",
    "create_console",
    "safe_print",
]
