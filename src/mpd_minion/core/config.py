"""
Configuration management for mpd-minion
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

ALBUM_SORT_MODES = ("chronological", "title")


@dataclass
class ServerConfig:
    """Configuration for the server connection."""

    host: str = "localhost"
    port: int = 6600
    password: Optional[str] = None
    connect_timeout: float = 5.0  # Abandon a pending connect after this many seconds
    network_timeout: Optional[float] = None  # Socket read/write timeout, None blocks
    reconnect_interval: float = 5.0  # Wait between reconnect attempts


@dataclass
class LibraryConfig:
    """Configuration for the collection index."""

    album_sort_mode: str = "chronological"  # chronological | title
    date_formats: List[str] = field(
        default_factory=lambda: ["YYYY-MM-DD", "YYYY-MM", "YYYY"]
    )
    strict_dump: bool = False  # Reject listings with fields before the first file

    def validate(self) -> None:
        """Validate library configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.album_sort_mode not in ALBUM_SORT_MODES:
            raise ValueError(
                f"Invalid album_sort_mode: {self.album_sort_mode!r}. "
                f"Valid modes are: {ALBUM_SORT_MODES}"
            )
        if not self.date_formats:
            raise ValueError("date_formats must contain at least one format")


@dataclass
class SearchConfig:
    """Configuration for quick search."""

    batch_interval_ms: int = 250
    min_fragment_length: int = 1


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/mpd-minion/mpd-minion.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output to console (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    server: ServerConfig = field(default_factory=ServerConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "mpd-minion"
    return Path.home() / ".config" / "mpd-minion"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/mpd-minion (or ~/.config/mpd-minion)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "mpd-minion"
    return Path.home() / ".local" / "share" / "mpd-minion"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# mpd-minion Configuration

[server]
host = "localhost"
port = 6600
# password = "secret"

# Seconds before a pending connect is abandoned
connect_timeout = 5.0

# Seconds between reconnect attempts after a disconnect
reconnect_interval = 5.0

[library]
# Album ordering within an artist: "chronological" or "title"
album_sort_mode = "chronological"

# Date tag layouts, tried in order. YYYY, MM and DD are placeholders.
date_formats = ["YYYY-MM-DD", "YYYY-MM", "YYYY"]

# Fail the refresh when the listing has fields before its first file entry
strict_dump = false

[search]
# Milliseconds between partial result batches
batch_interval_ms = 250
min_fragment_length = 1

[logging]
# Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
level = "INFO"

# Custom log file path (default: ~/.local/share/mpd-minion/mpd-minion.log)
# log_file = "/path/to/custom.log"

max_file_size_mb = 10
backup_count = 5

# Also log to the terminal
console_output = false
"""


def _parse_config(toml_data: dict) -> Config:
    config = Config()

    if "server" in toml_data:
        server_data = toml_data["server"]
        config.server = ServerConfig(
            host=server_data.get("host", config.server.host),
            port=int(server_data.get("port", config.server.port)),
            password=server_data.get("password"),
            connect_timeout=float(
                server_data.get("connect_timeout", config.server.connect_timeout)
            ),
            network_timeout=server_data.get("network_timeout"),
            reconnect_interval=float(
                server_data.get("reconnect_interval", config.server.reconnect_interval)
            ),
        )

    if "library" in toml_data:
        library_data = toml_data["library"]
        library = LibraryConfig(
            album_sort_mode=library_data.get(
                "album_sort_mode", config.library.album_sort_mode
            ),
            date_formats=library_data.get("date_formats", config.library.date_formats),
            strict_dump=library_data.get("strict_dump", config.library.strict_dump),
        )
        try:
            library.validate()
            config.library = library
        except ValueError as e:
            print(f"Warning: {e}. Using default library settings.")

    if "search" in toml_data:
        search_data = toml_data["search"]
        config.search = SearchConfig(
            batch_interval_ms=search_data.get(
                "batch_interval_ms", config.search.batch_interval_ms
            ),
            min_fragment_length=search_data.get(
                "min_fragment_length", config.search.min_fragment_length
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level),
            log_file=logging_data.get("log_file"),
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def _apply_env_overrides(config: Config) -> None:
    host = os.environ.get("MPD_HOST")
    port = os.environ.get("MPD_PORT")
    password = os.environ.get("MPD_PASSWORD")

    if host:
        config.server.host = host
    if port:
        try:
            config.server.port = int(port)
        except ValueError:
            print(f"Warning: ignoring invalid MPD_PORT={port!r}")
    if password:
        config.server.password = password


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - MPD_HOST
    - MPD_PORT
    - MPD_PASSWORD
    """
    # Load .env file from config directory if it exists
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        config = Config()
        _apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        config = _parse_config(toml_data)
    except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        config = Config()

    _apply_env_overrides(config)
    return config

