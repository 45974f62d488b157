"""
Configuration loader for Freight Planner.

Loads settings from freight_planner.yaml and provides typed access
to all configuration sections.
"""
import os
from pathlib import Path
from typing import Any, Optional
from functools import lru_cache

import yaml


# Default config path relative to project root
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "freight_planner.yaml"
CONFIG_ENV_VAR = "FREIGHT_PLANNER_CONFIG"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


class PlannerConfig:
    """
    Configuration manager for Freight Planner.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the singleton instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path or _default_path()
        self._config: dict = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise ConfigurationError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Config file must contain a YAML mapping")

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load()
        get_config.cache_clear()

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    # =========================================================================
    # Database
    # =========================================================================

    @property
    def database(self) -> dict:
        """Database configuration."""
        return self._config.get("database", {})

    @property
    def database_url(self) -> str:
        """SQLAlchemy database URL."""
        return self.database.get("url", "sqlite:///./freight_planner.db")

    @property
    def database_echo(self) -> bool:
        """Whether SQLAlchemy should echo SQL statements."""
        return bool(self.database.get("echo", False))

    # =========================================================================
    # Planning
    # =========================================================================

    @property
    def planning(self) -> dict:
        """Planning cycle defaults."""
        return self._config.get("planning", {})

    @property
    def default_cycle(self) -> str:
        """Cycle kind used for organizations without settings."""
        return str(self.planning.get("default_cycle", "WEEKLY")).upper()

    @property
    def default_week_start_day(self) -> str:
        """Week start day used for organizations without settings."""
        return str(self.planning.get("default_week_start_day", "SUNDAY")).upper()

    @property
    def upcoming_count(self) -> int:
        """Number of upcoming periods listed by default."""
        return int(self.planning.get("upcoming_count", 8))

    @property
    def max_upcoming_count(self) -> int:
        """Upper bound on the number of upcoming periods a caller may request."""
        return int(self.planning.get("max_upcoming_count", 52))

    # =========================================================================
    # Reporting
    # =========================================================================

    @property
    def reporting(self) -> dict:
        """Reporting and export configuration."""
        return self._config.get("reporting", {})

    @property
    def rotate_day_labels(self) -> bool:
        """Whether day column labels follow the organization's week start day."""
        return bool(self.reporting.get("rotate_day_labels", False))

    @property
    def csv_filename_prefix(self) -> str:
        """Prefix for exported CSV file names."""
        return self.reporting.get("csv_filename_prefix", "freight")

    # =========================================================================
    # Logging
    # =========================================================================

    @property
    def logging(self) -> dict:
        """Logging configuration."""
        return self._config.get("logging", {})

    @property
    def log_level(self) -> str:
        """Root log level name."""
        return str(self.logging.get("level", "INFO")).upper()

    @property
    def log_format(self) -> str:
        """Log record format string."""
        return self.logging.get(
            "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value by key."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return key in self._config


def _default_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else DEFAULT_CONFIG_PATH


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> PlannerConfig:
    """
    Get the singleton configuration instance.

    Args:
        config_path: Optional path to config file. Only used on first call.

    Returns:
        PlannerConfig singleton instance
    """
    path = Path(config_path) if config_path else None
    return PlannerConfig(path)


def reload_config() -> PlannerConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()
