"""Configuration management with lazy validation."""

import hashlib
from functools import cached_property
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from logseq_graph.errors import ConfigError
from logseq_graph.models.config import GraphSettings, IndexSettings, Settings, WatchSettings
from logseq_graph.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "logseq-graph" / "config.yaml"


def default_index_path(graph_path: Path) -> Path:
    """Index database of a graph in the cache directory, one file per graph."""
    resolved = graph_path.expanduser().resolve()
    digest = hashlib.sha1(str(resolved).encode("utf-8")).hexdigest()[:12]
    return Path.home() / ".cache" / "logseq-graph" / "index" / f"{resolved.name}-{digest}.sqlite"


class ConfigManager:
    """
    Configuration manager with lazy validation.

    Loads the settings file and validates sections only when first accessed,
    so a command that does not touch the index never fails on a broken
    ``index`` section.

    Example:
        >>> config_mgr = ConfigManager.load_default()
        >>> graph = config_mgr.graph  # Validates graph settings on first access
        >>> index = config_mgr.index  # Validates index settings on first access
    """

    def __init__(self, data: dict[str, Any]):
        """
        Initialize config manager with raw settings.

        Args:
            data: Mapping read from the settings file
        """
        self._data = data

    @classmethod
    def load_default(cls) -> "ConfigManager":
        """
        Load configuration from default path (~/.config/logseq-graph/config.yaml).

        Raises:
            ConfigError: If config file doesn't exist or is not YAML
        """
        return cls.load_from_path(DEFAULT_CONFIG_PATH)

    @classmethod
    def load_from_path(cls, path: Path) -> "ConfigManager":
        """
        Load configuration from specific path.

        Args:
            path: Path to config.yaml file

        Returns:
            ConfigManager instance with loaded config

        Raises:
            ConfigError: If config file doesn't exist or is not YAML
        """
        logger.info("config_loading", path=str(path))

        if not path.exists():
            logger.error("config_not_found", path=str(path))
            raise ConfigError(f"Configuration file not found at {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("config_yaml_error", path=str(path), error=str(e))
            raise ConfigError(f"Configuration file is not valid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {path}")

        logger.info("config_loaded", path=str(path))
        return cls(data)

    def _section(self, name: str, model: type, required: bool = False) -> Any:
        raw = self._data.get(name)
        if raw is None:
            if required:
                raise ConfigError(f"Configuration section '{name}' is missing")
            raw = {}

        try:
            return model(**raw)
        except (ValidationError, TypeError) as e:
            logger.error(f"{name}_config_invalid", error=str(e))
            raise ConfigError(f"{name.capitalize()} configuration invalid: {e}") from e

    @cached_property
    def graph(self) -> GraphSettings:
        """
        Get graph settings (lazy validation).

        Raises:
            ConfigError: If the section is missing or invalid
        """
        return self._section("graph", GraphSettings, required=True)

    @cached_property
    def index(self) -> IndexSettings:
        """Get index settings (lazy validation, uses defaults if not specified)."""
        return self._section("index", IndexSettings)

    @cached_property
    def watch(self) -> WatchSettings:
        """Get watcher settings (lazy validation, uses defaults if not specified)."""
        return self._section("watch", WatchSettings)

    def settings(self) -> Settings:
        """Validate every section and return them together."""
        return Settings(graph=self.graph, index=self.index, watch=self.watch)
