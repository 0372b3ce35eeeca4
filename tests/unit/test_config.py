"""Unit tests for configuration models and the settings file."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from logseq_graph.config import ConfigManager, default_index_path
from logseq_graph.errors import ConfigError
from logseq_graph.models.config import (
    GraphConfig,
    GraphSettings,
    IndexSettings,
    Settings,
    WatchSettings,
)


class TestGraphConfig:
    """Test reading logseq/config.edn."""

    def test_defaults(self):
        """Test the defaults of an empty config.edn."""
        config = GraphConfig.from_edn("{}")

        assert config.journals_directory == "journals"
        assert config.pages_directory == "pages"
        assert config.journal_file_name_format == "yyyy_MM_dd"
        assert config.journal_page_title_format == "MMM do, yyyy"
        assert config.file_name_format == "triple-lowbar"
        assert config.default_journal_template is None

    def test_custom_values(self):
        """Test the keys that are understood."""
        config = GraphConfig.from_edn(
            """{:journals-directory "daily"
                :pages-directory "notes"
                :journal/page-title-format "yyyy-MM-dd"
                :journal/file-name-format "yyyy-MM-dd"
                :file/name-format :triple-lowbar
                :default-templates {:journals "Daily"}
                :ui/show-brackets? true}"""
        )

        assert config.journals_directory == "daily"
        assert config.pages_directory == "notes"
        assert config.journal_page_title_format == "yyyy-MM-dd"
        assert config.journal_file_name_format == "yyyy-MM-dd"
        assert config.file_name_format == "triple-lowbar"
        assert config.default_journal_template == "Daily"

    def test_nested_namespace_form(self):
        """Test that {:journal {:page-title-format ...}} is understood too."""
        config = GraphConfig.from_edn('{:journal {:page-title-format "EEE, dd.MM.yyyy"}}')

        assert config.journal_page_title_format == "EEE, dd.MM.yyyy"

    def test_empty_template_is_ignored(self):
        """Test that an empty journal template means no template."""
        config = GraphConfig.from_edn('{:default-templates {:journals ""}}')

        assert config.default_journal_template is None

    def test_date_formats(self):
        """Test the compiled date formats."""
        config = GraphConfig.from_edn("{}")

        assert config.journal_file_format.pattern == "yyyy_MM_dd"
        assert config.journal_title_format.pattern == "MMM do, yyyy"

    def test_not_a_map(self):
        """Test that config.edn must hold a map."""
        with pytest.raises(ValueError, match="must contain a map"):
            GraphConfig.from_edn("[1 2]")

    def test_empty_date_format(self):
        """Test that empty date patterns are rejected."""
        with pytest.raises(ValidationError):
            GraphConfig.from_edn('{:journal/page-title-format " "}')

    def test_load(self, tmp_path):
        """Test loading the config of a graph directory."""
        (tmp_path / "logseq").mkdir()
        (tmp_path / "logseq" / "config.edn").write_text('{:pages-directory "p"}')

        assert GraphConfig.load(tmp_path).pages_directory == "p"

    def test_load_missing(self, tmp_path):
        """Test that a graph needs a config.edn."""
        with pytest.raises(FileNotFoundError):
            GraphConfig.load(tmp_path)

    def test_immutable(self):
        """Test that the config is frozen."""
        config = GraphConfig()

        with pytest.raises(ValidationError):
            config.pages_directory = "other"


class TestGraphSettings:
    """Test the graph section of the settings file."""

    def test_valid_path(self, tmp_path):
        """Test creating settings with an existing directory."""
        settings = GraphSettings(path=str(tmp_path), block_time_format="HH:mm")

        assert Path(settings.path) == tmp_path
        assert settings.block_time_format == "HH:mm"

    def test_home_is_expanded(self, isolated_home):
        """Test that ~ refers to the home directory."""
        (isolated_home / "notes").mkdir()

        settings = GraphSettings(path="~/notes")

        assert Path(settings.path) == isolated_home / "notes"

    def test_nonexistent_path(self, tmp_path):
        """Test that the graph directory must exist."""
        with pytest.raises(ValidationError, match="Graph path does not exist"):
            GraphSettings(path=str(tmp_path / "missing"))

    def test_file_not_directory(self, tmp_path):
        """Test that the graph path must be a directory."""
        file_path = tmp_path / "not-a-dir.txt"
        file_path.touch()

        with pytest.raises(ValidationError, match="not a directory"):
            GraphSettings(path=str(file_path))


class TestSectionDefaults:
    """Test the optional sections."""

    def test_index_defaults(self):
        settings = IndexSettings()

        assert settings.enabled is True
        assert settings.path is None

    def test_watch_defaults(self):
        assert WatchSettings().debounce_seconds == 1.0

    @pytest.mark.parametrize("value", [0, -1, 61])
    def test_watch_debounce_range(self, value):
        """Test that the debounce period is bounded."""
        with pytest.raises(ValidationError):
            WatchSettings(debounce_seconds=value)


class TestConfigManager:
    """Test loading the settings file."""

    def test_load_from_path(self, tmp_path):
        """Test reading every section."""
        graph = tmp_path / "notes"
        graph.mkdir()
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            f"graph:\n"
            f"  path: {graph}\n"
            f"  block_time_format: HH:mm\n"
            f"index:\n"
            f"  enabled: false\n"
            f"watch:\n"
            f"  debounce_seconds: 0.5\n"
        )

        manager = ConfigManager.load_from_path(config_file)

        assert manager.graph.path == str(graph)
        assert manager.graph.block_time_format == "HH:mm"
        assert manager.index.enabled is False
        assert manager.watch.debounce_seconds == 0.5
        assert isinstance(manager.settings(), Settings)

    def test_missing_file(self, tmp_path):
        """Test that a missing settings file is a ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            ConfigManager.load_from_path(tmp_path / "config.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test that broken YAML is a ConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("graph: [unclosed\n")

        with pytest.raises(ConfigError, match="not valid YAML"):
            ConfigManager.load_from_path(config_file)

    def test_not_a_mapping(self, tmp_path):
        """Test that the settings file must hold a mapping."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            ConfigManager.load_from_path(config_file)

    def test_sections_are_validated_lazily(self, tmp_path):
        """Test that a broken section only fails when it is used."""
        manager = ConfigManager({
            "graph": {"path": str(tmp_path)},
            "watch": {"debounce_seconds": "soon"},
        })

        assert manager.graph.path == str(tmp_path)
        assert manager.index.enabled is True
        with pytest.raises(ConfigError, match="Watch configuration invalid"):
            manager.watch

    def test_missing_graph_section(self):
        """Test that the graph section is required."""
        with pytest.raises(ConfigError, match="'graph' is missing"):
            ConfigManager({}).graph

    def test_unknown_field_type(self):
        """Test that a section that is not a mapping is reported."""
        with pytest.raises(ConfigError, match="Index configuration invalid"):
            ConfigManager({"index": ["enabled"]}).index


class TestDefaultIndexPath:
    """Test where index databases are kept."""

    def test_in_cache_directory(self, tmp_path, isolated_home):
        path = default_index_path(tmp_path / "notes")

        assert path.parent == isolated_home / ".cache" / "logseq-graph" / "index"
        assert path.name.startswith("notes-")
        assert path.suffix == ".sqlite"

    def test_one_file_per_graph(self, tmp_path):
        """Test that graphs with the same name get different files."""
        first = default_index_path(tmp_path / "a" / "notes")
        second = default_index_path(tmp_path / "b" / "notes")

        assert first != second
        assert default_index_path(tmp_path / "a" / "notes") == first
