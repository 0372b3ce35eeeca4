"""Configuration models for logseq-graph."""

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from logseq_graph.utils import edn
from logseq_graph.utils.dates import DateFormat
from logseq_graph.utils.filenames import TRIPLE_LOWBAR


def _lookup(data: dict, *keys: str) -> Any:
    """Return the first of ``keys`` present in ``data``.

    A key ``a/b`` also matches the nested form ``{:a {:b ...}}``.
    """
    for key in keys:
        if key in data:
            return data[key]

        namespace, sep, name = key.partition("/")
        if sep and isinstance(data.get(namespace), dict) and name in data[namespace]:
            return data[namespace][name]
    return None


class GraphConfig(BaseModel):
    """Settings of a graph, read from ``logseq/config.edn``."""

    journals_directory: str = Field(
        default="journals",
        description="Directory holding journal pages, relative to the graph"
    )

    pages_directory: str = Field(
        default="pages",
        description="Directory holding dedicated pages, relative to the graph"
    )

    journal_file_name_format: str = Field(
        default="yyyy_MM_dd",
        description="Date pattern of journal file names"
    )

    journal_page_title_format: str = Field(
        default="MMM do, yyyy",
        description="Date pattern of journal page titles"
    )

    file_name_format: str = Field(
        default=TRIPLE_LOWBAR,
        description="Convention mapping page titles to file names"
    )

    default_journal_template: Optional[str] = Field(
        default=None,
        description="Template page used to seed new journal pages"
    )

    model_config = {"frozen": True}

    @field_validator("journal_file_name_format", "journal_page_title_format")
    @classmethod
    def validate_date_format(cls, v: str) -> str:
        """Reject empty date patterns."""
        if not v.strip():
            raise ValueError("Date format must not be empty")
        return v

    @property
    def journal_file_format(self) -> DateFormat:
        return DateFormat(self.journal_file_name_format)

    @property
    def journal_title_format(self) -> DateFormat:
        return DateFormat(self.journal_page_title_format)

    @classmethod
    def from_edn(cls, text: str) -> "GraphConfig":
        """
        Build the configuration from the text of ``config.edn``.

        Keys that are not understood are ignored.

        Raises:
            ValueError: If the text is not an EDN map or a value is invalid
        """
        data = edn.loads(text)
        if not isinstance(data, dict):
            raise ValueError("config.edn must contain a map")

        values: dict[str, Any] = {}

        for field, keys in (
            ("journals_directory", ("journals-directory",)),
            ("pages_directory", ("pages-directory",)),
            ("journal_file_name_format", ("journal/file-name-format",)),
            ("journal_page_title_format", ("journal/page-title-format",)),
            ("file_name_format", ("file/name-format",)),
        ):
            value = _lookup(data, *keys)
            if value is not None:
                values[field] = str(value)

        templates = data.get("default-templates")
        if isinstance(templates, dict) and templates.get("journals"):
            values["default_journal_template"] = str(templates["journals"])

        return cls(**values)

    @classmethod
    def load(cls, path: Path) -> "GraphConfig":
        """
        Load the configuration of the graph at ``path``.

        Args:
            path: Graph directory

        Raises:
            FileNotFoundError: If ``logseq/config.edn`` does not exist
            ValueError: If the file cannot be read as configuration
        """
        config_path = path / "logseq" / "config.edn"
        return cls.from_edn(config_path.read_text(encoding="utf-8"))


class GraphSettings(BaseModel):
    """Which graph the command line works on."""

    path: str = Field(
        ...,
        description="Path to Logseq graph directory"
    )

    block_time_format: Optional[str] = Field(
        default=None,
        description="Time stamp pattern prefixed to blocks added to journals, such as 'HH:mm'"
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate graph path exists and is a directory."""
        path = Path(v).expanduser()
        if not path.exists():
            raise ValueError(
                f"Graph path does not exist: {path}\n"
                f"Please create the directory or update config.yaml"
            )
        if not path.is_dir():
            raise ValueError(
                f"Graph path is not a directory: {path}\n"
                f"Please provide a valid directory path"
            )
        return str(path)

    model_config = {"frozen": True}


class IndexSettings(BaseModel):
    """Full-text index settings."""

    enabled: bool = Field(
        default=True,
        description="Keep a search index of the graph"
    )

    path: Optional[str] = Field(
        default=None,
        description="Index database file, defaults to a per-graph file in the cache directory"
    )

    model_config = {"frozen": True}


class WatchSettings(BaseModel):
    """File watcher settings."""

    debounce_seconds: float = Field(
        default=1.0,
        gt=0,
        le=60,
        description="Quiet period before a changed file is processed"
    )

    model_config = {"frozen": True}


class Settings(BaseModel):
    """Root settings of the logseq-graph command line tool."""

    graph: GraphSettings = Field(..., description="Graph settings")
    index: IndexSettings = Field(default_factory=IndexSettings, description="Index settings")
    watch: WatchSettings = Field(default_factory=WatchSettings, description="Watcher settings")

    model_config = {"frozen": True}
