"""Configuration management for schemapack using Pydantic models."""

import json
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.json_schema import GenerateJsonSchema

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_ID = "Schema"
CONFIG_FILE_NAME = ".schemapack.json"

# Computed by the builder from the effective $id; never taken from callers
RESERVED_OPTION_KEYS = ("basePath", "base_path")


class RefStrategy(str, Enum):
    """How named and repeated substructures are emitted."""
    NONE = "none"
    ROOT = "root"
    SEEN = "seen"


class Target(str, Enum):
    """Output dialect of the generated document."""
    JSON_SCHEMA_7 = "jsonSchema7"
    JSON_SCHEMA_2019_09 = "jsonSchema2019-09"
    JSON_SCHEMA_2020_12 = "jsonSchema2020-12"
    OPENAPI_3 = "openApi3"


TARGET_ALIASES = {
    "draft-07": Target.JSON_SCHEMA_7,
    "draft7": Target.JSON_SCHEMA_7,
    "draft-2019-09": Target.JSON_SCHEMA_2019_09,
    "2019-09": Target.JSON_SCHEMA_2019_09,
    "draft-2020-12": Target.JSON_SCHEMA_2020_12,
    "2020-12": Target.JSON_SCHEMA_2020_12,
    "openapi-3": Target.OPENAPI_3,
    "openapi3": Target.OPENAPI_3,
}


class NameStrategy(str, Enum):
    """How the `name` option is applied to the root schema."""
    REF = "ref"
    TITLE = "title"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class BuildOptions(BaseModel):
    """Options accepted by build_json_schemas.

    Keys use the JSON-style aliases (``$id``, ``$refStrategy``, ...) or the
    Python field names. ``basePath`` is not an option: the builder always
    anchors generated paths at ``"{$id}#"`` and drops a caller value.
    """
    schema_id: str | None = Field(alias="$id", default=None)
    ref_strategy: RefStrategy = Field(alias="$refStrategy", default=RefStrategy.NONE)
    target: Target = Target.JSON_SCHEMA_7
    definition_path: str = Field(alias="definitionPath", default="definitions")
    name: str | None = None
    name_strategy: NameStrategy = Field(alias="nameStrategy", default=NameStrategy.REF)
    definitions: dict[str, Any] = Field(default_factory=dict)
    mode: Literal["validation", "serialization"] = "validation"
    additional_properties: bool = Field(alias="additionalProperties", default=False)
    schema_generator: type[GenerateJsonSchema] = Field(alias="schemaGenerator", default=GenerateJsonSchema)
    post_process: Callable[[dict[str, Any]], dict[str, Any]] | None = Field(alias="postProcess", default=None)

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def drop_reserved_keys(cls, data):
        if isinstance(data, Mapping):
            reserved = [key for key in RESERVED_OPTION_KEYS if key in data]
            if reserved:
                logger.debug(f"Ignoring reserved option(s) {reserved}; base path is derived from $id")
                data = {key: value for key, value in data.items() if key not in RESERVED_OPTION_KEYS}
        return data

    @field_validator("target", mode="before")
    @classmethod
    def normalize_target(cls, v):
        if isinstance(v, str) and not isinstance(v, Target):
            return TARGET_ALIASES.get(v.lower(), v)
        return v

    @field_validator("definition_path")
    @classmethod
    def validate_definition_path(cls, v):
        if not v or "/" in v:
            raise ValueError(f"definitionPath must be a non-empty key without '/', got: {v!r}")
        return v

    @property
    def effective_id(self) -> str:
        """The $id of the document, falling back to the default identifier."""
        return self.schema_id if self.schema_id is not None else DEFAULT_SCHEMA_ID

    def explicit_options(self) -> dict[str, Any]:
        """Fields the caller actually set, keyed by field name."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def merged_with(self, overrides: "BuildOptions | Mapping[str, Any] | None") -> "BuildOptions":
        """Shallow merge: fields set on ``overrides`` win key by key."""
        merged = self.explicit_options()
        merged.update(coerce_options(overrides).explicit_options())
        return BuildOptions(**merged)


def coerce_options(opts: BuildOptions | Mapping[str, Any] | None) -> BuildOptions:
    """Accept None, a mapping of option keys, or a BuildOptions instance."""
    if opts is None:
        return BuildOptions()
    if isinstance(opts, BuildOptions):
        return opts
    return BuildOptions.model_validate(dict(opts))


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO

    model_config = ConfigDict(use_enum_values=True)


class SchemapackConfig(BaseModel):
    """Complete schemapack project configuration model."""
    options: dict[str, Any] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")

    @field_validator("options")
    @classmethod
    def validate_options(cls, v):
        # Validate eagerly so a bad file fails at load time, keep only the keys given
        coerce_options(v)
        return v

    def build_options(self, overrides: Mapping[str, Any] | None = None) -> BuildOptions:
        """File options with command-line overrides layered on top."""
        return coerce_options(self.options).merged_with(overrides)


def load_config(config_path: str | Path | None = None) -> SchemapackConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .schemapack.json

    Returns:
        SchemapackConfig: Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path is None:
        return SchemapackConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e

    try:
        config = SchemapackConfig(**config_data)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e

    logger.debug(f"Loaded configuration from {config_path}")
    return config


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .schemapack.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None
