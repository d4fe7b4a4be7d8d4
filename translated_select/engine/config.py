"""
translated_select Configuration — Load and validate translated_select.yaml.

Attribute settings accept both the python field names and the setting
names the framework stores per attribute (select_table, select_id, ...),
so a settings row can be validated as-is.

Usage:
    from translated_select.engine.config import load_settings, get_settings, AttributeConfig
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from translated_select.engine.errors import ConfigError

CONFIG_FILE_NAME = "translated_select.yaml"

# Settings every select attribute understands.
SELECT_SETTING_NAMES = (
    "select_table",
    "select_column",
    "select_id",
    "select_alias",
    "select_where",
    "select_sorting",
)

# Settings added by the translated variant.
TRANSLATED_SETTING_NAMES = (
    "select_langcolumn",
    "select_srctable",
    "select_srcsorting",
)


# ---------------------------------------------------------------------------
# Attribute configuration
# ---------------------------------------------------------------------------

class AttributeConfig(BaseModel):
    """
    Immutable description of one translated select attribute and the
    reference table it draws its values from.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    col_name: str = Field(alias="colname")
    source_table: str = Field("", alias="select_table")
    id_column: str = Field("", alias="select_id")
    alias_column: Optional[str] = Field(None, alias="select_alias")
    value_column: str = Field("", alias="select_column")
    language_column: str = Field("", alias="select_langcolumn")
    additional_where: Optional[str] = Field(None, alias="select_where")
    sort_column: Optional[str] = Field(None, alias="select_sorting")
    sort_override_table: Optional[str] = Field(None, alias="select_srctable")
    sort_override_column: str = Field("id", alias="select_srcsorting")

    @field_validator("source_table", "id_column", "value_column", "language_column", mode="before")
    @classmethod
    def none_to_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator(
        "alias_column", "additional_where", "sort_column", "sort_override_table",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("sort_override_column", mode="before")
    @classmethod
    def default_override_column(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "id"
        return v

    @field_validator("col_name")
    @classmethod
    def validate_col_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("col_name must not be empty")
        return v

    @property
    def is_configured(self) -> bool:
        """True when both the reference table and its id column are set."""
        return bool(self.source_table and self.id_column)

    @property
    def effective_alias_column(self) -> str:
        return self.alias_column or self.id_column

    @property
    def effective_sort_column(self) -> str:
        return self.sort_column or self.id_column

    @property
    def has_sort_override(self) -> bool:
        return bool(self.sort_override_table and self.sort_override_column)

    def to_settings(self) -> Dict[str, Any]:
        """Return the configuration keyed by framework setting names."""
        return self.model_dump(by_alias=True)


def get_attribute_setting_names() -> List[str]:
    """All setting names a translated select attribute reads."""
    return list(SELECT_SETTING_NAMES) + list(TRANSLATED_SETTING_NAMES)


# ---------------------------------------------------------------------------
# Pydantic models for translated_select.yaml
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    url: str = "sqlite:///metamodels.db"
    pool_pre_ping: bool = True
    echo: bool = False


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".translated_select/logs"
    flush_interval_ms: int = 100
    flush_batch_size: int = 50
    max_queue_size: int = 10000

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"level must be DEBUG/INFO/WARNING/ERROR, got '{v}'")
        return v


class MetaModelConfig(BaseModel):
    """One owning model: its table, default languages and select attributes."""
    table_name: str
    active_language: str = "en"
    fallback_language: str = "en"
    attributes: Dict[str, AttributeConfig] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def inject_col_names(cls, data: Any) -> Any:
        # Attribute entries are keyed by their column name.
        if isinstance(data, dict) and isinstance(data.get("attributes"), dict):
            attributes = {}
            for col_name, raw in data["attributes"].items():
                if isinstance(raw, dict) and "colname" not in raw and "col_name" not in raw:
                    raw = {**raw, "colname": col_name}
                attributes[col_name] = raw
            data = {**data, "attributes": attributes}
        return data


class Settings(BaseModel):
    """Root model for translated_select.yaml."""
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    models: Dict[str, MetaModelConfig] = Field(default_factory=dict)

    def metamodel(self, model_name: str) -> MetaModelConfig:
        if model_name not in self.models:
            raise ConfigError(
                f"Model '{model_name}' not configured. Available: {list(self.models.keys())}",
                model=model_name,
            )
        return self.models[model_name]

    def attribute(self, model_name: str, col_name: str) -> AttributeConfig:
        model = self.metamodel(model_name)
        if col_name not in model.attributes:
            raise ConfigError(
                f"Attribute '{col_name}' not configured on model '{model_name}'",
                attribute_ref=f"{model_name}.{col_name}",
            )
        return model.attributes[col_name]


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_settings: Optional[Settings] = None


def _find_config_file() -> Path:
    """Walk up from CWD looking for translated_select.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILE_NAME).exists():
            return parent / CONFIG_FILE_NAME
    return current / CONFIG_FILE_NAME


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load and validate translated_select.yaml.

    Args:
        config_path: Explicit path to the settings file. If None, auto-discovers.

    Returns:
        Validated Settings instance (defaults when the file does not exist).
    """
    global _settings

    path = Path(config_path) if config_path else _find_config_file()
    if not path.exists():
        _settings = Settings()
        return _settings

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}", config_path=str(path)) from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping at top level", config_path=str(path))

    try:
        _settings = Settings(**raw)
    except PydanticValidationError as exc:
        raise ConfigError(
            f"Invalid settings in {path}",
            config_path=str(path),
            validation_errors=exc.errors(include_url=False),
        ) from exc
    return _settings


def get_settings() -> Settings:
    """Get the currently loaded settings, loading if necessary."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next get_settings() reloads."""
    global _settings
    _settings = None
