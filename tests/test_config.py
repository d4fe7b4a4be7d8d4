"""Unit tests for translated_select.engine.config — AttributeConfig, Settings, loading."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from translated_select.engine.config import (
    AttributeConfig,
    LoggingConfig,
    Settings,
    get_attribute_setting_names,
    get_settings,
    load_settings,
    reset_settings,
)
from translated_select.engine.errors import ConfigError


SETTINGS_YAML = """
database:
  url: sqlite:///catalog.db
  echo: true
logging:
  level: debug
  directory: /tmp/ts-logs
models:
  products:
    table_name: mm_products
    active_language: de
    fallback_language: en
    attributes:
      color:
        select_table: tl_colors
        select_id: pid
        select_column: name
        select_alias: alias
        select_langcolumn: lang
        select_sorting: sorting
        select_srctable: tl_color_master
        select_srcsorting: position
"""


class TestAttributeConfig:
    """Test AttributeConfig Pydantic model."""

    def test_from_setting_names(self):
        cfg = AttributeConfig(**{
            "colname": "color",
            "select_table": "tl_colors",
            "select_id": "pid",
            "select_column": "name",
            "select_langcolumn": "lang",
        })
        assert cfg.col_name == "color"
        assert cfg.source_table == "tl_colors"
        assert cfg.id_column == "pid"
        assert cfg.is_configured

    def test_defaults(self):
        cfg = AttributeConfig(col_name="color", source_table="tl_colors", id_column="pid")
        assert cfg.effective_alias_column == "pid"
        assert cfg.effective_sort_column == "pid"
        assert cfg.sort_override_column == "id"
        assert not cfg.has_sort_override

    def test_blank_settings_become_none(self):
        cfg = AttributeConfig(
            colname="color",
            select_alias="",
            select_where="  ",
            select_sorting="",
            select_srctable="",
            select_srcsorting="",
        )
        assert cfg.alias_column is None
        assert cfg.additional_where is None
        assert cfg.sort_column is None
        assert cfg.sort_override_table is None
        assert cfg.sort_override_column == "id"

    def test_null_required_settings_become_blank(self):
        cfg = AttributeConfig(colname="color", select_table=None, select_id=None)
        assert cfg.source_table == ""
        assert not cfg.is_configured

    def test_partial_configuration(self):
        assert not AttributeConfig(col_name="color", source_table="tl_colors").is_configured
        assert not AttributeConfig(col_name="color", id_column="pid").is_configured

    def test_empty_col_name(self):
        with pytest.raises(PydanticValidationError):
            AttributeConfig(col_name="  ")

    def test_frozen(self):
        cfg = AttributeConfig(col_name="color")
        with pytest.raises(PydanticValidationError):
            cfg.source_table = "tl_other"

    def test_override_requires_table(self):
        cfg = AttributeConfig(col_name="color", select_srctable="tl_color_master")
        assert cfg.has_sort_override

    def test_to_settings(self):
        cfg = AttributeConfig(col_name="color", source_table="tl_colors", id_column="pid")
        settings = cfg.to_settings()
        assert settings["colname"] == "color"
        assert settings["select_table"] == "tl_colors"
        assert settings["select_srcsorting"] == "id"

    def test_setting_names(self):
        names = get_attribute_setting_names()
        assert names[:6] == [
            "select_table", "select_column", "select_id",
            "select_alias", "select_where", "select_sorting",
        ]
        assert names[6:] == ["select_langcolumn", "select_srctable", "select_srcsorting"]


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.database.url == "sqlite:///metamodels.db"
        assert settings.logging.level == "INFO"
        assert settings.models == {}

    def test_logging_level(self):
        assert LoggingConfig(level="warning").level == "WARNING"
        with pytest.raises(ValueError, match="DEBUG/INFO/WARNING/ERROR"):
            LoggingConfig(level="verbose")

    def test_attribute_lookup(self):
        settings = Settings(models={
            "products": {
                "table_name": "mm_products",
                "attributes": {"color": {"select_table": "tl_colors"}},
            },
        })
        cfg = settings.attribute("products", "color")
        assert cfg.col_name == "color"
        assert cfg.source_table == "tl_colors"

    def test_unknown_model(self):
        with pytest.raises(ConfigError, match="not configured"):
            Settings().metamodel("products")

    def test_unknown_attribute(self):
        settings = Settings(models={"products": {"table_name": "mm_products"}})
        with pytest.raises(ConfigError) as exc_info:
            settings.attribute("products", "size")
        assert exc_info.value.attribute_ref == "products.size"


class TestLoadSettings:

    def test_load_file(self, tmp_path):
        path = tmp_path / "translated_select.yaml"
        path.write_text(SETTINGS_YAML)

        settings = load_settings(str(path))
        assert settings.database.url == "sqlite:///catalog.db"
        assert settings.database.echo is True
        assert settings.logging.level == "DEBUG"

        model = settings.metamodel("products")
        assert model.active_language == "de"
        cfg = model.attributes["color"]
        assert cfg.col_name == "color"
        assert cfg.sort_override_table == "tl_color_master"
        assert cfg.sort_override_column == "position"

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "nope.yaml"))
        assert settings.models == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "translated_select.yaml"
        path.write_text("")
        assert load_settings(str(path)).models == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "translated_select.yaml"
        path.write_text("models: [unclosed")
        with pytest.raises(ConfigError) as exc_info:
            load_settings(str(path))
        assert exc_info.value.config_path == str(path)

    def test_top_level_not_a_mapping(self, tmp_path):
        path = tmp_path / "translated_select.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(str(path))

    def test_validation_errors_are_collected(self, tmp_path):
        path = tmp_path / "translated_select.yaml"
        path.write_text("logging:\n  level: chatty\n")
        with pytest.raises(ConfigError) as exc_info:
            load_settings(str(path))
        errors = exc_info.value.validation_errors
        assert errors and errors[0]["loc"] == ("logging", "level")

    def test_discovered_from_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "translated_select.yaml").write_text(SETTINGS_YAML)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert "products" in get_settings().models

    def test_get_settings_caches(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first
