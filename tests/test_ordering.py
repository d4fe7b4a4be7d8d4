"""Unit tests for translated_select.attribute.ordering — OrderingEngine."""

import pytest

from translated_select.attribute.context import LanguageContext
from translated_select.attribute.ordering import OrderingEngine, normalize_direction
from translated_select.engine.errors import ValidationError

DE_EN = LanguageContext("de", "en")
EN_DE = LanguageContext("en", "de")


class TestNormalizeDirection:

    def test_accepts_any_case(self):
        assert normalize_direction("asc") == "ASC"
        assert normalize_direction(" Desc ") == "DESC"

    @pytest.mark.parametrize("direction", ["", "up", "ASC; DROP TABLE x", None])
    def test_rejects_other_values(self, direction):
        with pytest.raises(ValidationError, match="ASC or DESC"):
            normalize_direction(direction)


class TestSortByTranslation:
    """No override table: order by the first translation's sorting column."""

    def test_active_language_first(self, make_source, config):
        engine = OrderingEngine(make_source(config))
        # Rot (5), Green via fallback (10), Blau (20)
        assert engine.sort_ids([3, 2, 1], "ASC", DE_EN) == [1, 2, 3]

    def test_descending(self, make_source, config):
        engine = OrderingEngine(make_source(config))
        assert engine.sort_ids([1, 2, 3], "DESC", DE_EN) == [3, 2, 1]

    def test_priority_changes_with_language(self, make_source, config):
        engine = OrderingEngine(make_source(config))
        # Red (30) now wins over Rot for item 1
        assert engine.sort_ids([1, 2, 3], "ASC", EN_DE) == [2, 3, 1]

    def test_keeps_every_id(self, make_source, config):
        engine = OrderingEngine(make_source(config))
        result = engine.sort_ids([1, 2, 3, 4, 5, 6], "ASC", DE_EN)
        assert sorted(result) == [1, 2, 3, 4, 5, 6]
        # the item without a value sorts first (NULL), Boots' Black last
        assert result[0] == 5
        assert result[-1] == 6

    def test_table_qualified_additional_where(self, make_source, qualified_config):
        engine = OrderingEngine(make_source(qualified_config))
        # Black is unpublished, so Boots has no usable value and sorts first
        assert engine.sort_ids([1, 2, 3, 6], "ASC", DE_EN) == [6, 1, 2, 3]

    def test_empty_ids_issue_no_query(self, make_source, config, mock_store):
        engine = OrderingEngine(make_source(config, mock_store))
        assert engine.sort_ids([], "ASC", DE_EN) == []
        assert mock_store.method_calls == []

    def test_unconfigured_source_keeps_input_order(self, make_source, unconfigured, mock_store):
        engine = OrderingEngine(make_source(unconfigured, mock_store))
        assert engine.sort_ids([3, 1, 2], "DESC", DE_EN) == [3, 1, 2]
        assert mock_store.method_calls == []


class TestSortByOverride:
    """Override table configured: languages play no part."""

    def test_orders_by_override_position(self, make_source, override_config):
        engine = OrderingEngine(make_source(override_config))
        # positions: pid 1 → 1, pid 3 → 2, pid 2 → 3
        assert engine.sort_ids([2, 3, 1], "ASC", DE_EN) == [1, 3, 2]
        assert engine.sort_ids([2, 3, 1], "DESC", DE_EN) == [2, 3, 1]

    @pytest.mark.parametrize("lang", [
        LanguageContext("de", "en"),
        LanguageContext("en", "de"),
        LanguageContext("en", "en"),
        LanguageContext("fr", "fr"),
    ])
    def test_language_independent(self, make_source, override_config, lang):
        engine = OrderingEngine(make_source(override_config))
        assert engine.sort_ids([1, 2, 3], "ASC", lang) == [1, 3, 2]

    def test_override_without_reference_table(self, make_source, unconfigured):
        cfg = unconfigured.model_copy(update={
            "sort_override_table": "tl_color_master",
            "sort_override_column": "position",
        })
        engine = OrderingEngine(make_source(cfg))
        assert engine.sort_ids([2, 3, 1], "ASC", DE_EN) == [1, 3, 2]
