"""
TranslatedSelectAttribute — the attribute facade.

Composes ReferenceResolver, OrderingEngine, OptionSetBuilder and
SearchIndexer behind the methods the framework's listing, filtering and
editing layers call. Every method takes an optional LanguageContext; when
omitted, the owning model's default languages are used.

Each operation is timed and pushed to the structured log queue
(attributes/execution and attributes/performance).
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Mapping, Optional

from translated_select.attribute.capabilities import SelectAttribute, Translatable
from translated_select.attribute.context import LanguageContext, MetaModel
from translated_select.attribute.options import FilterOption, OptionSetBuilder
from translated_select.attribute.ordering import OrderingEngine
from translated_select.attribute.resolver import ReferenceResolver
from translated_select.attribute.search import SearchIndexer
from translated_select.attribute.source import ReferenceSource
from translated_select.db.base import ReferenceStore
from translated_select.engine.config import AttributeConfig, Settings, get_attribute_setting_names
from translated_select.engine.logging import log, log_attribute_operation, log_attribute_performance

logger = logging.getLogger("translated_select.attribute.translated_select")


class TranslatedSelectAttribute(SelectAttribute, Translatable):
    """
    A select attribute whose reference table holds one row per language.

    Usage:
        attribute = TranslatedSelectAttribute(config, MetaModel("mm_products", "de", "en"), store)
        rows = attribute.get_data_for([1, 2, 3])
        ordered = attribute.sort_ids([1, 2, 3], "ASC")
    """

    def __init__(self, config: AttributeConfig, metamodel: MetaModel, store: ReferenceStore):
        self.config = config
        self.metamodel = metamodel
        self.store = store
        self.source = ReferenceSource(config, metamodel.table_name, store)
        self.resolver = ReferenceResolver(self.source)
        self.ordering = OrderingEngine(self.source)
        self.options = OptionSetBuilder(self.source)
        self.searcher = SearchIndexer(self.source)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        model_name: str,
        col_name: str,
        store: ReferenceStore,
    ) -> "TranslatedSelectAttribute":
        model_config = settings.metamodel(model_name)
        return cls(
            settings.attribute(model_name, col_name),
            MetaModel.from_config(model_config),
            store,
        )

    def __repr__(self) -> str:
        return f"<TranslatedSelectAttribute({self.source.attribute_ref} → {self.config.source_table or '-'})>"

    # ------------------------------------------------------------------
    # Settings accessors
    # ------------------------------------------------------------------

    def get(self, setting_name: str) -> Any:
        """Raw setting value by framework setting name (select_table, ...)."""
        return self.config.to_settings().get(setting_name)

    def get_col_name(self) -> str:
        return self.config.col_name

    def get_meta_model(self) -> MetaModel:
        return self.metamodel

    def get_select_source(self) -> str:
        return self.config.source_table

    def get_id_column(self) -> str:
        return self.config.id_column

    def get_value_column(self) -> str:
        return self.config.value_column

    def get_alias_column(self) -> str:
        return self.config.effective_alias_column

    def get_additional_where(self) -> Optional[str]:
        return self.config.additional_where

    def get_sorting_column(self) -> str:
        return self.config.effective_sort_column

    def get_language_column(self) -> str:
        return self.config.language_column

    def get_sorting_override_table(self) -> Optional[str]:
        return self.config.sort_override_table

    def get_sorting_override_column(self) -> str:
        return self.config.sort_override_column

    @staticmethod
    def get_attribute_setting_names() -> List[str]:
        return get_attribute_setting_names()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_data_for(
        self, ids: Iterable[int], lang: Optional[LanguageContext] = None
    ) -> Dict[int, Dict[str, Any]]:
        """Reference rows per item in the active language, falling back where missing."""
        ids = list(ids)
        lang = self._lang(lang)
        with self._operation("get_data", lang, len(ids)) as stats:
            result = self.resolver.resolve_with_fallback(ids, lang)
            stats["result_count"] = len(result)
        return result

    def get_translated_data_for(self, ids: Iterable[int], lang_code: str) -> Dict[int, Dict[str, Any]]:
        ids = list(ids)
        with self._operation("get_translated_data", LanguageContext(lang_code, lang_code), len(ids)) as stats:
            result = self.resolver.resolve(ids, lang_code)
            stats["result_count"] = len(result)
        return result

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def set_data_for(self, values: Mapping[int, Mapping[str, Any]], lang: Optional[LanguageContext] = None) -> None:
        self.set_translated_data_for(values, self._lang(lang).active)

    def set_translated_data_for(self, values: Mapping[int, Mapping[str, Any]], lang_code: str) -> None:
        with self._operation("set_translated_data", LanguageContext(lang_code, lang_code), len(values)) as stats:
            stats["result_count"] = self.resolver.set_translated_values(values, lang_code)

    def unset_value_for(self, ids: Iterable[int], lang_code: str) -> None:
        ids = list(ids)
        with self._operation("unset_value", LanguageContext(lang_code, lang_code), len(ids)) as stats:
            stats["result_count"] = self.resolver.unset_values(ids)

    # ------------------------------------------------------------------
    # Listing, filtering, searching
    # ------------------------------------------------------------------

    def sort_ids(self, ids: Iterable[int], direction: str, lang: Optional[LanguageContext] = None) -> List[int]:
        ids = list(ids)
        lang = self._lang(lang)
        with self._operation("sort_ids", lang, len(ids)) as stats:
            result = self.ordering.sort_ids(ids, direction, lang)
            stats["result_count"] = len(result)
        return result

    def get_filter_options(
        self,
        id_list: Optional[Iterable[int]],
        used_only: bool,
        lang: Optional[LanguageContext] = None,
    ) -> List[FilterOption]:
        if id_list is not None:
            id_list = list(id_list)
        lang = self._lang(lang)
        with self._operation("filter_options", lang, None if id_list is None else len(id_list)) as stats:
            result = self.options.build_options(id_list, used_only, lang)
            stats["result_count"] = len(result)
        return result

    def search_for(self, pattern: str, lang: Optional[LanguageContext] = None) -> List[int]:
        """Search the active language."""
        lang = self._lang(lang)
        with self._operation("search", lang) as stats:
            result = self.searcher.search(pattern, lang)
            stats["result_count"] = len(result)
        return result

    def search_for_in_languages(self, pattern: str, languages: Iterable[str] = ()) -> List[int]:
        languages = list(languages)
        with self._operation("search_in_languages") as stats:
            result = self.searcher.search_in_languages(pattern, languages)
            stats["result_count"] = len(result)
        return result

    # ------------------------------------------------------------------
    # Widget conversion
    # ------------------------------------------------------------------

    def value_to_widget(self, value: Optional[Mapping[str, Any]], lang: Optional[LanguageContext] = None) -> Any:
        """Alias to preselect in a widget for a stored reference row."""
        with self._operation("value_to_widget", self._lang(lang)):
            return self.resolver.translate_row(value, self._lang(lang))

    def widget_to_value(self, value: Any, lang: Optional[LanguageContext] = None) -> Optional[Dict[str, Any]]:
        """Reference row for an alias submitted by a widget."""
        with self._operation("widget_to_value", self._lang(lang)):
            return self.resolver.lookup_alias(value, self._lang(lang))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lang(self, lang: Optional[LanguageContext]) -> LanguageContext:
        return lang if lang is not None else self.metamodel.language_context()

    @contextmanager
    def _operation(
        self,
        operation: str,
        lang: Optional[LanguageContext] = None,
        input_count: Optional[int] = None,
    ) -> Generator[Dict[str, Any], None, None]:
        """Time one operation and log its outcome; failures are logged and re-raised."""
        stats: Dict[str, Any] = {"result_count": None}
        started = time.perf_counter()
        common = {
            "operation": operation,
            "attribute_ref": self.source.attribute_ref,
            "language": lang.active if lang else None,
            "fallback_language": lang.fallback if lang else None,
            "input_count": input_count,
        }
        try:
            yield stats
        except Exception as exc:
            duration_ms = round((time.perf_counter() - started) * 1000, 3)
            error = exc.to_dict() if hasattr(exc, "to_dict") else {
                "error_type": type(exc).__name__,
                "message": str(exc),
            }
            logger.warning(f"{self.source.attribute_ref}: {operation} failed: {exc}")
            log(log_attribute_operation(success=False, duration_ms=duration_ms, error=error, **common))
            raise

        duration_ms = round((time.perf_counter() - started) * 1000, 3)
        log(log_attribute_operation(
            success=True,
            duration_ms=duration_ms,
            result_count=stats["result_count"],
            **common,
        ))
        log(log_attribute_performance(operation, self.source.attribute_ref, duration_ms))
