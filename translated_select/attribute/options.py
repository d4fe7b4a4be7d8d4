"""
OptionSetBuilder — distinct filter options drawn from the reference table.

Every option is one logical reference id shown through its first
translation in language priority order, with the number of owning items
pointing at it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, select

from translated_select.attribute.context import LanguageContext
from translated_select.attribute.source import COUNT_LABEL, ROW_ID, SOURCE_ALIAS, ReferenceSource

logger = logging.getLogger("translated_select.attribute.options")


@dataclass(frozen=True)
class FilterOption:
    """One selectable filter value."""
    alias: Any
    value: Any
    count: int = 0


def options_to_mapping(options: Iterable[FilterOption]) -> Dict[Any, Any]:
    """alias → value, in option order."""
    return {option.alias: option.value for option in options}


def options_to_counts(options: Iterable[FilterOption]) -> Dict[Any, int]:
    """alias → count, in option order."""
    return {option.alias: option.count for option in options}


class OptionSetBuilder:
    """Builds filter options for one attribute."""

    def __init__(self, source: ReferenceSource):
        self.source = source

    def build_options(
        self,
        id_filter: Optional[Iterable[int]],
        used_only: bool,
        lang: LanguageContext,
    ) -> List[FilterOption]:
        """
        Args:
            id_filter: Restrict to values used by these items. None means no
                       restriction; an empty collection means "no items" and
                       yields no options.
            used_only: With no id_filter, only list values some item uses.
            lang:      Active/fallback languages for picking translations.
        """
        if id_filter is not None:
            id_filter = list(id_filter)
            if not id_filter:
                return []
        if not self.source.configured:
            return []

        if id_filter is not None or used_only:
            stmt = self._used_values(id_filter, lang)
        else:
            stmt = self._all_values(lang)

        rows = self.source.store.fetch_all(stmt)
        options = self._convert(rows)
        logger.debug(f"{self.source.attribute_ref}: built {len(options)} filter options")
        return options

    def _used_values(self, id_filter: Optional[List[int]], lang: LanguageContext):
        src = self.source
        model = src.model()
        ref = src.reference(SOURCE_ALIAS)
        model_id = src.col(model, ROW_ID)
        first = src.first_translation_id(src.stored_column(model), lang.priority, correlate=model)

        stmt = (
            select(func.count(model_id).label(COUNT_LABEL), ref)
            .select_from(model.join(ref, src.col(ref, ROW_ID) == first))
            .group_by(src.col(ref, ROW_ID))
        )
        if id_filter is not None:
            stmt = stmt.where(model_id.in_(id_filter))
        return stmt.order_by(*self._ordering(ref))

    def _all_values(self, lang: LanguageContext):
        src = self.source
        ref = src.reference(SOURCE_ALIAS)
        first = src.first_translation_id(
            src.col(ref, src.config.id_column), lang.priority, correlate=ref,
        )

        return (
            select(func.count(src.col(ref, src.config.id_column)).label(COUNT_LABEL), ref)
            .where(src.col(ref, ROW_ID) == first)
            .group_by(src.col(ref, ROW_ID))
            .order_by(*self._ordering(ref))
        )

    def _ordering(self, ref) -> list:
        src = self.source
        ordering = []
        position = src.override_position(src.col(ref, src.config.id_column))
        if position is not None:
            ordering.append(position)
        ordering.append(src.natural_sort(ref))
        return ordering

    def _convert(self, rows: List[Dict[str, Any]]) -> List[FilterOption]:
        cfg = self.source.config
        alias_column = cfg.effective_alias_column
        options: Dict[Any, FilterOption] = {}
        for row in rows:
            alias = row.get(alias_column)
            if alias is None or alias in options:
                continue
            options[alias] = FilterOption(
                alias=alias,
                value=row.get(cfg.value_column),
                count=int(row.get(COUNT_LABEL) or 0),
            )
        return list(options.values())
